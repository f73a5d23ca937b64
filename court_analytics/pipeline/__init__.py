"""
Analysis pipeline
"""

from .session import AnalysisSession

__all__ = ['AnalysisSession']
