"""
Command-line interface for court analytics
"""

from .cli import cli

__all__ = ['cli']
