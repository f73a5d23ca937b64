"""
REST API interface for court analytics
"""

from .rest_api import create_api, run_api

__all__ = ['create_api', 'run_api']
