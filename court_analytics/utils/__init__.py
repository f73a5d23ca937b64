"""
Utility functions
"""

from .json_utils import safe_json_convert, create_json_serializable, pretty_json, save_json, load_json
from .logging import setup_logging, get_logger

__all__ = [
    'safe_json_convert', 'create_json_serializable', 'pretty_json', 'save_json', 'load_json',
    'setup_logging', 'get_logger'
]
