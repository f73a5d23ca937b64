"""
JSON serialization utilities
"""

import dataclasses
import json
from collections import defaultdict
from enum import Enum
from typing import Any, Mapping

import numpy as np


def safe_json_convert(obj: Any) -> Any:
    """Convert object to JSON-serializable format"""
    if isinstance(obj, Enum):
        return obj.value
    elif isinstance(obj, (bool, np.bool_)):
        return bool(obj)
    elif isinstance(obj, np.integer):
        return int(obj)
    elif isinstance(obj, np.floating):
        return float(obj)
    elif isinstance(obj, np.ndarray):
        return obj.tolist()
    elif isinstance(obj, set):
        return sorted(safe_json_convert(item) for item in obj)
    elif isinstance(obj, defaultdict):
        return {str(key): safe_json_convert(value) for key, value in obj.items()}
    elif isinstance(obj, Mapping):
        return {str(key): safe_json_convert(value) for key, value in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [safe_json_convert(item) for item in obj]
    elif hasattr(obj, 'to_dict'):
        return safe_json_convert(obj.to_dict())
    elif dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return safe_json_convert(dataclasses.asdict(obj))
    elif obj is None or isinstance(obj, (str, int, float)):
        return obj
    else:
        return str(obj)


def create_json_serializable(data: Any) -> Any:
    """Create JSON-serializable version of data"""
    return json.loads(json.dumps(safe_json_convert(data)))


def pretty_json(data: Any, indent: int = 2) -> str:
    """Convert data to pretty-printed JSON string"""
    return json.dumps(
        safe_json_convert(data),
        indent=indent,
        sort_keys=True
    )


def save_json(data: Any, filepath: str, indent: int = 2):
    """Save data to JSON file"""
    with open(filepath, 'w') as f:
        json.dump(safe_json_convert(data), f, indent=indent)


def load_json(filepath: str) -> Any:
    """Load data from JSON file"""
    with open(filepath, 'r') as f:
        return json.load(f)
