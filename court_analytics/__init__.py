"""
Court Analytics: multi-object tracking, kinematics and shot detection for racket sports video
"""

__version__ = "1.0.0"
