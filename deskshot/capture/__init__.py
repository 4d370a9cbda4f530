"""
Capture package for deskshot.
Platform backends, host scripts, and output placement.
"""

from .backends import CaptureBackend, get_backend
from .converter import place_artifact

__all__ = [
    "CaptureBackend",
    "get_backend",
    "place_artifact",
]
