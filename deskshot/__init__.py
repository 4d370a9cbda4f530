"""
deskshot: desktop and per-display screenshots across Windows, macOS,
Linux and Linux running under Windows.
"""

__version__ = "1.1.0"

__all__ = ["__version__"]
