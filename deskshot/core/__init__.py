"""
Core package for deskshot.
Lightweight package init to avoid import cycles.

Consumers should import submodules directly, e.g.:
  from deskshot.core.platform import detect_platform, Platform
  from deskshot.core.engine import Engine, CaptureRequest
"""

__all__: list[str] = []
