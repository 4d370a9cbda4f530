# deskshot/core/errors.py
from __future__ import annotations

"""Error taxonomy
----------------
Capture, validation, and conversion failures. Enumeration problems are not
errors; they surface as a degraded MonitorScan instead.
"""


class DeskshotError(Exception):
    """Base class for every failure the CLI reports as `Error: <message>`."""


class CaptureError(DeskshotError):
    """A platform capture tool failed, timed out, or wrote no file."""

    def __init__(self, message: str, diagnostic: str = ""):
        super().__init__(message)
        self.diagnostic = diagnostic


class TargetValidationError(DeskshotError):
    """A requested target is invalid before any tool is invoked."""


class DisplayNotFoundError(TargetValidationError):
    def __init__(self, requested: int, available: int):
        super().__init__(f"Display {requested} not found. Available displays: 1-{available}")
        self.requested = requested
        self.available = available


class InvalidMonitorError(TargetValidationError):
    def __init__(self, width: int, height: int):
        super().__init__(f"Invalid monitor dimensions: {width}x{height}")
        self.width = width
        self.height = height


class ConversionError(DeskshotError):
    """The image codec could not re-encode a captured artifact."""
