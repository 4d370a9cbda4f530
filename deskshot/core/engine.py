from __future__ import annotations

"""Capture engine
----------------
Sequences one invocation: enumerate monitors, capture the requested targets
one after another, and place each image under its final name. All files of a
run share the timestamp passed in by the caller.
"""

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from deskshot.capture.backends import CaptureBackend
from deskshot.capture.converter import place_artifact
from deskshot.core.errors import DeskshotError, DisplayNotFoundError
from deskshot.core.models import CaptureFailure, CaptureReport, CaptureTarget, MonitorScan
from deskshot.utils.logger import get_logger


TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"


def format_timestamp(ts: datetime) -> str:
    return ts.strftime(TIMESTAMP_FORMAT)


def build_filename(prefix: str, fmt: str, timestamp: datetime) -> str:
    """{prefix}_{YYYY-MM-DD}_{HH-MM-SS}.{format}"""
    return f"{prefix}_{format_timestamp(timestamp)}.{fmt}"


@dataclass
class CaptureRequest:
    """Options for one invocation (already merged from CLI and settings)."""
    output_dir: Path
    fmt: str = "png"
    quality: int = 100
    display: Optional[int] = None


def _noop(message: str) -> None:
    return None


class Engine:
    """Runs one capture invocation against a platform backend."""

    def __init__(self, backend: CaptureBackend, echo: Callable[[str], None] = _noop):
        self.backend = backend
        self.echo = echo
        self.log = get_logger(__name__)

    def run(self, request: CaptureRequest, timestamp: datetime, scan: Optional[MonitorScan] = None) -> CaptureReport:
        """
        Capture either the requested display or the desktop plus every display.

        Raises:
            DisplayNotFoundError when `request.display` is outside 1..N.
            CaptureError / ConversionError for the desktop image or a
            single requested display. Per-display failures in all-displays
            mode are recorded on the report instead.
        """
        request.output_dir.mkdir(parents=True, exist_ok=True)
        if scan is None:
            scan = self.backend.enumerate()
        if scan.degraded:
            self.log.warning(f"Could not enumerate monitors ({scan.error}); capturing the desktop only")

        if request.display is not None:
            return self._run_single(request, timestamp, scan)
        return self._run_all(request, timestamp, scan)

    # ----------- Branches -----------

    def _run_single(self, request: CaptureRequest, timestamp: datetime, scan: MonitorScan) -> CaptureReport:
        display = request.display
        monitor = scan.find(display) if 1 <= display <= len(scan) else None
        if monitor is None:
            raise DisplayNotFoundError(display, len(scan))

        self.echo(f"Capturing display {display}...")
        report = CaptureReport()
        path = self._capture_one(CaptureTarget(monitor), request, timestamp)
        self.echo(f"✓ Display {monitor.index} screenshot saved: {path}")
        report.outputs.append(path)
        return report

    def _run_all(self, request: CaptureRequest, timestamp: datetime, scan: MonitorScan) -> CaptureReport:
        report = CaptureReport()

        self.echo("Capturing desktop screenshot...")
        path = self._capture_one(CaptureTarget(), request, timestamp)
        self.echo(f"✓ Main desktop screenshot saved: {path}")
        report.outputs.append(path)

        if not scan.monitors:
            return report

        self.echo(f"Capturing {len(scan)} individual displays...")
        for monitor in scan.monitors:
            target = CaptureTarget(monitor)
            try:
                path = self._capture_one(target, request, timestamp)
            except DeskshotError as e:
                self.log.error(f"Failed to capture display {monitor.index}: {e}")
                report.failures.append(CaptureFailure(target=target, error=str(e)))
                continue
            self.echo(f"✓ Display {monitor.index} screenshot saved: {path}")
            report.outputs.append(path)
        return report

    # ----------- Internals -----------

    def _capture_one(self, target: CaptureTarget, request: CaptureRequest, timestamp: datetime) -> Path:
        destination = request.output_dir / build_filename(target.prefix, request.fmt, timestamp)
        artifact = self.backend.capture(target.monitor)
        self.log.debug(f"Captured {target.label} into {artifact.path}")
        return place_artifact(artifact, destination, request.fmt, request.quality)
