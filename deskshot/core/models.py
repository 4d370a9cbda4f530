# deskshot/core/models.py
from __future__ import annotations

"""Capture data model
--------------------
Plain value objects passed between detection, enumeration, capture and
placement. Nothing here touches the OS except TemporaryArtifact.discard().
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional


@dataclass(frozen=True)
class Monitor:
    """One physical display in virtual-desktop coordinates (x/y may be negative)."""
    index: int
    x: int
    y: int
    width: int
    height: int

    @property
    def has_area(self) -> bool:
        return self.width > 0 and self.height > 0

    def describe(self) -> str:
        return f"Display {self.index}: {self.width}x{self.height} at ({self.x},{self.y})"


@dataclass(frozen=True)
class CaptureTarget:
    """Whole virtual desktop when `monitor` is None, else exactly one monitor."""
    monitor: Optional[Monitor] = None

    @property
    def prefix(self) -> str:
        return "DesktopImage" if self.monitor is None else f"DisplayImage{self.monitor.index}"

    @property
    def label(self) -> str:
        return "desktop" if self.monitor is None else f"display {self.monitor.index}"


@dataclass
class MonitorScan:
    """
    Result of enumeration.
    `error` is set when the platform query failed; monitors is then empty
    and callers fall back to whole-desktop capture.
    """
    monitors: List[Monitor] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def degraded(self) -> bool:
        return self.error is not None

    def __len__(self) -> int:
        return len(self.monitors)

    def find(self, index: int) -> Optional[Monitor]:
        return next((m for m in self.monitors if m.index == index), None)


def remove_quietly(path: Path | str) -> bool:
    """Best-effort delete. Returns True if the file is gone afterwards."""
    try:
        os.remove(path)
        return True
    except FileNotFoundError:
        return True
    except OSError:
        return False


@dataclass
class TemporaryArtifact:
    """
    Raster file written by a capture tool. Owned by whoever holds it;
    use as a context manager so it is deleted on every exit path.
    """
    path: Path

    def exists(self) -> bool:
        return self.path.is_file()

    def discard(self) -> bool:
        return remove_quietly(self.path)

    def __enter__(self) -> "TemporaryArtifact":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.discard()


@dataclass
class CaptureFailure:
    target: CaptureTarget
    error: str


@dataclass
class CaptureReport:
    """Outcome of one invocation: files written plus tolerated per-display failures."""
    outputs: List[Path] = field(default_factory=list)
    failures: List[CaptureFailure] = field(default_factory=list)

    @property
    def partial(self) -> bool:
        return bool(self.failures)
