# deskshot/core/monitors.py
from __future__ import annotations

"""Monitor geometry parsing
--------------------------
Pure parsers for each platform's display query output, plus the shared
post-processing that drops empty geometries and assigns 1-based indexes.
Running the platform tools lives in deskshot.capture.backends.
"""

import json
import re
from dataclasses import replace
from typing import Iterable, List, Tuple

from deskshot.core.models import Monitor


# Fallback used when a display profiler entry has no resolution string
MACOS_DEFAULT_RESOLUTION: Tuple[int, int] = (1920, 1080)

_XRANDR_CONNECTED = re.compile(r"^(\S+) connected.*?(\d+)x(\d+)\+(-?\d+)\+(-?\d+)")
_RESOLUTION = re.compile(r"(\d+)\s*x\s*(\d+)")


def parse_bounds_lines(text: str) -> List[Monitor]:
    """
    Parse `x,y,width,height` per line (Windows screen bounds script output).
    Lines that are not four integers are skipped.
    """
    monitors: List[Monitor] = []
    for line in text.splitlines():
        line = line.strip()
        if not line:
            continue
        fields = [f.strip() for f in line.split(",")]
        if len(fields) != 4:
            continue
        try:
            x, y, w, h = (int(f) for f in fields)
        except ValueError:
            continue
        monitors.append(Monitor(index=len(monitors) + 1, x=x, y=y, width=w, height=h))
    return monitors


def parse_xrandr(text: str) -> List[Monitor]:
    """Parse `xrandr --query`; only `<name> connected ... WxH+X+Y` lines count."""
    monitors: List[Monitor] = []
    for line in text.splitlines():
        m = _XRANDR_CONNECTED.match(line)
        if not m:
            continue
        w, h, x, y = (int(m.group(i)) for i in (2, 3, 4, 5))
        monitors.append(Monitor(index=len(monitors) + 1, x=x, y=y, width=w, height=h))
    return monitors


def parse_resolution(value: object) -> Tuple[int, int]:
    """'2560 x 1440' or '2560 x 1440 @ 60.00Hz' -> (2560, 1440); default when absent."""
    if isinstance(value, str):
        m = _RESOLUTION.search(value)
        if m:
            return int(m.group(1)), int(m.group(2))
    return MACOS_DEFAULT_RESOLUTION


def parse_system_profiler(text: str) -> List[Monitor]:
    """
    Parse `system_profiler SPDisplaysDataType -json`.

    The profiler does not report display offsets, so every monitor is placed
    at (0, 0). Cropped captures on macOS are only as accurate as that allows.

    Raises:
        ValueError on malformed JSON.
    """
    data = json.loads(text)
    monitors: List[Monitor] = []
    for adapter in data.get("SPDisplaysDataType") or []:
        for display in adapter.get("spdisplays_ndrvs") or []:
            w, h = parse_resolution(display.get("_spdisplays_resolution"))
            monitors.append(Monitor(index=len(monitors) + 1, x=0, y=0, width=w, height=h))
    return monitors


def reading_order(monitors: Iterable[Monitor]) -> List[Monitor]:
    """Sort top-to-bottom, then left-to-right."""
    return sorted(monitors, key=lambda m: (m.y, m.x))


def normalize(monitors: Iterable[Monitor], sort: bool = False) -> List[Monitor]:
    """
    Drop monitors without area, optionally sort into reading order,
    then re-index 1..N.
    """
    kept = [m for m in monitors if m.has_area]
    if sort:
        kept = reading_order(kept)
    return [replace(m, index=i) for i, m in enumerate(kept, start=1)]
