# deskshot/core/paths.py
from __future__ import annotations

"""Guest/host path translation
-----------------------------
Under linux-under-windows the capture script runs on the Windows host while
this process reads the result from the Linux guest. Files are exchanged
through the host's temp directory as seen via the /mnt/<drive> bridge.

If that directory is not reachable we fall back to the guest's own temp
directory and pass the path through unchanged. The host tool then has to be
able to resolve a Linux path on its own; this is a known limitation of the
fallback and is logged as a warning when it is chosen.
"""

import os
import re
import tempfile
from dataclasses import dataclass
from pathlib import Path, PurePosixPath, PureWindowsPath
from typing import Callable, Optional

from deskshot.core.platform import Platform
from deskshot.utils.logger import get_logger


log = get_logger(__name__)

BRIDGE_ROOT = "/mnt"

_GUEST_BRIDGED = re.compile(r"^/mnt/([a-zA-Z])(?=/|$)(.*)$")
_HOST_DRIVE = re.compile(r"^([a-zA-Z]):[\\/]?(.*)$")


def to_host_path(guest_path: Path | str) -> str:
    """
    /mnt/c/Users/me/x.png -> C:\\Users\\me\\x.png
    Paths outside the bridge are returned unchanged.
    """
    raw = os.fspath(guest_path).replace("\\", "/")
    m = _GUEST_BRIDGED.match(raw)
    if not m:
        return os.fspath(guest_path)
    drive, rest = m.group(1).upper(), m.group(2).lstrip("/")
    return str(PureWindowsPath(f"{drive}:\\", *PurePosixPath(rest).parts)) if rest else f"{drive}:\\"


def to_guest_path(host_path: Path | str) -> str:
    """
    C:\\Users\\me\\x.png -> /mnt/c/Users/me/x.png
    Paths without a drive letter are returned unchanged.
    """
    raw = os.fspath(host_path)
    m = _HOST_DRIVE.match(raw)
    if not m:
        return raw
    drive, rest = m.group(1).lower(), m.group(2)
    parts = PureWindowsPath(rest).parts if rest else ()
    return str(PurePosixPath(BRIDGE_ROOT, drive, *parts))


def bridged_temp_dir(user: str, drive: str = "c") -> Path:
    return Path(BRIDGE_ROOT) / drive / "Users" / user / "AppData" / "Local" / "Temp"


def _dir_accessible(p: Path) -> bool:
    try:
        return p.is_dir() and os.access(p, os.W_OK)
    except OSError:
        return False


@dataclass(frozen=True)
class TempLocation:
    """A temp directory plus how host-side tools should address files in it."""
    directory: Path
    bridged: bool = False

    def path_for(self, filename: str) -> Path:
        return self.directory / filename

    def host_path(self, guest_path: Path) -> str:
        return to_host_path(guest_path) if self.bridged else str(guest_path)


def resolve_temp_location(
    platform: Platform,
    user: Optional[str] = None,
    accessible: Callable[[Path], bool] = _dir_accessible,
) -> TempLocation:
    """
    Pick the directory for temporary scripts and images.

    Only linux-under-windows prefers the bridged host temp directory; every
    other platform uses the process temp directory.
    """
    if platform is not Platform.linux_under_windows:
        return TempLocation(Path(tempfile.gettempdir()))

    name = user or Path.home().name
    candidate = bridged_temp_dir(name)
    if accessible(candidate):
        log.debug(f"Using bridged temp directory {candidate}")
        return TempLocation(candidate, bridged=True)

    fallback = Path(tempfile.gettempdir())
    log.warning(
        f"Bridged temp directory {candidate} is not accessible; using {fallback}. "
        "The host capture tool must be able to resolve this path itself."
    )
    return TempLocation(fallback, bridged=False)
