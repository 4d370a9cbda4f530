# deskshot/core/platform.py
from __future__ import annotations

"""Platform detection
--------------------
Maps the OS family to one of the supported capture platforms. A Linux host
is reported as linux-under-windows when a Windows drive is bridged into the
filesystem; this is a heuristic, not an authoritative check.
"""

import os
import platform as _platform
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from deskshot.utils.logger import get_logger


log = get_logger(__name__)

DEFAULT_HOST_MOUNT = Path("/mnt/c")


class Platform(str, Enum):
    native_windows = "native-windows"
    native_macos = "native-macos"
    native_linux = "native-linux"
    linux_under_windows = "linux-under-windows"
    unsupported = "unsupported"

    @property
    def is_windows_family(self) -> bool:
        return self in (Platform.native_windows, Platform.linux_under_windows)


_FAMILY_MAP = {
    "windows": Platform.native_windows,
    "darwin": Platform.native_macos,
}


def has_bridged_host_mount(
    mount: Path | str = DEFAULT_HOST_MOUNT,
    exists: Callable[[str], bool] = os.path.exists,
) -> bool:
    """True when `mount` exists. Never raises; absence is the normal case."""
    try:
        return bool(exists(os.fspath(mount)))
    except OSError:
        return False


def os_family() -> str:
    """Lower-cased OS family name, e.g. 'linux', 'darwin', 'windows'."""
    return _platform.system().lower()


def detect_platform(
    system: Optional[str] = None,
    mount: Path | str = DEFAULT_HOST_MOUNT,
    exists: Callable[[str], bool] = os.path.exists,
) -> Platform:
    """
    Determine the capture platform for this process.

    Args:
        system: OS family override (defaults to platform.system()).
        mount: bridged host-drive mount probed on Linux.
        exists: path probe, injectable for tests.
    """
    family = (system or os_family()).lower()
    if family == "linux":
        detected = Platform.linux_under_windows if has_bridged_host_mount(mount, exists) else Platform.native_linux
    else:
        detected = _FAMILY_MAP.get(family, Platform.unsupported)
    if detected is Platform.unsupported:
        log.warning(f"Unsupported OS family: {family}")
    log.debug(f"Detected platform {detected.value} (family={family})")
    return detected
