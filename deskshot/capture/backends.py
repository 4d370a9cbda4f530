# deskshot/capture/backends.py
from __future__ import annotations

"""Platform capture backends
---------------------------
One backend per Platform, each answering two questions: which monitors are
attached (enumerate) and how to grab the desktop or one monitor into a
temporary PNG (capture). `get_backend` is the dispatch table.
"""

from pathlib import Path
from typing import Callable, Dict, List, Optional

from deskshot.capture.powershell import PowerShellHost, capture_script, enumerate_script, unique_name
from deskshot.core.errors import CaptureError, InvalidMonitorError
from deskshot.core.models import Monitor, MonitorScan, TemporaryArtifact
from deskshot.core.monitors import normalize, parse_bounds_lines, parse_system_profiler, parse_xrandr
from deskshot.core.paths import TempLocation, resolve_temp_location
from deskshot.core.platform import Platform, os_family
from deskshot.utils.logger import get_logger
from deskshot.utils.proc import CommandError, CommandRunner, run_command
from deskshot.utils.timing import measure


log = get_logger(__name__)

DEFAULT_TIMEOUT_S = 10.0


class CaptureBackend:
    """Base strategy. Subclasses implement _query_monitors and _grab."""

    platform: Platform = Platform.unsupported

    def __init__(
        self,
        temp: Optional[TempLocation] = None,
        timeout: float = DEFAULT_TIMEOUT_S,
        runner: CommandRunner = run_command,
    ):
        self.temp = temp or resolve_temp_location(self.platform)
        self.timeout = timeout
        self.runner = runner

    # ----------- Public API -----------

    @measure("enumerate monitors")
    def enumerate(self) -> MonitorScan:
        """
        List attached monitors. Never raises: any tool or parse failure
        yields an empty, degraded scan.
        """
        try:
            raw = self._query_monitors()
        except (CommandError, ValueError, KeyError, TypeError, AttributeError, OSError) as e:
            log.warning(f"Monitor enumeration failed on {self.platform.value}: {e}")
            return MonitorScan(monitors=[], error=str(e))
        monitors = normalize(raw, sort=self.platform.is_windows_family)
        log.debug(f"Enumerated {len(monitors)} monitor(s): {[m.describe() for m in monitors]}")
        return MonitorScan(monitors=monitors)

    @measure("capture")
    def capture(self, monitor: Optional[Monitor] = None) -> TemporaryArtifact:
        """
        Capture the whole virtual desktop, or one monitor when given.

        Raises:
            InvalidMonitorError if the monitor has no area.
            CaptureError if the tool fails, times out, or writes no file.
        """
        if monitor is not None and not monitor.has_area:
            raise InvalidMonitorError(monitor.width, monitor.height)

        artifact = TemporaryArtifact(self.temp.path_for(unique_name("screenshot", ".png")))
        try:
            self._grab(artifact.path, monitor)
        except CommandError as e:
            artifact.discard()
            raise CaptureError(f"Failed to capture screen: {e}", diagnostic=e.stderr or str(e)) from e
        except OSError as e:
            artifact.discard()
            raise CaptureError(f"Failed to capture screen: {e}", diagnostic=str(e)) from e

        if not artifact.exists():
            raise CaptureError(f"Failed to capture screen: no image written to {artifact.path}")
        return artifact

    # ----------- Strategy hooks -----------

    def _query_monitors(self) -> List[Monitor]:
        raise NotImplementedError

    def _grab(self, output: Path, monitor: Optional[Monitor]) -> None:
        raise NotImplementedError


class WindowsBackend(CaptureBackend):
    """Native Windows: PowerShell + System.Windows.Forms / System.Drawing."""

    platform = Platform.native_windows
    executable = "powershell"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.host = PowerShellHost(self.executable, self.temp, timeout=self.timeout, runner=self.runner)

    def _query_monitors(self) -> List[Monitor]:
        result = self.host.run("getmonitors", enumerate_script())
        return parse_bounds_lines(result.stdout)

    def _grab(self, output: Path, monitor: Optional[Monitor]) -> None:
        self.host.run("capture", capture_script(self.temp.host_path(output), monitor))


class BridgedWindowsBackend(WindowsBackend):
    """Linux guest driving the Windows host's PowerShell through interop."""

    platform = Platform.linux_under_windows
    executable = "powershell.exe"


class MacOSBackend(CaptureBackend):
    platform = Platform.native_macos

    def _query_monitors(self) -> List[Monitor]:
        result = self.runner(["system_profiler", "SPDisplaysDataType", "-json"], self.timeout)
        return parse_system_profiler(result.stdout)

    def _grab(self, output: Path, monitor: Optional[Monitor]) -> None:
        args = ["screencapture", "-x"]
        if monitor is not None:
            args.append(f"-R{monitor.x},{monitor.y},{monitor.width},{monitor.height}")
        args.append(str(output))
        self.runner(args, self.timeout)


class LinuxBackend(CaptureBackend):
    """X11: xrandr for geometry, ImageMagick `import` for pixels."""

    platform = Platform.native_linux

    def _query_monitors(self) -> List[Monitor]:
        result = self.runner(["xrandr", "--query"], self.timeout)
        return parse_xrandr(result.stdout)

    def _grab(self, output: Path, monitor: Optional[Monitor]) -> None:
        args = ["import", "-window", "root"]
        if monitor is not None:
            args += ["-crop", f"{monitor.width}x{monitor.height}+{monitor.x}+{monitor.y}"]
        args.append(str(output))
        self.runner(args, self.timeout)


class UnsupportedBackend(CaptureBackend):
    """No capture tooling known for this OS family."""

    platform = Platform.unsupported

    def __init__(self, *args, system: Optional[str] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.system = system or os_family()

    def _query_monitors(self) -> List[Monitor]:
        return []

    def _grab(self, output: Path, monitor: Optional[Monitor]) -> None:
        raise CaptureError(f"Unsupported platform: {self.system}")


_BACKENDS: Dict[Platform, Callable[..., CaptureBackend]] = {
    Platform.native_windows: WindowsBackend,
    Platform.linux_under_windows: BridgedWindowsBackend,
    Platform.native_macos: MacOSBackend,
    Platform.native_linux: LinuxBackend,
    Platform.unsupported: UnsupportedBackend,
}


def get_backend(platform: Platform, **kwargs) -> CaptureBackend:
    """Instantiate the backend registered for `platform`."""
    return _BACKENDS[platform](**kwargs)
