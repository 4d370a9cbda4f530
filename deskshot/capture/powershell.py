# deskshot/capture/powershell.py
from __future__ import annotations

"""Host-side PowerShell scripts
------------------------------
Script templates for screen enumeration and capture on Windows, and a small
runner that writes a script to the temp location, executes it with a timeout
and always deletes it afterwards.
"""

import itertools
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from deskshot.core.models import Monitor, remove_quietly
from deskshot.core.paths import TempLocation
from deskshot.utils.logger import get_logger
from deskshot.utils.proc import CommandResult, CommandRunner, run_command


log = get_logger(__name__)


# Per-monitor awareness first; the legacy call covers hosts without shcore.dll
DPI_AWARENESS = r'''
Add-Type @"
using System;
using System.Runtime.InteropServices;

public class DPIAware {
    [DllImport("user32.dll")]
    public static extern bool SetProcessDPIAware();

    [DllImport("shcore.dll")]
    public static extern int SetProcessDpiAwareness(int value);
}
"@

try {
    [DPIAware]::SetProcessDpiAwareness(2) | Out-Null
} catch {
    [DPIAware]::SetProcessDPIAware() | Out-Null
}
'''

ENUMERATE_SCREENS = '''
Add-Type -AssemblyName System.Windows.Forms
{dpi}
foreach ($screen in [System.Windows.Forms.Screen]::AllScreens) {{
    $b = $screen.Bounds
    Write-Output "$($b.X),$($b.Y),$($b.Width),$($b.Height)"
}}
'''

CAPTURE_RECT = '''
Add-Type -AssemblyName System.Drawing
Add-Type -AssemblyName System.Windows.Forms
{dpi}
$x = {x}
$y = {y}
$width = {width}
$height = {height}
if ($width -le 0 -or $height -le 0) {{
    Write-Error "Invalid dimensions: $width x $height"
    exit 1
}}
$bitmap = New-Object System.Drawing.Bitmap($width, $height)
$graphics = [System.Drawing.Graphics]::FromImage($bitmap)
try {{
    $graphics.CopyFromScreen($x, $y, 0, 0, [System.Drawing.Size]::new($width, $height))
    $bitmap.Save({output}, [System.Drawing.Imaging.ImageFormat]::Png)
}} finally {{
    $graphics.Dispose()
    $bitmap.Dispose()
}}
'''

CAPTURE_VIRTUAL_SCREEN = '''
Add-Type -AssemblyName System.Drawing
Add-Type -AssemblyName System.Windows.Forms
{dpi}
# Union of all monitors; may start at negative coordinates
$vs = [System.Windows.Forms.SystemInformation]::VirtualScreen
$bitmap = New-Object System.Drawing.Bitmap($vs.Width, $vs.Height)
$graphics = [System.Drawing.Graphics]::FromImage($bitmap)
try {{
    $graphics.CopyFromScreen($vs.X, $vs.Y, 0, 0, [System.Drawing.Size]::new($vs.Width, $vs.Height))
    $bitmap.Save({output}, [System.Drawing.Imaging.ImageFormat]::Png)
}} finally {{
    $graphics.Dispose()
    $bitmap.Dispose()
}}
'''


def ps_quote(value: str) -> str:
    """Single-quoted PowerShell literal; embedded quotes are doubled."""
    return "'" + value.replace("'", "''") + "'"


def enumerate_script() -> str:
    return ENUMERATE_SCREENS.format(dpi=DPI_AWARENESS)


def capture_script(host_output: str, monitor: Monitor | None = None) -> str:
    """
    Build the capture script writing a PNG to `host_output`.
    Monitor offsets are clamped to be non-negative.
    """
    if monitor is None:
        return CAPTURE_VIRTUAL_SCREEN.format(dpi=DPI_AWARENESS, output=ps_quote(host_output))
    return CAPTURE_RECT.format(
        dpi=DPI_AWARENESS,
        x=max(0, monitor.x),
        y=max(0, monitor.y),
        width=monitor.width,
        height=monitor.height,
        output=ps_quote(host_output),
    )


_sequence = itertools.count(1)


def unique_name(prefix: str, suffix: str) -> str:
    return f"{prefix}_{time.time_ns()}_{next(_sequence)}{suffix}"


# stderr lines the host emits on every run that are not failures
_BENIGN_STDERR = ("DeprecationWarning",)


class PowerShellHost:
    """
    Runs scripts through the Windows host's PowerShell.

    `executable` is `powershell` natively and `powershell.exe` from a Linux
    guest, where the script path handed over must be the host-side path.
    """

    def __init__(
        self,
        executable: str,
        temp: TempLocation,
        timeout: float = 10.0,
        runner: CommandRunner = run_command,
    ):
        self.executable = executable
        self.temp = temp
        self.timeout = timeout
        self.runner = runner

    @contextmanager
    def script_file(self, prefix: str, content: str) -> Iterator[Path]:
        path = self.temp.path_for(unique_name(prefix, ".ps1"))
        path.write_text(content, encoding="utf-8")
        try:
            yield path
        finally:
            if not remove_quietly(path):
                log.debug(f"Could not remove script {path}")

    def run(self, prefix: str, content: str) -> CommandResult:
        """
        Execute `content` as a script file.

        Raises:
            CommandError on launch failure, timeout, or non-zero exit.
        """
        with self.script_file(prefix, content) as script:
            result = self.runner(
                [
                    self.executable,
                    "-NoProfile",
                    "-ExecutionPolicy",
                    "Bypass",
                    "-File",
                    self.temp.host_path(script),
                ],
                self.timeout,
            )
        stderr = result.stderr.strip()
        if stderr and not any(marker in stderr for marker in _BENIGN_STDERR):
            log.warning(f"PowerShell stderr: {stderr}")
        return result
