import re
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

import pytest
from PIL import Image

from deskshot.capture.backends import CaptureBackend
from deskshot.core.models import Monitor
from deskshot.core.paths import TempLocation
from deskshot.core.platform import Platform
from deskshot.utils.proc import CommandError, CommandResult


def write_png(path: Path, size=(8, 6), color=(200, 30, 30)) -> Path:
    Image.new("RGB", size, color).save(path, format="PNG")
    return path


class FakeRunner:
    """
    Records every command and answers from a script of responses.
    A response is a CommandResult-like stdout string, an exception to raise,
    or a callable(args) returning stdout.
    """

    def __init__(self, responses: Optional[Iterable] = None, default_stdout: str = ""):
        self.responses = list(responses or [])
        self.default_stdout = default_stdout
        self.calls: List[List[str]] = []
        self.timeouts: List[float] = []
        self.scripts: List[str] = []

    def __call__(self, args: Sequence[str], timeout: float) -> CommandResult:
        args = list(args)
        self.calls.append(args)
        self.timeouts.append(timeout)
        if args and args[-1].endswith(".ps1") and Path(args[-1]).exists():
            self.scripts.append(Path(args[-1]).read_text(encoding="utf-8"))
        resp = self.responses.pop(0) if self.responses else self.default_stdout
        if isinstance(resp, BaseException):
            raise resp
        if callable(resp):
            resp = resp(args)
        return CommandResult(args=args, returncode=0, stdout=resp or "", stderr="")


def write_output_arg(args: List[str]) -> str:
    """Behave like screencapture/import: the last argument is the output file."""
    write_png(Path(args[-1]))
    return ""


def write_powershell_output(args: List[str]) -> str:
    """Behave like the capture script: write the PNG named in $bitmap.Save('...')."""
    script = Path(args[-1]).read_text(encoding="utf-8")
    m = re.search(r"\.Save\('((?:[^']|'')*)'", script)
    assert m, "capture script has no Save() target"
    write_png(Path(m.group(1).replace("''", "'")))
    return ""


class FakeBackend(CaptureBackend):
    """Backend that draws tiny PNGs instead of calling platform tools."""

    platform = Platform.native_linux

    def __init__(
        self,
        temp_dir: Path,
        monitors: Sequence[Monitor] = (),
        fail_on: Iterable[int] = (),
        fail_desktop: bool = False,
        enumeration_error: Optional[str] = None,
    ):
        super().__init__(temp=TempLocation(temp_dir))
        self.monitors = list(monitors)
        self.fail_on = set(fail_on)
        self.fail_desktop = fail_desktop
        self.enumeration_error = enumeration_error
        self.grabbed: List[Optional[Monitor]] = []

    def _query_monitors(self) -> List[Monitor]:
        if self.enumeration_error:
            raise CommandError(self.enumeration_error)
        return list(self.monitors)

    def _grab(self, output: Path, monitor: Optional[Monitor]) -> None:
        self.grabbed.append(monitor)
        if monitor is None and self.fail_desktop:
            raise CommandError("import failed: unable to open X server", returncode=1, stderr="unable to open X server")
        if monitor is not None and monitor.index in self.fail_on:
            raise CommandError("import failed: X connection lost", returncode=1, stderr="X connection lost")
        write_png(output)


@pytest.fixture
def temp_dir(tmp_path: Path) -> Path:
    d = tmp_path / "tmp"
    d.mkdir()
    return d


@pytest.fixture
def out_dir(tmp_path: Path) -> Path:
    return tmp_path / "out"


@pytest.fixture
def two_monitors() -> List[Monitor]:
    return [
        Monitor(index=1, x=0, y=0, width=1920, height=1080),
        Monitor(index=2, x=1920, y=0, width=2560, height=1440),
    ]


@pytest.fixture
def three_monitors() -> List[Monitor]:
    return [
        Monitor(index=1, x=-1280, y=0, width=1280, height=1024),
        Monitor(index=2, x=0, y=0, width=1920, height=1080),
        Monitor(index=3, x=1920, y=0, width=1920, height=1080),
    ]
