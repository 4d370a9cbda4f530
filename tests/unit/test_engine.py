import re
from datetime import datetime

import pytest

from conftest import FakeBackend
from deskshot.core.engine import CaptureRequest, Engine, build_filename
from deskshot.core.errors import CaptureError, DisplayNotFoundError
from deskshot.core.models import Monitor, MonitorScan


TS = datetime(2024, 3, 9, 7, 5, 3)


def test_build_filename():
    assert build_filename("DesktopImage", "png", TS) == "DesktopImage_2024-03-09_07-05-03.png"
    assert build_filename("DisplayImage2", "jpg", TS) == "DisplayImage2_2024-03-09_07-05-03.jpg"


def test_single_display_produces_exactly_one_file(temp_dir, out_dir, three_monitors):
    backend = FakeBackend(temp_dir, three_monitors)
    report = Engine(backend).run(CaptureRequest(output_dir=out_dir, display=1), TS)

    assert [p.name for p in report.outputs] == ["DisplayImage1_2024-03-09_07-05-03.png"]
    assert sorted(p.name for p in out_dir.iterdir()) == ["DisplayImage1_2024-03-09_07-05-03.png"]
    assert backend.grabbed == [three_monitors[0]]


@pytest.mark.parametrize("display", [0, 4, 5, -1])
def test_display_out_of_range_fails_without_output(display, temp_dir, out_dir, three_monitors):
    backend = FakeBackend(temp_dir, three_monitors)
    with pytest.raises(DisplayNotFoundError) as exc_info:
        Engine(backend).run(CaptureRequest(output_dir=out_dir, display=display), TS)

    assert str(exc_info.value) == f"Display {display} not found. Available displays: 1-3"
    assert backend.grabbed == []
    assert list(out_dir.iterdir()) == []


def test_all_displays_share_one_timestamp(temp_dir, out_dir, two_monitors):
    backend = FakeBackend(temp_dir, two_monitors)
    messages = []
    report = Engine(backend, echo=messages.append).run(CaptureRequest(output_dir=out_dir), TS)

    names = sorted(p.name for p in out_dir.iterdir())
    assert names == [
        "DesktopImage_2024-03-09_07-05-03.png",
        "DisplayImage1_2024-03-09_07-05-03.png",
        "DisplayImage2_2024-03-09_07-05-03.png",
    ]
    stamps = {re.search(r"_(\d{4}-\d{2}-\d{2}_\d{2}-\d{2}-\d{2})\.", n).group(1) for n in names}
    assert len(stamps) == 1
    # desktop first, then each display in order
    assert backend.grabbed == [None] + two_monitors
    assert messages[0] == "Capturing desktop screenshot..."
    assert not report.partial


def test_one_display_failure_does_not_abort_the_rest(temp_dir, out_dir, two_monitors):
    backend = FakeBackend(temp_dir, two_monitors, fail_on=[2])
    report = Engine(backend).run(CaptureRequest(output_dir=out_dir), TS)

    assert sorted(p.name for p in out_dir.iterdir()) == [
        "DesktopImage_2024-03-09_07-05-03.png",
        "DisplayImage1_2024-03-09_07-05-03.png",
    ]
    assert report.partial
    assert [f.target.monitor.index for f in report.failures] == [2]
    assert "X connection lost" in report.failures[0].error


def test_invalid_monitor_in_all_displays_mode_is_tolerated(temp_dir, out_dir):
    monitors = [Monitor(index=1, x=0, y=0, width=1920, height=1080), Monitor(index=2, x=0, y=0, width=0, height=0)]
    backend = FakeBackend(temp_dir, [])
    scan = MonitorScan(monitors=monitors)
    report = Engine(backend).run(CaptureRequest(output_dir=out_dir), TS, scan=scan)

    assert len(report.outputs) == 2
    assert "Invalid monitor dimensions" in report.failures[0].error


def test_desktop_failure_is_fatal(temp_dir, out_dir, two_monitors):
    backend = FakeBackend(temp_dir, two_monitors, fail_desktop=True)
    with pytest.raises(CaptureError):
        Engine(backend).run(CaptureRequest(output_dir=out_dir), TS)
    assert backend.grabbed == [None]


def test_single_display_failure_propagates(temp_dir, out_dir, two_monitors):
    backend = FakeBackend(temp_dir, two_monitors, fail_on=[2])
    with pytest.raises(CaptureError):
        Engine(backend).run(CaptureRequest(output_dir=out_dir, display=2), TS)
    assert list(out_dir.iterdir()) == []


def test_enumeration_failure_falls_back_to_desktop_only(temp_dir, out_dir):
    backend = FakeBackend(temp_dir, enumeration_error="xrandr: command not found")
    report = Engine(backend).run(CaptureRequest(output_dir=out_dir), TS)

    assert [p.name for p in report.outputs] == ["DesktopImage_2024-03-09_07-05-03.png"]
    assert backend.grabbed == [None]


def test_no_temporary_files_survive_a_run(temp_dir, out_dir, two_monitors):
    backend = FakeBackend(temp_dir, two_monitors, fail_on=[1])
    Engine(backend).run(CaptureRequest(output_dir=out_dir, fmt="jpg", quality=70), TS)
    assert list(temp_dir.iterdir()) == []
    assert sorted(p.suffix for p in out_dir.iterdir()) == [".jpg", ".jpg"]


def test_output_directory_is_created(temp_dir, tmp_path, two_monitors):
    nested = tmp_path / "a" / "b" / "c"
    Engine(FakeBackend(temp_dir, two_monitors)).run(CaptureRequest(output_dir=nested, display=2), TS)
    assert (nested / "DisplayImage2_2024-03-09_07-05-03.png").is_file()


def test_undecodable_display_failure_keeps_all_displays_run_going(temp_dir, out_dir, two_monitors):
    from conftest import write_output_arg
    from deskshot.capture.backends import LinuxBackend
    from deskshot.core.paths import TempLocation
    from deskshot.utils.proc import run_command

    def runner(args, timeout):
        if "-crop" in args and args[args.index("-crop") + 1] == "1920x1080+0+0":
            return run_command(["sh", "-c", "printf 'Zugriff verweigert \\201' >&2; exit 1"], timeout)
        write_output_arg(list(args))
        return run_command(["true"], timeout)

    backend = LinuxBackend(temp=TempLocation(temp_dir), runner=runner)
    report = Engine(backend).run(CaptureRequest(output_dir=out_dir), TS, scan=MonitorScan(monitors=two_monitors))

    assert [f.target.monitor.index for f in report.failures] == [1]
    assert "Zugriff verweigert" in report.failures[0].error
    assert sorted(p.name for p in out_dir.iterdir()) == [
        "DesktopImage_2024-03-09_07-05-03.png",
        "DisplayImage2_2024-03-09_07-05-03.png",
    ]
    assert list(temp_dir.iterdir()) == []
