# deskshot/cli.py
from __future__ import annotations

"""Command-line interface
------------------------
Captures the whole desktop plus each display, or a single display with
--display. Thin wrapper around platform detection and the capture engine.
"""

import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

import click

from deskshot import __version__
from deskshot.capture.backends import get_backend
from deskshot.core.engine import CaptureRequest, Engine, format_timestamp
from deskshot.core.errors import DeskshotError
from deskshot.core.models import CaptureReport
from deskshot.core.platform import detect_platform
from deskshot.utils.config import ImageFormat, get_settings
from deskshot.utils.logger import bind, get_logger, set_log_level, unbind


# -------- helpers --------


def _err(message: str) -> None:
    click.echo(message, err=True)


def _print_summary(report: CaptureReport) -> None:
    if report.partial:
        click.echo(f"\nCaptured {len(report.outputs)} screenshot(s); {len(report.failures)} display(s) failed.")
        for failure in report.failures:
            _err(f"✗ Failed to capture {failure.target.label}: {failure.error}")
    else:
        click.echo("\n✓ All screenshots captured successfully!")
    click.echo("Files saved:")
    for path in report.outputs:
        click.echo(f"  - {path}")


# -------- command --------


@click.command(context_settings=dict(help_option_names=["-h", "--help"]))
@click.option("-d", "--display", type=int, default=None,
              help="Display number to capture (e.g., 1 for DisplayImage1 only)")
@click.option(
    "-o", "--output", "output_dir",
    type=click.Path(file_okay=False, dir_okay=True),
    default=None,
    help="Output directory for screenshots [default: current directory]",
)
@click.option(
    "-f", "--format", "fmt",
    type=click.Choice([f.value for f in ImageFormat], case_sensitive=False),
    default=lambda: get_settings().IMAGE_FORMAT.value,
    show_default="png",
    help="Image format",
)
@click.option(
    "-q", "--quality",
    type=click.IntRange(1, 100),
    default=lambda: get_settings().JPEG_QUALITY,
    show_default="100",
    help="Image quality for JPEG (1-100)",
)
@click.option("--list-displays", is_flag=True, default=False, help="Print detected displays and exit")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default=None,
    help="Override DESKSHOT_LOG_LEVEL from settings",
)
@click.version_option(__version__, "-v", "--version", prog_name="deskshot")
def cli(
    display: Optional[int],
    output_dir: Optional[str],
    fmt: str,
    quality: int,
    list_displays: bool,
    log_level: Optional[str],
):
    """
    Capture desktop and per-display screenshots.

    Examples:
      deskshot
      deskshot -d 2 -f jpg -q 85 -o ~/shots
    """
    timestamp = datetime.now()
    settings = get_settings()
    if log_level:
        set_log_level(log_level.upper())
    log = get_logger(__name__)

    try:
        platform = detect_platform(mount=settings.HOST_MOUNT_PROBE)
        bind(run_id=format_timestamp(timestamp), platform=platform.value)
        backend = get_backend(platform, timeout=settings.CAPTURE_TIMEOUT_S)

        if list_displays:
            scan = backend.enumerate()
            click.echo(f"Platform: {platform.value}")
            if not scan.monitors:
                click.echo("No displays detected.")
            for monitor in scan.monitors:
                click.echo(monitor.describe())
            return

        request = CaptureRequest(
            output_dir=Path(output_dir) if output_dir else settings.resolve_output_dir(),
            fmt=fmt.lower(),
            quality=quality,
            display=display,
        )
        report = Engine(backend, echo=click.echo).run(request, timestamp)
    except DeskshotError as e:
        _err(f"Error: {e}")
        sys.exit(1)
    except Exception as e:
        log.debug("Unhandled error", exc_info=True)
        _err(f"Error: {e}")
        sys.exit(1)
    finally:
        unbind("run_id", "platform")

    _print_summary(report)


def main() -> None:
    cli(prog_name="deskshot")


if __name__ == "__main__":
    main()
