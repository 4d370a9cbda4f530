# deskshot/capture/converter.py
from __future__ import annotations

"""Output placement
------------------
Moves a captured PNG artifact to its final name. PNG output is a plain file
copy; other formats are re-encoded with Pillow. The artifact is always
deleted afterwards, whether placement succeeded or not.
"""

import shutil
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from deskshot.core.errors import ConversionError
from deskshot.core.models import TemporaryArtifact
from deskshot.utils.logger import get_logger


log = get_logger(__name__)

NATIVE_FORMAT = "png"

# CLI format name -> Pillow encoder name
PIL_FORMATS = {
    "png": "PNG",
    "jpg": "JPEG",
    "jpeg": "JPEG",
    "bmp": "BMP",
}
JPEG_FORMATS = {"jpg", "jpeg"}


def encode_image(source: Path, destination: Path, fmt: str, quality: int) -> None:
    """
    Re-encode `source` into `destination` as `fmt`.
    Quality only applies to JPEG.

    Raises:
        ConversionError on unreadable input or encoder failure.
    """
    fmt = fmt.lower()
    if fmt not in PIL_FORMATS:
        raise ConversionError(f"Unsupported output format: {fmt}")

    try:
        with Image.open(source) as im:
            img = im
            if fmt in JPEG_FORMATS:
                # JPEG has no alpha channel
                if img.mode not in ("RGB", "L"):
                    img = img.convert("RGB")
                img.save(destination, format="JPEG", quality=int(quality))
            else:
                if fmt == "bmp" and img.mode not in ("RGB", "L", "P", "1"):
                    img = img.convert("RGB")
                img.save(destination, format=PIL_FORMATS[fmt])
    except (OSError, UnidentifiedImageError, ValueError) as e:
        raise ConversionError(f"Failed to convert image: {e}") from e


def place_artifact(artifact: TemporaryArtifact, destination: Path, fmt: str, quality: int) -> Path:
    """
    Write `artifact` to `destination` in `fmt`, then delete the artifact.

    Raises:
        ConversionError when the copy or re-encode fails.
    """
    with artifact:
        if fmt.lower() == NATIVE_FORMAT:
            try:
                shutil.copyfile(artifact.path, destination)
            except OSError as e:
                raise ConversionError(f"Failed to write {destination}: {e}") from e
        else:
            encode_image(artifact.path, destination, fmt, quality)
    log.debug(f"Placed {artifact.path.name} -> {destination}")
    return destination
