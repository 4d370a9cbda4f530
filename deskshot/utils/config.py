# deskshot/utils/config.py
from __future__ import annotations

import functools
from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# ---------- Enums ----------

class ImageFormat(str, Enum):
    png = "png"
    jpg = "jpg"
    jpeg = "jpeg"
    bmp = "bmp"


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


# ---------- Settings ----------

class Settings(BaseSettings):
    """
    Central configuration for deskshot.

    Values load in this order of precedence:
      1) Command-line options (applied by the CLI, not here)
      2) Environment variables (DESKSHOT_ prefix)
      3) .env file in the working directory
      4) Defaults below
    """

    # ---- Output ----
    OUTPUT_DIR: Optional[Path] = Field(default=None, description="None = current working directory")
    IMAGE_FORMAT: ImageFormat = Field(default=ImageFormat.png)
    JPEG_QUALITY: int = Field(default=100, ge=1, le=100)

    # ---- Capture ----
    CAPTURE_TIMEOUT_S: float = Field(default=10.0, gt=0, description="Upper bound for every external tool call")
    HOST_MOUNT_PROBE: Path = Field(default=Path("/mnt/c"), description="Exists only when a Windows drive is bridged in")

    # ---- Logging ----
    LOG_LEVEL: LogLevel = Field(default=LogLevel.WARNING)
    LOG_TO_FILE: bool = Field(default=False)
    LOG_FILE: Path = Field(default=Path("./deskshot.log"))
    COLORIZED_OUTPUT: bool = Field(default=True)

    model_config = SettingsConfigDict(
        env_prefix="DESKSHOT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("OUTPUT_DIR", "LOG_FILE", mode="before")
    @classmethod
    def _coerce_to_path(cls, v):
        if v is None or isinstance(v, Path):
            return v
        v = str(v).strip()
        return Path(v) if v else None

    @field_validator("LOG_FILE", mode="after")
    @classmethod
    def _absolutize_log_file(cls, v: Path):
        return v if v.is_absolute() else Path.cwd() / v

    def resolve_output_dir(self) -> Path:
        """Configured output directory, or the current working directory."""
        return self.OUTPUT_DIR if self.OUTPUT_DIR is not None else Path.cwd()


# --------- Public accessor (memoized) ---------

@functools.lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Load and cache settings once per process.
    Call `get_settings.cache_clear()` if you need to reload after changing env.
    """
    return Settings()
