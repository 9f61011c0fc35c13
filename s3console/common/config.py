from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

ENV_FILE = Path(".env")

ADDRESSING_STYLES: tuple[str, ...] = ("auto", "path", "virtual")
LOG_FORMATS: tuple[str, ...] = ("json", "plain")


def _load_env_file() -> None:
    if not ENV_FILE.exists():
        return
    for raw_line in ENV_FILE.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key and key not in os.environ:
            os.environ[key] = value


def _as_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    return value.lower() in {"1", "true", "t", "yes", "y", "on"}


def _as_optional(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


@dataclass
class Settings:
    S3_ENDPOINT_URL: str | None = None
    S3_REGION: str = "us-east-2"
    S3_ACCESS_KEY_ID: str | None = None
    S3_SECRET_ACCESS_KEY: str | None = None
    S3_USE_SSL: bool = True
    S3_ADDRESSING_STYLE: str = "auto"
    S3_CONNECT_TIMEOUT: int = 10
    S3_READ_TIMEOUT: int = 60
    TRANSFER_PART_SIZE_MB: int = 5
    TRANSFER_CHUNK_BYTES: int = 64 * 1024
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"

    def __post_init__(self) -> None:
        style = (self.S3_ADDRESSING_STYLE or "auto").strip().lower()
        if style not in ADDRESSING_STYLES:
            raise ValueError(
                f"S3_ADDRESSING_STYLE must be one of {', '.join(ADDRESSING_STYLES)}."
            )
        self.S3_ADDRESSING_STYLE = style
        if self.TRANSFER_PART_SIZE_MB < 1:
            raise ValueError("TRANSFER_PART_SIZE_MB must be at least 1.")
        if self.TRANSFER_CHUNK_BYTES <= 0:
            raise ValueError("TRANSFER_CHUNK_BYTES must be positive.")
        log_format = self.LOG_FORMAT.strip().lower()
        if log_format not in LOG_FORMATS:
            raise ValueError(f"LOG_FORMAT must be one of {', '.join(LOG_FORMATS)}.")
        self.LOG_FORMAT = log_format
        self.LOG_LEVEL = self.LOG_LEVEL.strip().upper()

    @property
    def has_static_credentials(self) -> bool:
        return bool(self.S3_ACCESS_KEY_ID and self.S3_SECRET_ACCESS_KEY)

    @classmethod
    def from_environment(cls) -> "Settings":
        _load_env_file()
        return cls(
            S3_ENDPOINT_URL=_as_optional(os.environ.get("S3_ENDPOINT_URL")),
            S3_REGION=os.environ.get("S3_REGION", cls.S3_REGION),
            S3_ACCESS_KEY_ID=_as_optional(os.environ.get("S3_ACCESS_KEY_ID")),
            S3_SECRET_ACCESS_KEY=_as_optional(os.environ.get("S3_SECRET_ACCESS_KEY")),
            S3_USE_SSL=_as_bool(os.environ.get("S3_USE_SSL"), cls.S3_USE_SSL),
            S3_ADDRESSING_STYLE=os.environ.get(
                "S3_ADDRESSING_STYLE", cls.S3_ADDRESSING_STYLE
            ),
            S3_CONNECT_TIMEOUT=int(
                os.environ.get("S3_CONNECT_TIMEOUT", cls.S3_CONNECT_TIMEOUT)
            ),
            S3_READ_TIMEOUT=int(os.environ.get("S3_READ_TIMEOUT", cls.S3_READ_TIMEOUT)),
            TRANSFER_PART_SIZE_MB=int(
                os.environ.get("TRANSFER_PART_SIZE_MB", cls.TRANSFER_PART_SIZE_MB)
            ),
            TRANSFER_CHUNK_BYTES=int(
                os.environ.get("TRANSFER_CHUNK_BYTES", cls.TRANSFER_CHUNK_BYTES)
            ),
            LOG_LEVEL=os.environ.get("LOG_LEVEL", cls.LOG_LEVEL),
            LOG_FORMAT=os.environ.get("LOG_FORMAT", cls.LOG_FORMAT),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_environment()
