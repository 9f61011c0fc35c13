from __future__ import annotations

import logging

import pytest

from s3console.common.config import Settings, get_settings
from tests.services.mock_storage import MockStorageClient


class RecordingReporter:
    """Progress reporter that keeps every sample it receives."""

    def __init__(self) -> None:
        self.samples: list[tuple[int, int]] = []
        self.finished = 0

    def report(self, transferred: int, total: int) -> None:
        self.samples.append((transferred, total))

    def finish(self) -> None:
        self.finished += 1


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for name in (
        "S3_ENDPOINT_URL",
        "S3_REGION",
        "S3_ACCESS_KEY_ID",
        "S3_SECRET_ACCESS_KEY",
        "S3_USE_SSL",
        "S3_ADDRESSING_STYLE",
        "TRANSFER_PART_SIZE_MB",
        "TRANSFER_CHUNK_BYTES",
        "LOG_LEVEL",
        "LOG_FORMAT",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()  # type: ignore[attr-defined]
    yield
    get_settings.cache_clear()  # type: ignore[attr-defined]


@pytest.fixture()
def settings() -> Settings:
    return Settings(TRANSFER_CHUNK_BYTES=1024)


@pytest.fixture()
def mock_storage() -> MockStorageClient:
    return MockStorageClient()


@pytest.fixture()
def reporter() -> RecordingReporter:
    return RecordingReporter()


@pytest.fixture()
def reset_logging():
    yield
    for name in (None, "s3console.cli"):
        logger = logging.getLogger(name)
        for handler in [h for h in logger.handlers if type(h) is logging.StreamHandler]:
            logger.removeHandler(handler)
        logger.setLevel(logging.NOTSET)
        logger.propagate = True
    for name in ("botocore", "boto3", "urllib3", "s3transfer"):
        logging.getLogger(name).setLevel(logging.NOTSET)
    logging.getLogger().setLevel(logging.WARNING)
