from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from s3console.common.config import Settings, get_settings
from s3console.infra.observability.metrics import TRANSFERS
from s3console.infra.storage.client import ObjectStore
from s3console.services.errors import (
    LocalFileNotFoundError,
    TransferError,
    classify_error,
)
from s3console.services.progress import NullProgressReporter, ProgressReporter

logger = logging.getLogger("transfer")


@dataclass(frozen=True, slots=True)
class TransferTarget:
    """One local path paired with one object in a bucket."""

    bucket: str
    object_key: str
    local_path: str

    @classmethod
    def for_upload(cls, bucket: str, file_path: str | os.PathLike[str]) -> "TransferTarget":
        local_path = os.fspath(file_path)
        return cls(bucket=bucket, object_key=Path(local_path).name, local_path=local_path)

    def log_fields(self) -> dict[str, str]:
        return {
            "bucket": self.bucket,
            "key": self.object_key,
            "local_path": self.local_path,
        }


def title_metadata(file_path: str | os.PathLike[str]) -> dict[str, str]:
    """Descriptive metadata attached to every uploaded object."""
    return {"title": Path(file_path).stem}


class BaseTransferService:
    """Holds the store, progress reporter and settings shared by transfer services."""

    def __init__(
        self,
        store: ObjectStore,
        *,
        reporter: ProgressReporter | None = None,
        settings: Settings | None = None,
    ) -> None:
        self._store = store
        self._reporter: ProgressReporter = reporter or NullProgressReporter()
        self._settings = settings or get_settings()

    @property
    def store(self) -> ObjectStore:
        return self._store

    @property
    def reporter(self) -> ProgressReporter:
        return self._reporter

    @property
    def chunk_size(self) -> int:
        return int(self._settings.TRANSFER_CHUNK_BYTES)

    def _require_file(self, target: TransferTarget) -> int:
        """Return the size of the source file, which must exist right now."""
        if not os.path.isfile(target.local_path):
            raise LocalFileNotFoundError(f"File not found: {target.local_path}")
        return os.path.getsize(target.local_path)

    def _succeeded(self, operation: str, target: TransferTarget, **fields: object) -> None:
        TRANSFERS.labels(operation=operation, outcome="success").inc()
        payload = {"operation": operation, **target.log_fields(), **fields}
        logger.info(
            "transfer_succeeded operation=%s bucket=%s key=%s local_path=%s",
            operation,
            target.bucket,
            target.object_key,
            target.local_path,
            extra={"extra": payload},
        )

    def _failed(
        self, operation: str, target: TransferTarget, exc: BaseException
    ) -> TransferError:
        error = classify_error(exc)
        TRANSFERS.labels(operation=operation, outcome=error.code).inc()
        logger.error(
            "transfer_failed operation=%s code=%s bucket=%s key=%s local_path=%s error=%s",
            operation,
            error.code,
            target.bucket,
            target.object_key,
            target.local_path,
            error,
            extra={
                "extra": {
                    "operation": operation,
                    "code": error.code,
                    "error": str(error),
                    **target.log_fields(),
                }
            },
        )
        return error
