"""Recursive bucket-to-directory download."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field

from s3console.common.config import Settings
from s3console.infra.observability.metrics import TRANSFERS
from s3console.infra.storage.client import ObjectStore, RemoteObject
from s3console.services.base import BaseTransferService, TransferTarget
from s3console.services.errors import TransferError, classify_error
from s3console.services.paths import ensure_directory_for, is_file_path, key_to_local_path
from s3console.services.progress import ProgressReporter
from s3console.services.single_transfer import SingleObjectTransfer

logger = logging.getLogger("transfer")


@dataclass
class BucketDownloadReport:
    """What a bucket walk did with every key it enumerated."""

    bucket: str
    downloaded: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed: list[tuple[str, TransferError]] = field(default_factory=list)
    error: TransferError | None = None

    @property
    def ok(self) -> bool:
        """True when the bucket could be enumerated, even if some objects failed."""
        return self.error is None

    @property
    def complete(self) -> bool:
        return self.ok and not self.failed


class BucketDownloadOrchestrator(BaseTransferService):
    """Replicates every object of a bucket into a local directory tree.

    Keys that look like folders (trailing ``/`` or no extension) are skipped.
    A failing object is recorded in the report and the walk moves on; only a
    failed listing ends the operation early.
    """

    def __init__(
        self,
        store: ObjectStore,
        *,
        reporter: ProgressReporter | None = None,
        settings: Settings | None = None,
        downloader: SingleObjectTransfer | None = None,
    ) -> None:
        super().__init__(store, reporter=reporter, settings=settings)
        self._downloader = downloader or SingleObjectTransfer(
            self._store, reporter=self._reporter, settings=self._settings
        )

    def download_bucket(
        self,
        bucket: str,
        destination_directory: str | os.PathLike[str],
        overwrite: bool = False,
    ) -> BucketDownloadReport:
        report = BucketDownloadReport(bucket=bucket)
        destination = os.fspath(destination_directory)
        root = TransferTarget(bucket=bucket, object_key="", local_path=destination)

        try:
            objects = list(self._store.list_objects(bucket=bucket))
        except Exception as exc:
            report.error = self._failed("download_bucket", root, exc)
            return report

        logger.info(
            "bucket_listed bucket=%s objects=%s destination=%s",
            bucket,
            len(objects),
            destination,
            extra={
                "extra": {
                    "bucket": bucket,
                    "objects": len(objects),
                    "destination": destination,
                }
            },
        )

        for item in objects:
            self._download_item(item, destination, overwrite, report)

        outcome = "success" if report.complete else "partial"
        TRANSFERS.labels(operation="download_bucket", outcome=outcome).inc()
        logger.info(
            "bucket_download_finished bucket=%s downloaded=%s skipped=%s failed=%s",
            bucket,
            len(report.downloaded),
            len(report.skipped),
            len(report.failed),
            extra={
                "extra": {
                    "bucket": bucket,
                    "downloaded": len(report.downloaded),
                    "skipped": len(report.skipped),
                    "failed": len(report.failed),
                }
            },
        )
        return report

    def _download_item(
        self,
        item: RemoteObject,
        destination: str,
        overwrite: bool,
        report: BucketDownloadReport,
    ) -> None:
        try:
            local_path = key_to_local_path(destination, item.key)
            if not is_file_path(local_path):
                logger.debug(
                    "bucket_key_skipped bucket=%s key=%s",
                    item.bucket,
                    item.key,
                    extra={"extra": {"bucket": item.bucket, "key": item.key}},
                )
                report.skipped.append(item.key)
                return
            ensure_directory_for(local_path)
            self._downloader.download_to_path(
                item.bucket, item.key, local_path, overwrite=overwrite
            )
        except Exception as exc:
            error = classify_error(exc)
            logger.warning(
                "bucket_object_failed bucket=%s key=%s code=%s error=%s",
                item.bucket,
                item.key,
                error.code,
                error,
                extra={
                    "extra": {
                        "bucket": item.bucket,
                        "key": item.key,
                        "code": error.code,
                        "error": str(error),
                    }
                },
            )
            report.failed.append((item.key, error))
            return
        finally:
            self._reporter.finish()

        report.downloaded.append(item.key)
