from __future__ import annotations

from dataclasses import dataclass, field

from s3console.common.config import Settings, get_settings
from s3console.infra.storage.client import ObjectStore
from s3console.infra.storage.s3_client import S3StorageClient

from .bucket_download import BucketDownloadOrchestrator
from .multipart import MultipartUploadOrchestrator
from .progress import NullProgressReporter, ProgressReporter
from .single_transfer import SingleObjectTransfer


@dataclass
class TransferServiceBundle:
    """Lazily constructs transfer services sharing one store and reporter."""

    store: ObjectStore
    reporter: ProgressReporter = field(default_factory=NullProgressReporter)
    settings: Settings = field(default_factory=get_settings)
    _single: SingleObjectTransfer | None = field(default=None, init=False, repr=False)
    _multipart: MultipartUploadOrchestrator | None = field(
        default=None, init=False, repr=False
    )
    _bucket: BucketDownloadOrchestrator | None = field(
        default=None, init=False, repr=False
    )

    def single(self) -> SingleObjectTransfer:
        if self._single is None:
            self._single = SingleObjectTransfer(
                self.store, reporter=self.reporter, settings=self.settings
            )
        return self._single

    def multipart(self) -> MultipartUploadOrchestrator:
        if self._multipart is None:
            self._multipart = MultipartUploadOrchestrator(
                self.store, reporter=self.reporter, settings=self.settings
            )
        return self._multipart

    def bucket(self) -> BucketDownloadOrchestrator:
        if self._bucket is None:
            self._bucket = BucketDownloadOrchestrator(
                self.store,
                reporter=self.reporter,
                settings=self.settings,
                downloader=self.single(),
            )
        return self._bucket


def get_service_bundle(
    settings: Settings | None = None,
    *,
    reporter: ProgressReporter | None = None,
) -> TransferServiceBundle:
    settings = settings or get_settings()
    return TransferServiceBundle(
        store=S3StorageClient(settings=settings),
        reporter=reporter or NullProgressReporter(),
        settings=settings,
    )
