"""Whole-object upload and single-object download."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

from s3console.infra.observability.metrics import TRANSFER_BYTES
from s3console.infra.storage.streams import open_range
from s3console.services.base import BaseTransferService, TransferTarget, title_metadata
from s3console.services.errors import (
    DestinationExistsError,
    DirectoryTargetError,
    TransferResult,
)
from s3console.services.paths import PATH_SEPARATORS, key_to_local_path


class SingleObjectTransfer(BaseTransferService):
    """Moves one local file to one object, or one object to one local file.

    The public operations never raise: every failure is logged, counted and
    returned in the TransferResult.
    """

    def upload_whole(self, bucket: str, file_path: str | os.PathLike[str]) -> TransferResult:
        """Upload ``file_path`` as a single object keyed by its base name.

        The object carries a ``title`` metadata entry holding the base name
        without its extension.
        """
        target = TransferTarget.for_upload(bucket, file_path)
        try:
            size = self._require_file(target)
            with open_range(target.local_path, on_progress=self._reporter.report) as body:
                self._store.put_object(
                    bucket=target.bucket,
                    object_key=target.object_key,
                    body=body,
                    metadata=title_metadata(target.local_path),
                )
        except Exception as exc:
            return TransferResult.failure(self._failed("upload_whole", target, exc))
        finally:
            self._reporter.finish()

        TRANSFER_BYTES.labels(direction="upload").inc(size)
        self._succeeded("upload_whole", target, size=size)
        return TransferResult.success()

    def download_one(
        self,
        bucket: str,
        key: str,
        destination_directory: str | os.PathLike[str],
        overwrite: bool = False,
    ) -> TransferResult:
        """Download ``key`` to ``destination_directory/key``.

        With ``overwrite`` disabled an existing file is left untouched and the
        result carries a DestinationExistsError.
        """
        target = TransferTarget(
            bucket=bucket,
            object_key=key,
            local_path=os.path.join(os.fspath(destination_directory), key),
        )
        try:
            local_path = key_to_local_path(destination_directory, key)
            target = TransferTarget(bucket=bucket, object_key=key, local_path=local_path)
            size = self.download_to_path(bucket, key, local_path, overwrite=overwrite)
        except Exception as exc:
            return TransferResult.failure(self._failed("download_one", target, exc))
        finally:
            self._reporter.finish()

        self._succeeded("download_one", target, size=size)
        return TransferResult.success()

    def download_to_path(
        self,
        bucket: str,
        key: str,
        local_path: str | os.PathLike[str],
        *,
        overwrite: bool,
    ) -> int:
        """Stream ``key`` into ``local_path`` and return the number of bytes written.

        Bytes land in a temporary sibling first and are moved into place once
        the body has been fully received, so a failed download never leaves a
        partial file behind.

        Raises:
            DestinationExistsError: If ``local_path`` exists and ``overwrite``
                is False.
            DirectoryTargetError: If ``local_path`` ends in a separator or is
                an existing directory.
            StorageError: If the store fails to serve the object.
        """
        if os.fspath(local_path).endswith(PATH_SEPARATORS):
            raise DirectoryTargetError(f"Object key names a folder: {key!r}")
        path = Path(local_path)
        if path.is_dir():
            raise DirectoryTargetError(f"Destination is a directory: {path}")
        if not overwrite and path.exists():
            raise DestinationExistsError(f"File already exists: {path}")
        path.parent.mkdir(parents=True, exist_ok=True)

        stream = self._store.get_object(bucket=bucket, object_key=key)
        total = int(stream.content_length or 0)
        received = 0
        fd, temp_name = tempfile.mkstemp(
            dir=path.parent, prefix=f".{path.name}.", suffix=".part"
        )
        try:
            try:
                with os.fdopen(fd, "wb") as handle:
                    for chunk in stream.iter_chunks(self.chunk_size):
                        if not chunk:
                            continue
                        handle.write(chunk)
                        received += len(chunk)
                        self._reporter.report(received, total)
            finally:
                stream.close()

            if not overwrite and path.exists():
                raise DestinationExistsError(f"File already exists: {path}")
            os.replace(temp_name, path)
        except BaseException:
            if os.path.exists(temp_name):
                os.unlink(temp_name)
            raise

        TRANSFER_BYTES.labels(direction="download").inc(received)
        return received
