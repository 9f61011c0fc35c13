"""Object store protocol and data types.

This module defines the interface the transfer services consume: whole-object
PUT/GET, the multipart upload lifecycle, and bucket enumeration.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import BinaryIO, Iterator, Protocol, Sequence


class StorageError(RuntimeError):
    """Raised when object storage operations fail.

    ``code`` carries the error code reported by the store (for example
    ``NoSuchKey`` or ``AccessDenied``) when one is available.
    """

    def __init__(self, message: str, *, code: str | None = None) -> None:
        super().__init__(message)
        self.code = code


@dataclass(frozen=True, slots=True)
class CompletedPart:
    """Represents a completed part in a multipart upload."""

    part_number: int
    etag: str


@dataclass(frozen=True, slots=True)
class MultipartUpload:
    """Result of initiating a multipart upload."""

    upload_id: str
    bucket: str
    object_key: str


@dataclass(frozen=True, slots=True)
class RemoteObject:
    """One entry discovered while enumerating a bucket."""

    bucket: str
    key: str
    size: int = 0


class ObjectStream(Protocol):
    """Body of a GET request, consumed chunk by chunk."""

    content_length: int

    def iter_chunks(self, chunk_size: int) -> Iterator[bytes]:
        ...

    def close(self) -> None:
        ...


class ObjectStore(Protocol):
    """Protocol defining the interface for object storage backends.

    Every method raises StorageError when the store rejects the request or
    the transport fails.
    """

    def put_object(
        self,
        *,
        bucket: str,
        object_key: str,
        body: BinaryIO,
        metadata: dict[str, str] | None = None,
    ) -> str:
        """Upload ``body`` as a single object.

        Args:
            bucket: Target bucket name.
            object_key: Object key (path) in the bucket.
            body: Readable binary stream with the object content.
            metadata: Custom metadata to attach to the object.

        Returns:
            The ETag of the stored object.
        """
        ...

    def init_multipart_upload(
        self,
        *,
        bucket: str,
        object_key: str,
        metadata: dict[str, str] | None = None,
    ) -> MultipartUpload:
        """Initialize a multipart upload session.

        Returns:
            MultipartUpload containing the upload_id for subsequent operations.
        """
        ...

    def upload_part(
        self,
        *,
        bucket: str,
        object_key: str,
        upload_id: str,
        part_number: int,
        body: BinaryIO,
    ) -> str:
        """Upload one part of a multipart upload.

        Args:
            upload_id: Multipart upload ID from init_multipart_upload.
            part_number: Part number (1-based, max 10000).
            body: Readable binary stream positioned over the part's bytes.

        Returns:
            The ETag of the stored part.
        """
        ...

    def complete_multipart_upload(
        self,
        *,
        bucket: str,
        object_key: str,
        upload_id: str,
        parts: Sequence[CompletedPart],
    ) -> None:
        """Complete a multipart upload by combining all parts."""
        ...

    def abort_multipart_upload(
        self,
        *,
        bucket: str,
        object_key: str,
        upload_id: str,
    ) -> None:
        """Abort a multipart upload and clean up uploaded parts."""
        ...

    def get_object(self, *, bucket: str, object_key: str) -> ObjectStream:
        """Open an object for reading."""
        ...

    def list_objects(self, *, bucket: str) -> Iterator[RemoteObject]:
        """Enumerate every object in the bucket, following pagination."""
        ...
