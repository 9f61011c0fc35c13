"""S3-compatible storage client implementation.

This module provides an S3-compatible storage client that works with
AWS S3, MinIO, and other S3-compatible object storage services.

Dependencies:
    - boto3
    - botocore
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, BinaryIO, Iterator, Sequence

from s3console.infra.storage.client import (
    CompletedPart,
    MultipartUpload,
    RemoteObject,
    StorageError,
)

if TYPE_CHECKING:
    from s3console.common.config import Settings

logger = logging.getLogger("storage")


def _error_code(exc: Exception) -> str | None:
    """Extract the service error code from a botocore ClientError."""
    response = getattr(exc, "response", None)
    if not isinstance(response, dict):
        return None
    error = response.get("Error") or {}
    code = error.get("Code")
    return str(code) if code else None


def _storage_error(action: str, exc: Exception) -> StorageError:
    code = _error_code(exc)
    logger.debug(
        "storage_error action=%s code=%s error=%s",
        action,
        code or "-",
        exc,
        extra={"extra": {"action": action, "code": code}},
    )
    return StorageError(f"Failed to {action}: {exc}", code=code)


@dataclass
class S3ObjectStream:
    """Wraps the StreamingBody returned by ``get_object``."""

    body: Any
    content_length: int

    def iter_chunks(self, chunk_size: int) -> Iterator[bytes]:
        try:
            yield from self.body.iter_chunks(chunk_size=chunk_size)
        except Exception as exc:
            raise _storage_error("read object body", exc) from exc

    def close(self) -> None:
        self.body.close()


class S3StorageClient:
    """S3-compatible object storage client.

    Supports AWS S3, MinIO, and other S3-compatible services.
    Uses boto3 for all storage operations.
    """

    def __init__(self, *, settings: "Settings") -> None:
        """Initialize the S3 client with configuration from settings.

        Args:
            settings: Application settings containing S3 configuration.

        Raises:
            StorageError: If boto3 is not installed.
        """
        self._settings = settings
        self._client = self._build_client(settings)

    @staticmethod
    def _build_client(settings: "Settings") -> Any:
        """Create a boto3 S3 client from settings."""
        try:
            import boto3
            from botocore.config import Config
        except ImportError as exc:
            raise StorageError(
                "boto3 and botocore are required for S3 storage backend. "
                "Install with: pip install boto3"
            ) from exc

        config = Config(
            s3={"addressing_style": settings.S3_ADDRESSING_STYLE},
            connect_timeout=settings.S3_CONNECT_TIMEOUT,
            read_timeout=settings.S3_READ_TIMEOUT,
            # botocore must not retry; callers own retry policy.
            retries={"max_attempts": 1, "mode": "standard"},
        )

        params: dict[str, Any] = {
            "region_name": settings.S3_REGION,
            "use_ssl": bool(settings.S3_USE_SSL),
            "config": config,
        }
        if settings.S3_ENDPOINT_URL:
            params["endpoint_url"] = settings.S3_ENDPOINT_URL
        if settings.has_static_credentials:
            params["aws_access_key_id"] = settings.S3_ACCESS_KEY_ID
            params["aws_secret_access_key"] = settings.S3_SECRET_ACCESS_KEY

        return boto3.client("s3", **params)

    def put_object(
        self,
        *,
        bucket: str,
        object_key: str,
        body: BinaryIO,
        metadata: dict[str, str] | None = None,
    ) -> str:
        """Upload a whole object in one request."""
        params: dict[str, Any] = {"Bucket": bucket, "Key": object_key, "Body": body}
        if metadata:
            params["Metadata"] = metadata
        length = _body_length(body)
        if length is not None:
            params["ContentLength"] = length

        try:
            response = self._client.put_object(**params)
        except Exception as exc:
            raise _storage_error("put object", exc) from exc

        return str(response.get("ETag") or "")

    def init_multipart_upload(
        self,
        *,
        bucket: str,
        object_key: str,
        metadata: dict[str, str] | None = None,
    ) -> MultipartUpload:
        """Initialize a multipart upload session."""
        params: dict[str, Any] = {"Bucket": bucket, "Key": object_key}
        if metadata:
            params["Metadata"] = metadata

        try:
            response = self._client.create_multipart_upload(**params)
        except Exception as exc:
            raise _storage_error("create multipart upload", exc) from exc

        upload_id = response.get("UploadId")
        if not upload_id:
            raise StorageError("S3 response missing UploadId")

        return MultipartUpload(
            upload_id=str(upload_id),
            bucket=bucket,
            object_key=object_key,
        )

    def upload_part(
        self,
        *,
        bucket: str,
        object_key: str,
        upload_id: str,
        part_number: int,
        body: BinaryIO,
    ) -> str:
        """Upload one part and return its ETag."""
        params: dict[str, Any] = {
            "Bucket": bucket,
            "Key": object_key,
            "UploadId": upload_id,
            "PartNumber": int(part_number),
            "Body": body,
        }
        length = _body_length(body)
        if length is not None:
            params["ContentLength"] = length

        try:
            response = self._client.upload_part(**params)
        except Exception as exc:
            raise _storage_error(f"upload part {part_number}", exc) from exc

        etag = response.get("ETag")
        if not etag:
            raise StorageError(f"S3 response missing ETag for part {part_number}")
        return str(etag)

    def complete_multipart_upload(
        self,
        *,
        bucket: str,
        object_key: str,
        upload_id: str,
        parts: Sequence[CompletedPart],
    ) -> None:
        """Complete a multipart upload by combining all parts."""
        multipart_payload = {
            "Parts": [
                {"ETag": part.etag, "PartNumber": int(part.part_number)}
                for part in sorted(parts, key=lambda p: p.part_number)
            ]
        }

        try:
            self._client.complete_multipart_upload(
                Bucket=bucket,
                Key=object_key,
                UploadId=upload_id,
                MultipartUpload=multipart_payload,
            )
        except Exception as exc:
            raise _storage_error("complete multipart upload", exc) from exc

    def abort_multipart_upload(
        self,
        *,
        bucket: str,
        object_key: str,
        upload_id: str,
    ) -> None:
        """Abort a multipart upload and clean up uploaded parts."""
        try:
            self._client.abort_multipart_upload(
                Bucket=bucket,
                Key=object_key,
                UploadId=upload_id,
            )
        except Exception as exc:
            raise _storage_error("abort multipart upload", exc) from exc

    def get_object(self, *, bucket: str, object_key: str) -> S3ObjectStream:
        """Open an object for streaming download."""
        try:
            response = self._client.get_object(Bucket=bucket, Key=object_key)
        except Exception as exc:
            raise _storage_error("get object", exc) from exc

        size = response.get("ContentLength")
        return S3ObjectStream(
            body=response["Body"],
            content_length=int(size) if size is not None else 0,
        )

    def list_objects(self, *, bucket: str) -> Iterator[RemoteObject]:
        """Enumerate every object in a bucket using the list_objects_v2 paginator."""
        try:
            paginator = self._client.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=bucket):
                for item in page.get("Contents", []):
                    yield RemoteObject(
                        bucket=bucket,
                        key=str(item["Key"]),
                        size=int(item.get("Size") or 0),
                    )
        except Exception as exc:
            raise _storage_error("list objects", exc) from exc


def _body_length(body: BinaryIO) -> int | None:
    try:
        return len(body)  # type: ignore[arg-type]
    except TypeError:
        return None
