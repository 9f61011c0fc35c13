"""Object storage abstraction layer.

This module provides a protocol-based abstraction for object storage backends,
enabling support for S3, MinIO, and other S3-compatible services.
"""

from .client import (
    CompletedPart,
    MultipartUpload,
    ObjectStore,
    ObjectStream,
    RemoteObject,
    StorageError,
)
from .streams import ProgressReader, ProgressSink, open_range

__all__ = [
    "CompletedPart",
    "MultipartUpload",
    "ObjectStore",
    "ObjectStream",
    "ProgressReader",
    "ProgressSink",
    "RemoteObject",
    "StorageError",
    "open_range",
]
