from .base import BaseTransferService, TransferTarget
from .bucket_download import BucketDownloadOrchestrator, BucketDownloadReport
from .bundle import TransferServiceBundle, get_service_bundle
from .errors import (
    DestinationExistsError,
    DirectoryTargetError,
    InvalidStateTransition,
    InvalidUploadError,
    LocalFileNotFoundError,
    RemoteServiceError,
    TransferError,
    TransferResult,
    UnknownTransferError,
    UnsafeObjectKeyError,
    classify_error,
)
from .multipart import (
    MIN_PART_SIZE_MIB,
    MultipartUploadOrchestrator,
    UploadSession,
    UploadState,
    effective_part_size,
)
from .paths import ensure_directory_for, is_file_path, key_to_local_path
from .progress import (
    ConsoleProgressReporter,
    LoggingProgressReporter,
    NullProgressReporter,
    ProgressReporter,
    percentage,
)
from .single_transfer import SingleObjectTransfer

__all__ = [
    "BaseTransferService",
    "TransferTarget",
    "BucketDownloadOrchestrator",
    "BucketDownloadReport",
    "TransferServiceBundle",
    "get_service_bundle",
    "TransferError",
    "TransferResult",
    "LocalFileNotFoundError",
    "DestinationExistsError",
    "RemoteServiceError",
    "UnknownTransferError",
    "InvalidUploadError",
    "UnsafeObjectKeyError",
    "DirectoryTargetError",
    "InvalidStateTransition",
    "classify_error",
    "MIN_PART_SIZE_MIB",
    "MultipartUploadOrchestrator",
    "UploadSession",
    "UploadState",
    "effective_part_size",
    "is_file_path",
    "ensure_directory_for",
    "key_to_local_path",
    "ProgressReporter",
    "ConsoleProgressReporter",
    "LoggingProgressReporter",
    "NullProgressReporter",
    "percentage",
    "SingleObjectTransfer",
]
