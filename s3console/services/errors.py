from __future__ import annotations

from dataclasses import dataclass

from s3console.infra.storage.client import StorageError


class TransferError(Exception):
    """Base class for transfer service level exceptions."""

    code = "UnknownError"


class LocalFileNotFoundError(TransferError):
    """Raised when the local source file does not exist at validation time."""

    code = "FileNotFound"


class DestinationExistsError(TransferError):
    """Raised when the download target exists and overwriting is disabled."""

    code = "AlreadyExists"


class RemoteServiceError(TransferError):
    """Raised when the object store rejects a request or the transport fails."""

    code = "RemoteServiceError"

    def __init__(self, message: str, *, storage_code: str | None = None) -> None:
        super().__init__(message)
        self.storage_code = storage_code


class UnknownTransferError(TransferError):
    """Raised for failures that fit no other category."""

    code = "UnknownError"


class InvalidUploadError(UnknownTransferError):
    """Raised when a file cannot be split within the store's part limits."""


class UnsafeObjectKeyError(UnknownTransferError):
    """Raised when an object key would resolve outside the destination."""


class DirectoryTargetError(UnknownTransferError):
    """Raised when a download would write onto a directory."""


class InvalidStateTransition(RuntimeError):
    """Raised when a multipart upload session is driven out of order."""


def classify_error(exc: BaseException) -> TransferError:
    """Map any exception onto the transfer error taxonomy."""
    if isinstance(exc, TransferError):
        return exc
    if isinstance(exc, StorageError):
        error = RemoteServiceError(str(exc), storage_code=exc.code)
    elif isinstance(exc, FileNotFoundError):
        error = LocalFileNotFoundError(str(exc))
    elif isinstance(exc, FileExistsError):
        error = DestinationExistsError(str(exc))
    else:
        error = UnknownTransferError(f"{type(exc).__name__}: {exc}")
    error.__cause__ = exc
    return error


@dataclass(frozen=True, slots=True)
class TransferResult:
    """Outcome of a single transfer operation."""

    error: TransferError | None = None
    abort_error: TransferError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls) -> "TransferResult":
        return cls()

    @classmethod
    def failure(
        cls, error: TransferError, *, abort_error: TransferError | None = None
    ) -> "TransferResult":
        return cls(error=error, abort_error=abort_error)
