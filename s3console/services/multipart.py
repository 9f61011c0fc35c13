"""Multipart upload orchestration.

An upload walks ``NOT_STARTED -> INITIATED -> UPLOADING_PART* -> COMPLETING ->
COMPLETED``. Any failure once a session exists moves it to ``ABORTING`` and
then ``ABORTED``; the abort request is always issued so that stored parts do
not linger on the store.
"""

from __future__ import annotations

import enum
import logging
import math
import os
from dataclasses import dataclass, field

from s3console.infra.observability.metrics import (
    MULTIPART_ABORTS,
    MULTIPART_PARTS,
    TRANSFER_BYTES,
)
from s3console.infra.storage.client import CompletedPart
from s3console.infra.storage.streams import open_range
from s3console.services.base import BaseTransferService, TransferTarget, title_metadata
from s3console.services.errors import (
    InvalidStateTransition,
    InvalidUploadError,
    TransferError,
    TransferResult,
    classify_error,
)

logger = logging.getLogger("transfer")

MIB = 2**20
MIN_PART_SIZE_MIB = 5
MAX_PART_NUMBER = 10000


class UploadState(str, enum.Enum):
    NOT_STARTED = "not_started"
    INITIATED = "initiated"
    UPLOADING_PART = "uploading_part"
    COMPLETING = "completing"
    COMPLETED = "completed"
    ABORTING = "aborting"
    ABORTED = "aborted"


_TRANSITIONS: dict[UploadState, frozenset[UploadState]] = {
    UploadState.NOT_STARTED: frozenset({UploadState.INITIATED}),
    UploadState.INITIATED: frozenset(
        {UploadState.UPLOADING_PART, UploadState.ABORTING}
    ),
    UploadState.UPLOADING_PART: frozenset(
        {UploadState.UPLOADING_PART, UploadState.COMPLETING, UploadState.ABORTING}
    ),
    UploadState.COMPLETING: frozenset({UploadState.COMPLETED, UploadState.ABORTING}),
    UploadState.ABORTING: frozenset({UploadState.ABORTED}),
    UploadState.COMPLETED: frozenset(),
    UploadState.ABORTED: frozenset(),
}


def effective_part_size(part_size_mib: int) -> int:
    """Part size in bytes, raised to the store's 5 MiB floor."""
    return max(int(part_size_mib), MIN_PART_SIZE_MIB) * MIB


def part_count(total_size: int, part_size: int) -> int:
    # An empty file still goes up as one empty part.
    return max(math.ceil(total_size / part_size), 1)


@dataclass
class UploadSession:
    """State of one multipart upload, owned by a single ``upload()`` call."""

    bucket: str
    object_key: str
    part_size: int
    total_size: int
    upload_id: str | None = None
    state: UploadState = UploadState.NOT_STARTED
    completed_parts: list[CompletedPart] = field(default_factory=list)

    @property
    def expected_parts(self) -> int:
        return part_count(self.total_size, self.part_size)

    @property
    def next_part_number(self) -> int:
        return len(self.completed_parts) + 1

    def transition(self, state: UploadState) -> None:
        if state not in _TRANSITIONS[self.state]:
            raise InvalidStateTransition(
                f"Cannot move multipart upload from {self.state.value} to {state.value}"
            )
        self.state = state

    def record_part(self, part_number: int, etag: str) -> None:
        if part_number != self.next_part_number:
            raise InvalidStateTransition(
                f"Expected part {self.next_part_number}, got part {part_number}"
            )
        self.completed_parts.append(CompletedPart(part_number=part_number, etag=etag))

    def ordered_parts(self) -> list[CompletedPart]:
        """Parts ready for completion; every number from 1 must be present."""
        numbers = [part.part_number for part in self.completed_parts]
        if numbers != list(range(1, self.expected_parts + 1)):
            raise InvalidStateTransition(
                f"Upload has parts {numbers}, expected 1..{self.expected_parts}"
            )
        return list(self.completed_parts)


class MultipartUploadOrchestrator(BaseTransferService):
    """Uploads one file as a sequence of parts, aborting the session on failure.

    Parts are sent one after another; failed parts are never retried.
    """

    def upload(
        self,
        bucket: str,
        file_path: str | os.PathLike[str],
        part_size_mib: int | None = None,
    ) -> TransferResult:
        """Upload ``file_path`` in parts of ``part_size_mib`` MiB (at least 5).

        Without ``part_size_mib`` the configured ``TRANSFER_PART_SIZE_MB`` is used.

        Returns:
            TransferResult carrying the original error on failure and, when
            the cleanup abort also failed, that error as ``abort_error``.
        """
        target = TransferTarget.for_upload(bucket, file_path)
        try:
            total_size = self._require_file(target)
            session = UploadSession(
                bucket=target.bucket,
                object_key=target.object_key,
                part_size=effective_part_size(
                    self._settings.TRANSFER_PART_SIZE_MB
                    if part_size_mib is None
                    else part_size_mib
                ),
                total_size=total_size,
            )
            if session.expected_parts > MAX_PART_NUMBER:
                raise InvalidUploadError(
                    f"{total_size} bytes need {session.expected_parts} parts of "
                    f"{session.part_size} bytes; the limit is {MAX_PART_NUMBER}"
                )
            self._initiate(session, target)
        except Exception as exc:
            self._reporter.finish()
            return TransferResult.failure(self._failed("upload_multipart", target, exc))

        try:
            self._upload_parts(session, target)
            self._complete(session)
        except Exception as exc:
            error = self._failed("upload_multipart", target, exc)
            abort_error = self._abort(session)
            return TransferResult.failure(error, abort_error=abort_error)
        finally:
            self._reporter.finish()

        TRANSFER_BYTES.labels(direction="upload").inc(session.total_size)
        self._succeeded(
            "upload_multipart",
            target,
            upload_id=session.upload_id,
            parts=len(session.completed_parts),
            size=session.total_size,
        )
        return TransferResult.success()

    def _initiate(self, session: UploadSession, target: TransferTarget) -> None:
        upload = self._store.init_multipart_upload(
            bucket=session.bucket,
            object_key=session.object_key,
            metadata=title_metadata(target.local_path),
        )
        session.upload_id = upload.upload_id
        session.transition(UploadState.INITIATED)
        logger.debug(
            "multipart_initiated bucket=%s key=%s upload_id=%s parts=%s part_size=%s",
            session.bucket,
            session.object_key,
            session.upload_id,
            session.expected_parts,
            session.part_size,
            extra={
                "extra": {
                    **target.log_fields(),
                    "upload_id": session.upload_id,
                    "parts": session.expected_parts,
                    "part_size": session.part_size,
                }
            },
        )

    def _upload_parts(self, session: UploadSession, target: TransferTarget) -> None:
        offset = 0
        part_number = 1
        while True:
            session.transition(UploadState.UPLOADING_PART)
            length = min(session.part_size, session.total_size - offset)
            with open_range(
                target.local_path,
                offset=offset,
                length=length,
                on_progress=self._reporter.report,
                base=offset,
                total=session.total_size,
            ) as body:
                etag = self._store.upload_part(
                    bucket=session.bucket,
                    object_key=session.object_key,
                    upload_id=str(session.upload_id),
                    part_number=part_number,
                    body=body,
                )
            session.record_part(part_number, etag)
            MULTIPART_PARTS.inc()
            offset += session.part_size
            part_number += 1
            if offset >= session.total_size:
                break

    def _complete(self, session: UploadSession) -> None:
        parts = session.ordered_parts()
        session.transition(UploadState.COMPLETING)
        self._store.complete_multipart_upload(
            bucket=session.bucket,
            object_key=session.object_key,
            upload_id=str(session.upload_id),
            parts=parts,
        )
        session.transition(UploadState.COMPLETED)

    def _abort(self, session: UploadSession) -> TransferError | None:
        """Issue the abort request; return its error instead of raising it."""
        session.transition(UploadState.ABORTING)
        fields = {
            "bucket": session.bucket,
            "key": session.object_key,
            "upload_id": session.upload_id,
            "parts_stored": len(session.completed_parts),
        }
        try:
            self._store.abort_multipart_upload(
                bucket=session.bucket,
                object_key=session.object_key,
                upload_id=str(session.upload_id),
            )
        except Exception as exc:
            abort_error = classify_error(exc)
            MULTIPART_ABORTS.labels(outcome="failed").inc()
            logger.error(
                "multipart_abort_failed bucket=%s key=%s upload_id=%s error=%s",
                session.bucket,
                session.object_key,
                session.upload_id,
                abort_error,
                extra={"extra": {**fields, "error": str(abort_error)}},
            )
            return abort_error
        finally:
            session.transition(UploadState.ABORTED)

        MULTIPART_ABORTS.labels(outcome="success").inc()
        logger.warning(
            "multipart_aborted bucket=%s key=%s upload_id=%s parts_stored=%s",
            session.bucket,
            session.object_key,
            session.upload_id,
            len(session.completed_parts),
            extra={"extra": fields},
        )
        return None
