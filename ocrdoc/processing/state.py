"""Uploaded file records, the processing state machine, and the file queue.

Each ``UploadedFile`` is immutable. Status changes go through the
transition functions below, which validate the move and return a new
record, so the state machine can be exercised without any UI or server.

Allowed transitions::

    pending -> processing -> completed
                          -> error
    completed | error -> pending   (explicit reset only)
"""

import uuid
from collections.abc import Iterator
from dataclasses import dataclass, replace
from enum import StrEnum

from ocrdoc.errors import FileNotFoundInSessionError, InvalidTransitionError


class FileStatus(StrEnum):
    """Lifecycle status of an uploaded image."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"


TERMINAL_STATUSES = frozenset({FileStatus.COMPLETED, FileStatus.ERROR})


@dataclass(frozen=True)
class UploadedFile:
    """An image accepted at intake together with its OCR outcome."""

    id: str
    filename: str
    content_type: str
    data: bytes
    preview: str
    status: FileStatus = FileStatus.PENDING
    extracted_text: str | None = None
    confidence: float | None = None
    error_message: str | None = None

    @property
    def size(self) -> int:
        return len(self.data)


def new_file_id() -> str:
    """Generate an opaque id that is unique within the process."""
    return uuid.uuid4().hex


def _require(file: UploadedFile, expected: frozenset[FileStatus], target: str) -> None:
    if file.status not in expected:
        raise InvalidTransitionError(
            f"Cannot move {file.filename} from {file.status} to {target}"
        )


def start_processing(file: UploadedFile) -> UploadedFile:
    """Move a pending file into ``processing``."""
    _require(file, frozenset({FileStatus.PENDING}), FileStatus.PROCESSING)
    return replace(file, status=FileStatus.PROCESSING)


def complete(file: UploadedFile, text: str, confidence: float) -> UploadedFile:
    """Record a successful recognition for a file being processed."""
    _require(file, frozenset({FileStatus.PROCESSING}), FileStatus.COMPLETED)
    return replace(
        file,
        status=FileStatus.COMPLETED,
        extracted_text=text,
        confidence=confidence,
        error_message=None,
    )


def fail(file: UploadedFile, message: str) -> UploadedFile:
    """Record a recognition failure; no text is stored."""
    _require(file, frozenset({FileStatus.PROCESSING}), FileStatus.ERROR)
    return replace(
        file,
        status=FileStatus.ERROR,
        extracted_text=None,
        confidence=None,
        error_message=message,
    )


def reset(file: UploadedFile) -> UploadedFile:
    """Return a finished file to ``pending`` so the next run picks it up."""
    _require(file, TERMINAL_STATUSES, FileStatus.PENDING)
    return replace(
        file,
        status=FileStatus.PENDING,
        extracted_text=None,
        confidence=None,
        error_message=None,
    )


class FileQueue:
    """Ordered collection of uploaded files for one session.

    Order is upload order and is preserved by every operation; replacing
    a record keeps its position.
    """

    def __init__(self) -> None:
        self._files: dict[str, UploadedFile] = {}

    def __len__(self) -> int:
        return len(self._files)

    def __iter__(self) -> Iterator[UploadedFile]:
        return iter(list(self._files.values()))

    def __contains__(self, file_id: object) -> bool:
        return file_id in self._files

    def add(self, file: UploadedFile) -> None:
        if file.id in self._files:
            raise ValueError(f"Duplicate file id: {file.id}")
        self._files[file.id] = file

    def get(self, file_id: str) -> UploadedFile:
        try:
            return self._files[file_id]
        except KeyError:
            raise FileNotFoundInSessionError(file_id) from None

    def replace(self, file: UploadedFile) -> None:
        if file.id not in self._files:
            raise FileNotFoundInSessionError(file.id)
        self._files[file.id] = file

    def remove(self, file_id: str) -> UploadedFile:
        try:
            return self._files.pop(file_id)
        except KeyError:
            raise FileNotFoundInSessionError(file_id) from None

    def clear(self) -> None:
        self._files.clear()

    def with_status(self, status: FileStatus) -> list[UploadedFile]:
        return [f for f in self._files.values() if f.status == status]

    def pending(self) -> list[UploadedFile]:
        return self.with_status(FileStatus.PENDING)

    def completed(self) -> list[UploadedFile]:
        return self.with_status(FileStatus.COMPLETED)

    def status_counts(self) -> dict[str, int]:
        """Count files per status, including statuses with no files."""
        counts = {status.value: 0 for status in FileStatus}
        for file in self._files.values():
            counts[file.status.value] += 1
        return counts
