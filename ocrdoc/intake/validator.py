"""Image intake: upload validation and queue record creation.

Candidates are checked for an image media type and a size ceiling using
their declared metadata. Payloads are read only for candidates that pass,
so an oversized upload is refused without being loaded. Rejections are
collected per file and never stop the remaining valid candidates from
being accepted.
"""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from ocrdoc.ocr.image_ops import make_preview
from ocrdoc.processing.state import FileQueue, UploadedFile, new_file_id
from ocrdoc.utils.config import IntakeConfig
from ocrdoc.utils.logger import get_logger

logger = get_logger(__name__)

PayloadReader = Callable[[], Awaitable[bytes]]


@dataclass(frozen=True)
class IntakeCandidate:
    """A file offered for upload, before validation.

    Attributes:
        filename: Name as uploaded.
        content_type: Declared media type.
        size: Declared byte size.
        read: Coroutine function returning the payload; only awaited for
            candidates that pass validation.
    """

    filename: str
    content_type: str
    size: int
    read: PayloadReader

    @classmethod
    def from_bytes(
        cls, filename: str, content_type: str, data: bytes
    ) -> "IntakeCandidate":
        """Build a candidate around an in-memory payload."""

        async def read() -> bytes:
            return data

        return cls(
            filename=filename, content_type=content_type, size=len(data), read=read
        )


@dataclass(frozen=True)
class IntakeRejection:
    """Diagnostic for a candidate refused at intake."""

    filename: str
    reason: str


@dataclass
class IntakeResult:
    """Outcome of one intake call."""

    accepted: list[UploadedFile] = field(default_factory=list)
    rejected: list[IntakeRejection] = field(default_factory=list)


def _format_limit(size_bytes: int) -> str:
    mib = size_bytes / (1024 * 1024)
    return f"{mib:g}MB"


def _too_large(filename: str, config: IntakeConfig) -> IntakeRejection:
    return IntakeRejection(
        filename=filename,
        reason=(
            f"{filename} is too large "
            f"(max {_format_limit(config.max_file_size_bytes)})"
        ),
    )


def validate_candidate(
    candidate: IntakeCandidate, config: IntakeConfig
) -> IntakeRejection | None:
    """Check a single candidate against the intake rules.

    Only declared metadata is inspected; the payload is not read.

    Args:
        candidate: File offered for upload.
        config: Intake limits.

    Returns:
        A rejection describing the first failed rule, or ``None`` if the
        candidate is acceptable.
    """
    content_type = (candidate.content_type or "").lower()
    if not content_type.startswith(config.accepted_type_prefix):
        return IntakeRejection(
            filename=candidate.filename,
            reason=f"{candidate.filename} is not a valid image file",
        )
    if candidate.size > config.max_file_size_bytes:
        return _too_large(candidate.filename, config)
    return None


async def accept_files(
    candidates: list[IntakeCandidate],
    queue: FileQueue,
    config: IntakeConfig | None = None,
) -> IntakeResult:
    """Validate candidates and queue the valid ones as ``pending`` files.

    Payloads are read only for candidates that pass validation, and a
    payload longer than the ceiling is still refused after reading.
    Previews are derived off the event loop. Accepted files are appended
    to ``queue`` in candidate order.

    Args:
        candidates: Files offered for upload.
        queue: Session queue that receives accepted files.
        config: Intake limits. Defaults to ``IntakeConfig()``.

    Returns:
        Accepted records and one rejection per refused candidate.
    """
    config = config or IntakeConfig()
    result = IntakeResult()
    loaded: list[tuple[IntakeCandidate, bytes]] = []

    for candidate in candidates:
        rejection = validate_candidate(candidate, config)
        if rejection is None:
            data = await candidate.read()
            if len(data) > config.max_file_size_bytes:
                rejection = _too_large(candidate.filename, config)
        if rejection is not None:
            logger.warning("Rejected upload: %s", rejection.reason)
            result.rejected.append(rejection)
            continue
        loaded.append((candidate, data))

    previews = await asyncio.gather(
        *(
            asyncio.to_thread(make_preview, data, c.content_type.lower())
            for c, data in loaded
        )
    )

    for (candidate, data), preview in zip(loaded, previews, strict=True):
        uploaded = UploadedFile(
            id=new_file_id(),
            filename=candidate.filename,
            content_type=candidate.content_type.lower(),
            data=data,
            preview=preview,
        )
        queue.add(uploaded)
        result.accepted.append(uploaded)

    logger.info(
        "Intake accepted %d of %d file(s)", len(result.accepted), len(candidates)
    )
    return result
