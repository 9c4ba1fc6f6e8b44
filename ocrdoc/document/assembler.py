"""Assembly of completed OCR results into an exportable document model.

Sections are derived on every export from the current queue and the
user's edit overlay; nothing here is stored.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from ocrdoc.processing.state import FileStatus, UploadedFile
from ocrdoc.utils.config import ExportConfig


@dataclass(frozen=True)
class DocumentSection:
    """One unit of document content, from one source image."""

    content: str
    title: str | None = None
    image_url: str | None = None


@dataclass(frozen=True)
class DocumentOptions:
    """Everything an exporter needs to render a document."""

    title: str | None = None
    author: str | None = None
    subject: str | None = None
    sections: list[DocumentSection] = field(default_factory=list)


def section_title(position: int, filename: str) -> str:
    return f"Section {position} - {filename}"


def build_sections(
    files: Iterable[UploadedFile],
    overlay: Mapping[str, str] | None = None,
) -> list[DocumentSection]:
    """Build one section per completed file, in queue order.

    Args:
        files: Session files in queue order; non-completed files are
            skipped entirely.
        overlay: Mapping of file id to user-edited replacement text.

    Returns:
        Ordered document sections.
    """
    overlay = overlay or {}
    completed = [f for f in files if f.status == FileStatus.COMPLETED]
    return [
        DocumentSection(
            title=section_title(position, f.filename),
            content=overlay[f.id] if f.id in overlay else (f.extracted_text or ""),
            image_url=f.preview,
        )
        for position, f in enumerate(completed, start=1)
    ]


def build_document(
    files: Iterable[UploadedFile],
    overlay: Mapping[str, str] | None = None,
    title: str | None = None,
    author: str | None = None,
    subject: str | None = None,
    config: ExportConfig | None = None,
) -> DocumentOptions:
    """Assemble document options for export.

    ``title`` and ``subject`` fall back to the configured defaults when
    not given; an empty author is treated as absent.
    """
    config = config or ExportConfig()
    return DocumentOptions(
        title=config.default_title if title is None else title,
        author=author or None,
        subject=config.default_subject if subject is None else subject,
        sections=build_sections(files, overlay),
    )
