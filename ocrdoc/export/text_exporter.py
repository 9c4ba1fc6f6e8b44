"""Plain-text rendering of an assembled document."""

from datetime import datetime

from ocrdoc.document.assembler import DocumentOptions
from ocrdoc.export.filename import export_filename
from ocrdoc.utils.config import ExportConfig

SECTION_SEPARATOR = "---"


def format_generated_date(generated_at: datetime) -> str:
    return generated_at.strftime("%Y-%m-%d")


class TextExporter:
    """Serializes a document as plain text.

    The title is underlined with ``=``, section titles with ``-``, and
    consecutive sections are separated by a ``---`` line.

    Args:
        config: Export settings (fallback file name).
    """

    media_type = "text/plain; charset=utf-8"
    extension = "txt"

    def __init__(self, config: ExportConfig | None = None) -> None:
        self.config = config or ExportConfig()

    def render(
        self, options: DocumentOptions, generated_at: datetime | None = None
    ) -> str:
        """Render the document as a single string."""
        generated_at = generated_at or datetime.now()
        parts: list[str] = []

        if options.title:
            parts.append(f"{options.title}\n")
            parts.append("=" * len(options.title) + "\n\n")

        if options.author:
            parts.append(f"Author: {options.author}\n")
        if options.subject:
            parts.append(f"Subject: {options.subject}\n")
        parts.append(f"Generated: {format_generated_date(generated_at)}\n\n")

        last = len(options.sections) - 1
        for index, section in enumerate(options.sections):
            if section.title:
                parts.append(f"{section.title}\n")
                parts.append("-" * len(section.title) + "\n\n")
            if section.content.strip():
                parts.append(f"{section.content}\n\n")
            if index < last:
                parts.append(f"{SECTION_SEPARATOR}\n\n")

        return "".join(parts)

    def filename(self, options: DocumentOptions) -> str:
        return export_filename(
            options.title, self.extension, self.config.fallback_filename
        )
