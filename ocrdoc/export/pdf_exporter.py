"""Paginated PDF rendering of an assembled document using fpdf2.

Layout is computed by hand on an A4 page in millimetres: a title block,
an optional metadata block, then each section's title and word-wrapped
body. Automatic page breaking is disabled; a block that does not fit in
the remaining space moves to a new page, and bodies longer than a whole
page are continued line by line.
"""

from dataclasses import dataclass
from datetime import datetime

from fpdf import FPDF
from fpdf.enums import MethodReturnValue

from ocrdoc.document.assembler import DocumentOptions
from ocrdoc.export.filename import export_filename
from ocrdoc.export.text_exporter import format_generated_date
from ocrdoc.utils.config import ExportConfig
from ocrdoc.utils.logger import get_logger

logger = get_logger(__name__)

FONT_FAMILY = "Helvetica"


@dataclass(frozen=True)
class PageLayout:
    """Fixed page geometry and typography, in millimetres and points."""

    margin: float = 20.0
    section_break_zone: float = 60.0
    title_size: int = 20
    title_line_height: float = 12.0
    title_gap: float = 10.0
    meta_size: int = 10
    meta_line_height: float = 8.0
    meta_gap: float = 12.0
    section_title_size: int = 14
    section_title_line_height: float = 8.0
    section_title_gap: float = 5.0
    body_size: int = 11
    body_line_height: float = 6.0
    body_gap: float = 10.0
    separator_gap: float = 15.0
    separator_color: tuple[int, int, int] = (200, 200, 200)


def _latin1(text: str) -> str:
    # core PDF fonts only cover latin-1
    return text.encode("latin-1", errors="replace").decode("latin-1")


class PDFExporter:
    """Renders a document into PDF bytes.

    Args:
        config: Export settings (fallback file name, creator string).
        layout: Page geometry; the defaults give 20 mm margins on A4.
    """

    media_type = "application/pdf"
    extension = "pdf"

    def __init__(
        self, config: ExportConfig | None = None, layout: PageLayout | None = None
    ) -> None:
        self.config = config or ExportConfig()
        self.layout = layout or PageLayout()

    def render(
        self, options: DocumentOptions, generated_at: datetime | None = None
    ) -> bytes:
        """Lay out and serialize the document to PDF bytes."""
        return bytes(self.build(options, generated_at).output())

    def build(
        self, options: DocumentOptions, generated_at: datetime | None = None
    ) -> FPDF:
        """Lay out the document on as many pages as it needs.

        Args:
            options: Assembled document.
            generated_at: Timestamp printed in the metadata block.

        Returns:
            The laid-out ``FPDF`` document, ready for ``output()``.
        """
        generated_at = generated_at or datetime.now()
        lay = self.layout

        pdf = FPDF(orientation="P", unit="mm", format="A4")
        pdf.set_auto_page_break(auto=False)
        pdf.set_margins(lay.margin, lay.margin, lay.margin)
        pdf.set_creator(self.config.creator)
        if options.title:
            pdf.set_title(_latin1(options.title))
        if options.author:
            pdf.set_author(_latin1(options.author))
        if options.subject:
            pdf.set_subject(_latin1(options.subject))
        pdf.add_page()

        y = lay.margin

        if options.title:
            pdf.set_font(FONT_FAMILY, "B", lay.title_size)
            lines = self._wrap(pdf, options.title)
            y = self._draw_block(pdf, lines, y, lay.title_line_height)
            y += lay.title_gap

        if options.author or options.subject:
            pdf.set_font(FONT_FAMILY, "", lay.meta_size)
            meta = []
            if options.author:
                meta.append(f"Author: {options.author}")
            if options.subject:
                meta.append(f"Subject: {options.subject}")
            meta.append(f"Generated: {format_generated_date(generated_at)}")
            for line in meta:
                y = self._draw_block(
                    pdf, self._wrap(pdf, line), y, lay.meta_line_height
                )
            y += lay.meta_gap

        last = len(options.sections) - 1
        for index, section in enumerate(options.sections):
            if y > pdf.h - lay.section_break_zone:
                pdf.add_page()
                y = lay.margin

            if section.title:
                pdf.set_font(FONT_FAMILY, "B", lay.section_title_size)
                lines = self._wrap(pdf, section.title)
                y = self._draw_block(pdf, lines, y, lay.section_title_line_height)
                y += lay.section_title_gap

            if section.content.strip():
                pdf.set_font(FONT_FAMILY, "", lay.body_size)
                lines = self._wrap(pdf, section.content)
                y = self._draw_block(pdf, lines, y, lay.body_line_height)
                y += lay.body_gap

            if index < last:
                pdf.set_draw_color(*lay.separator_color)
                pdf.line(lay.margin, y, pdf.w - lay.margin, y)
                y += lay.separator_gap

        logger.info(
            "Rendered PDF with %d section(s) on %d page(s)",
            len(options.sections),
            pdf.page_no(),
        )
        return pdf

    def filename(self, options: DocumentOptions) -> str:
        return export_filename(
            options.title, self.extension, self.config.fallback_filename
        )

    def _wrap(self, pdf: FPDF, text: str) -> list[str]:
        width = pdf.w - 2 * self.layout.margin
        return pdf.multi_cell(
            w=width,
            h=self.layout.body_line_height,
            text=_latin1(text),
            dry_run=True,
            output=MethodReturnValue.LINES,
        )

    def _draw_block(
        self, pdf: FPDF, lines: list[str], y: float, line_height: float
    ) -> float:
        """Draw lines as one block, breaking pages where needed.

        A block that fits on a fresh page but not in the remaining space
        starts on a new page. A block taller than a page is continued on
        as many pages as it needs.
        """
        bottom = pdf.h - self.layout.margin
        height = len(lines) * line_height
        usable = bottom - self.layout.margin

        if y + height > bottom and height <= usable:
            pdf.add_page()
            y = self.layout.margin

        for line in lines:
            if y > bottom:
                pdf.add_page()
                y = self.layout.margin
            pdf.text(self.layout.margin, y, line)
            y += line_height
        return y
