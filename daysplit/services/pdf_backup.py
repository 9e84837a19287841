"""PDF backup — merge all day PDFs of a model into one file with "Day N" separator pages."""

from __future__ import annotations

import io
from pathlib import Path

import structlog
from pypdf import PdfReader, PdfWriter
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

logger = structlog.get_logger(__name__)

SEPARATOR_FONT = "Helvetica-Bold"
SEPARATOR_FONT_SIZE = 48


def render_separator_page(day: int) -> bytes:
    """Single A4 page with a centered "Day N" title and a rule beneath it."""
    width, height = A4
    buffer = io.BytesIO()
    c = canvas.Canvas(buffer, pagesize=A4)
    c.setFont(SEPARATOR_FONT, SEPARATOR_FONT_SIZE)
    c.drawCentredString(width / 2, (height - SEPARATOR_FONT_SIZE) / 2, f"Day {day}")
    c.setLineWidth(2)
    c.line(50, height / 2 - 40, width - 50, height / 2 - 40)
    c.showPage()
    c.save()
    return buffer.getvalue()


def merge_with_separators(day_files: list[tuple[int, Path]]) -> bytes:
    """Concatenate day PDFs in day order, each preceded by its separator page."""
    writer = PdfWriter()

    for day, path in sorted(day_files, key=lambda item: item[0]):
        separator = PdfReader(io.BytesIO(render_separator_page(day)))
        writer.add_page(separator.pages[0])

        reader = PdfReader(str(path))
        for page in reader.pages:
            writer.add_page(page)
        logger.debug("backup_day_added", day=day, pages=len(reader.pages))

    buffer = io.BytesIO()
    writer.write(buffer)
    pdf_bytes = buffer.getvalue()

    logger.info("pdf_backup_built", days=len(day_files), size_bytes=len(pdf_bytes))
    return pdf_bytes
