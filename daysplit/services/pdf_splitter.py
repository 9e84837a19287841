"""PDF splitter — split a calendar PDF into one document per day by page ranges."""

from __future__ import annotations

import io
from pathlib import Path

import structlog
from pypdf import PdfReader, PdfWriter

from daysplit.schemas.common import DayRange
from daysplit.storage import local as storage

logger = structlog.get_logger(__name__)


class PageRangeError(ValueError):
    """A day range cannot be satisfied by the source PDF."""


class SplitResult:
    """Outcome of a split: days written and per-day failures."""

    def __init__(self, created: list[int], errors: dict[int, str]):
        self.created = created
        self.errors = errors

    @property
    def created_count(self) -> int:
        return len(self.created)


def validate_ranges(ranges: list[DayRange], total_pages: int) -> None:
    """Check every range against the source before anything is written.

    Raises:
        PageRangeError: on the first range that is out of bounds or inverted.
    """
    for r in ranges:
        if r.page_start < 1 or r.page_end < 1:
            raise PageRangeError(
                f"Day {r.day}: Invalid page numbers (page_start: {r.page_start}, "
                f"page_end: {r.page_end}). Pages must be 1-based."
            )
        if r.page_start > r.page_end:
            raise PageRangeError(
                f"Day {r.day}: page_start ({r.page_start}) is greater than page_end ({r.page_end})"
            )
        if r.page_start > total_pages or r.page_end > total_pages:
            raise PageRangeError(
                f"Day {r.day}: Page range ({r.page_start}-{r.page_end}) "
                f"exceeds total pages ({total_pages})"
            )


def split_pdf(
    source: bytes | str | Path,
    ranges: list[DayRange],
    output_dir: str | Path,
) -> SplitResult:
    """Split a PDF into ``day-<N>.pdf`` files based on 1-based inclusive page ranges.

    Args:
        source: PDF bytes or a path to the source PDF.
        ranges: Day ranges parsed from the schedule CSV.
        output_dir: Directory receiving the day files.

    Returns:
        SplitResult with the days written and the error message of each day
        that failed. A later range for the same day overwrites the earlier file.
    """
    reader = PdfReader(io.BytesIO(source) if isinstance(source, bytes) else str(source))
    total_pages = len(reader.pages)
    logger.info("pdf_loaded", total_pages=total_pages, days=len(ranges))

    validate_ranges(ranges, total_pages)

    out_dir = Path(output_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    created: list[int] = []
    errors: dict[int, str] = {}

    for r in ranges:
        try:
            writer = PdfWriter()
            for page_idx in range(r.page_start - 1, r.page_end):
                writer.add_page(reader.pages[page_idx])

            buffer = io.BytesIO()
            writer.write(buffer)
            pdf_bytes = buffer.getvalue()

            out_path = out_dir / storage.day_pdf_name(r.day)
            out_path.write_bytes(pdf_bytes)
        except Exception as exc:
            logger.error("day_split_failed", day=r.day, error=str(exc))
            errors[r.day] = str(exc)
            continue

        if r.day not in created:
            created.append(r.day)
        errors.pop(r.day, None)
        logger.info(
            "day_split",
            day=r.day,
            pages=f"{r.page_start}-{r.page_end}",
            page_count=r.page_count,
            size_bytes=len(pdf_bytes),
        )

    logger.info("pdf_split_complete", created=len(created), failed=len(errors))
    return SplitResult(created=created, errors=errors)
