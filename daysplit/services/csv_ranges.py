"""CSV day schedule parsing — turns a day/step/page table into DayRange records."""

from __future__ import annotations

import csv
import io
import re
from pathlib import Path
from typing import Optional

import structlog

from daysplit.schemas.common import DayRange

logger = structlog.get_logger(__name__)

COLUMNS = ("day", "step_start", "step_end", "page_start", "page_end")

# Leading integer, e.g. "12", " 12 ", "12 (cover)"
_INT_RE = re.compile(r"^\s*([+-]?\d+)")


def _parse_int(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    match = _INT_RE.match(value)
    return int(match.group(1)) if match else None


def parse_day_ranges(text: str) -> list[DayRange]:
    """Parse CSV text into day ranges.

    Rows without a usable day (header repeats, totals, blank lines) and rows
    with a non-numeric step or page field are skipped silently, so a bad file
    yields fewer records rather than an error.
    """
    reader = csv.DictReader(io.StringIO(text))
    if reader.fieldnames:
        reader.fieldnames = [name.strip().lower() for name in reader.fieldnames]

    ranges: list[DayRange] = []
    skipped = 0
    for row in reader:
        day = _parse_int(row.get("day"))
        if day is None or day <= 0:
            skipped += 1
            continue

        values = [_parse_int(row.get(column)) for column in COLUMNS[1:]]
        if any(v is None for v in values):
            skipped += 1
            continue

        step_start, step_end, page_start, page_end = values
        ranges.append(DayRange(
            day=day,
            step_start=step_start,
            step_end=step_end,
            page_start=page_start,
            page_end=page_end,
        ))

    logger.info("csv_parsed", days=len(ranges), skipped_rows=skipped)
    return ranges


def parse_day_ranges_file(csv_path: str | Path) -> list[DayRange]:
    """Read a CSV file (UTF-8, BOM tolerated) and parse it."""
    text = Path(csv_path).read_text(encoding="utf-8-sig")
    return parse_day_ranges(text)


def decode_csv(csv_bytes: bytes) -> str:
    """Decode uploaded CSV bytes, tolerating a UTF-8 BOM and latin-1 exports."""
    try:
        return csv_bytes.decode("utf-8-sig")
    except UnicodeDecodeError:
        return csv_bytes.decode("latin-1")
