"""Shared fixtures: an isolated models directory and small synthetic PDFs."""

import io
from pathlib import Path

import pytest
from pypdf import PdfReader, PdfWriter

from daysplit.config import settings

SCHEDULE_HEADER = "day,step_start,step_end,page_start,page_end\n"


def make_pdf(pages: int) -> bytes:
    """Blank PDF whose page N (1-based) is 100 + N points wide."""
    writer = PdfWriter()
    for n in range(1, pages + 1):
        writer.add_blank_page(width=100 + n, height=200)
    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


def page_numbers(pdf) -> list[int]:
    """Original 1-based page numbers of a PDF built by make_pdf (bytes or path)."""
    reader = PdfReader(io.BytesIO(pdf) if isinstance(pdf, bytes) else str(pdf))
    return [round(float(page.mediabox.width)) - 100 for page in reader.pages]


def schedule(*rows: tuple) -> bytes:
    body = "".join(",".join(str(v) for v in row) + "\n" for row in rows)
    return (SCHEDULE_HEADER + body).encode("utf-8")


@pytest.fixture(autouse=True)
def models_root(tmp_path, monkeypatch) -> Path:
    """Point the application at an empty models directory for every test."""
    root = tmp_path / "files"
    monkeypatch.setattr(settings, "models_dir", str(root))
    monkeypatch.setattr(settings, "base_url", "http://calendar.test")
    monkeypatch.setattr(settings, "basic_auth_enabled", True)
    monkeypatch.setattr(settings, "basic_auth_username", "admin")
    monkeypatch.setattr(settings, "basic_auth_password", "secret")
    return root


@pytest.fixture
def ten_page_pdf() -> bytes:
    return make_pdf(10)


@pytest.fixture
def two_day_csv() -> bytes:
    return schedule((1, 1, 1, 1, 5), (2, 2, 2, 6, 10))
