"""Local filesystem storage operations.

Layout::

    <models_dir>/<model>/day-<N>.pdf
    <models_dir>/<model>/tokens.json
    <models_dir>/<model>/qr-codes.pdf
    <models_dir>/<model>/source.pdf
    <models_dir>/<model>/source.csv
"""

from __future__ import annotations

import re
import shutil
from pathlib import Path

from daysplit.config import settings
from daysplit.services.errors import InvalidModelNameError

SOURCE_PDF = "source.pdf"
SOURCE_CSV = "source.csv"
TOKENS_FILE = "tokens.json"
QR_SHEET_FILE = "qr-codes.pdf"

MAX_MODEL_NAME_LENGTH = 100

_MODEL_NAME_RE = re.compile(r"^[A-Za-z0-9_][A-Za-z0-9_.-]*$")
_DAY_FILE_RE = re.compile(r"^day-(\d+)\.pdf$")


def models_root() -> Path:
    return Path(settings.models_dir)


def validate_model_name(name: str | None) -> str:
    """Return the trimmed name, or raise if it cannot be used as a directory name."""
    name = (name or "").strip()
    if not name:
        raise InvalidModelNameError("Model name is required")
    if len(name) > MAX_MODEL_NAME_LENGTH or not _MODEL_NAME_RE.match(name) or ".." in name:
        raise InvalidModelNameError(
            f"Invalid model name '{name}': use letters, digits, '.', '_' or '-'"
        )
    return name


def model_dir(name: str) -> Path:
    return models_root() / validate_model_name(name)


def model_exists(name: str) -> bool:
    return model_dir(name).is_dir()


def create_model_dir(name: str) -> Path:
    """Create the directory for a new model.

    Raises FileExistsError if the model already exists; the create itself is
    the existence check, so two concurrent uploads cannot both succeed.
    """
    models_root().mkdir(parents=True, exist_ok=True)
    d = model_dir(name)
    d.mkdir(exist_ok=False)
    return d


def delete_model_dir(name: str) -> None:
    """Recursively remove a model directory (raises FileNotFoundError if absent)."""
    d = model_dir(name)
    if not d.is_dir():
        raise FileNotFoundError(f"Model not found: {name}")
    shutil.rmtree(d)


def list_model_names() -> list[str]:
    """Names of all model directories, sorted."""
    root = models_root()
    if not root.is_dir():
        return []
    return sorted(entry.name for entry in root.iterdir() if entry.is_dir())


# ---------------------------------------------------------------------------
# Day files
# ---------------------------------------------------------------------------

def day_pdf_name(day: int) -> str:
    return f"day-{day}.pdf"


def parse_day_pdf_name(filename: str) -> int | None:
    """Day number encoded in a ``day-<N>.pdf`` filename, or None."""
    match = _DAY_FILE_RE.match(filename)
    if not match:
        return None
    day = int(match.group(1))
    return day if day > 0 else None


def day_pdf_path(name: str, day: int) -> Path:
    return model_dir(name) / day_pdf_name(day)


def list_day_files(name: str) -> list[tuple[int, Path]]:
    """(day, path) for every day PDF present in a model, sorted by day."""
    d = model_dir(name)
    if not d.is_dir():
        return []
    found: list[tuple[int, Path]] = []
    for entry in d.iterdir():
        if not entry.is_file():
            continue
        day = parse_day_pdf_name(entry.name)
        if day is not None:
            found.append((day, entry))
    return sorted(found, key=lambda item: item[0])


# ---------------------------------------------------------------------------
# File operations
# ---------------------------------------------------------------------------

def save_sources(name: str, pdf_bytes: bytes, csv_bytes: bytes) -> tuple[Path, Path]:
    """Persist the original uploads next to the split output."""
    d = model_dir(name)
    pdf_path = d / SOURCE_PDF
    csv_path = d / SOURCE_CSV
    pdf_path.write_bytes(pdf_bytes)
    csv_path.write_bytes(csv_bytes)
    return pdf_path, csv_path


def tokens_path(name: str) -> Path:
    return model_dir(name) / TOKENS_FILE


def qr_sheet_path(name: str) -> Path:
    return model_dir(name) / QR_SHEET_FILE


def save_qr_sheet(name: str, pdf_bytes: bytes) -> Path:
    """Write the QR sheet, replacing any previous one."""
    path = qr_sheet_path(name)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(pdf_bytes)
    return path
