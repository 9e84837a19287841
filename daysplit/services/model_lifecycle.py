"""Model lifecycle — upload, split, tokenize, QR generation, and management of existing models."""

from __future__ import annotations

import shutil
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

import structlog
from pypdf.errors import PdfReadError

from daysplit.config import settings
from daysplit.schemas.common import TokensFile
from daysplit.schemas.models import DayEntry, ModelDetail, ModelSummary, UploadResponse
from daysplit.services.csv_ranges import decode_csv, parse_day_ranges
from daysplit.services.errors import (
    InvalidUploadError,
    ModelExistsError,
    ModelNotFoundError,
    ModelProcessingError,
    TokensMissingError,
)
from daysplit.services.pdf_backup import merge_with_separators
from daysplit.services.pdf_splitter import PageRangeError, split_pdf
from daysplit.services.qr_sheet import generate_qr_sheet
from daysplit.storage import local as storage
from daysplit.storage import token_store

logger = structlog.get_logger(__name__)


def _base_url(base_url: Optional[str]) -> str:
    return (base_url or settings.base_url).rstrip("/")


@contextmanager
def _model_workspace(name: str) -> Iterator[Path]:
    """Create a model directory that is removed again if the block raises."""
    try:
        model_dir = storage.create_model_dir(name)
    except FileExistsError:
        raise ModelExistsError(f"Model '{name}' already exists")

    try:
        yield model_dir
    except Exception:
        shutil.rmtree(model_dir, ignore_errors=True)
        logger.warning("model_rolled_back", model=name, path=str(model_dir))
        raise


def _validate_upload(
    pdf_filename: Optional[str],
    pdf_bytes: Optional[bytes],
    csv_filename: Optional[str],
    csv_bytes: Optional[bytes],
) -> None:
    if not pdf_filename or pdf_bytes is None:
        raise InvalidUploadError("PDF file is required")
    if not csv_filename or csv_bytes is None:
        raise InvalidUploadError("CSV file is required")
    if not pdf_filename.lower().endswith(".pdf"):
        raise InvalidUploadError("PDF file must have .pdf extension")
    if not csv_filename.lower().endswith(".csv"):
        raise InvalidUploadError("CSV file must have .csv extension")
    if not pdf_bytes:
        raise InvalidUploadError("PDF file is empty")
    if not csv_bytes:
        raise InvalidUploadError("CSV file is empty")


def _require_model(name: str) -> Path:
    model_dir = storage.model_dir(name)
    if not model_dir.is_dir():
        raise ModelNotFoundError(f"Model '{name}' not found")
    return model_dir


# ---------------------------------------------------------------------------
# Upload flow
# ---------------------------------------------------------------------------

def create_model(
    name: Optional[str],
    pdf_filename: Optional[str],
    pdf_bytes: Optional[bytes],
    csv_filename: Optional[str],
    csv_bytes: Optional[bytes],
    base_url: Optional[str] = None,
) -> UploadResponse:
    """Run the full upload flow for a new model.

    Steps:
    1. Validate the name and both uploads
    2. Create the model directory and store source.pdf / source.csv
    3. Parse the CSV schedule
    4. Split the PDF into day-<N>.pdf files
    5. Issue one token per day file actually written and save tokens.json
    6. Render qr-codes.pdf with the tokenized download URLs

    Any failure after step 2 removes the model directory before re-raising.
    """
    name = storage.validate_model_name(name)
    _validate_upload(pdf_filename, pdf_bytes, csv_filename, csv_bytes)

    log = logger.bind(model=name)
    log.info("model_upload_started", pdf_bytes=len(pdf_bytes), csv_bytes=len(csv_bytes))

    with _model_workspace(name) as model_dir:
        storage.save_sources(name, pdf_bytes, csv_bytes)

        ranges = parse_day_ranges(decode_csv(csv_bytes))
        if not ranges:
            raise InvalidUploadError("CSV file contains no valid day rows")

        try:
            result = split_pdf(pdf_bytes, ranges, model_dir)
        except PageRangeError as exc:
            raise InvalidUploadError(str(exc)) from exc
        except PdfReadError as exc:
            raise InvalidUploadError(f"Invalid PDF: {exc}") from exc

        if result.created_count == 0:
            raise ModelProcessingError("No day PDFs could be created from the upload")

        days = [day for day, _path in storage.list_day_files(name)]
        tokens_file = token_store.issue_tokens(days)
        token_store.write_tokens(name, tokens_file)
        log.info("tokens_issued", days=len(days))

        sheet = generate_qr_sheet(name, _base_url(base_url), tokens_file)
        storage.save_qr_sheet(name, sheet)

    log.info("model_upload_completed", days=len(days), split_errors=len(result.errors))
    return UploadResponse(
        message=f"Model '{name}' created successfully",
        name=name,
    )


# ---------------------------------------------------------------------------
# Existing models
# ---------------------------------------------------------------------------

def regenerate_qr_codes(name: str, base_url: Optional[str] = None) -> Path:
    """Rebuild qr-codes.pdf from the model's stored tokens (tokens are not reissued)."""
    _require_model(name)
    tokens_file = token_store.read_tokens(name)
    if tokens_file is None:
        raise TokensMissingError(
            f"No tokens found for model '{name}'. Cannot regenerate QR codes."
        )

    sheet = generate_qr_sheet(name, _base_url(base_url), tokens_file)
    path = storage.save_qr_sheet(name, sheet)
    logger.info("qr_codes_regenerated", model=name, days=len(tokens_file.days()))
    return path


def delete_model(name: str) -> None:
    """Recursively delete a model; a model that does not exist is an error."""
    try:
        storage.delete_model_dir(name)
    except FileNotFoundError:
        raise ModelNotFoundError(f"Model '{name}' not found")
    logger.info("model_deleted", model=name)


def list_models() -> list[ModelSummary]:
    """All models that contain at least one day PDF."""
    models: list[ModelSummary] = []
    for name in storage.list_model_names():
        try:
            day_files = storage.list_day_files(name)
        except ValueError:
            logger.warning("model_dir_skipped", name=name)
            continue
        if day_files:
            models.append(ModelSummary(name=name, days=len(day_files)))
    return models


def legacy_day_url(name: str, day: int) -> str:
    return f"/api/models/{name}/{day}.pdf"


def download_url(token: str) -> str:
    return f"/api/download/{token}"


def get_model_detail(name: str) -> ModelDetail:
    """Day files of a model with the URL each one is served from."""
    _require_model(name)
    tokens_file: Optional[TokensFile] = token_store.read_tokens(name)

    days: list[DayEntry] = []
    for day, path in storage.list_day_files(name):
        token = token_store.token_for_day(tokens_file, day) if tokens_file else None
        url = download_url(token) if token else legacy_day_url(name, day)
        days.append(DayEntry(day=day, filename=path.name, url=url))

    return ModelDetail(model=name, days=days, total_days=len(days))


def day_pdf_path(name: str, day: int) -> Path:
    path = storage.day_pdf_path(name, day)
    if not path.is_file():
        raise ModelNotFoundError(f"PDF not found for day {day} in model {name}")
    return path


def resolve_download(token: str) -> tuple[str, int, Path]:
    """Map a download token to (model, day, path of the day PDF)."""
    location = token_store.lookup_token(token)
    if location is None:
        raise ModelNotFoundError("PDF not found for the provided token")
    path = storage.day_pdf_path(location.model, location.day)
    if not path.is_file():
        logger.warning("token_target_missing", model=location.model, day=location.day)
        raise ModelNotFoundError("PDF not found")
    return location.model, location.day, path


def qr_sheet_path(name: str) -> Path:
    path = storage.qr_sheet_path(name)
    if not path.is_file():
        raise ModelNotFoundError(f"QR codes for model '{name}' not found")
    return path


def build_pdf_backup(name: str) -> bytes:
    """Merged PDF of every day with "Day N" separator pages."""
    day_files = storage.list_day_files(name)
    if not day_files:
        raise ModelNotFoundError(f"No PDF files found for model '{name}'")
    return merge_with_separators(day_files)
