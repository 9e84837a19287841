"""Router: /api/models — upload, inspect, and manage calendar models (basic auth)."""

from __future__ import annotations

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import FileResponse, Response

from daysplit.schemas.models import MessageResponse, ModelDetail, ModelSummary, UploadResponse
from daysplit.security import require_admin
from daysplit.services import model_lifecycle
from daysplit.services.errors import (
    InvalidModelNameError,
    InvalidUploadError,
    ModelError,
    ModelExistsError,
    ModelNotFoundError,
    TokensMissingError,
)

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/models", tags=["models"], dependencies=[Depends(require_admin)])

_STATUS_BY_ERROR: list[tuple[type[ModelError], int]] = [
    (InvalidModelNameError, 400),
    (InvalidUploadError, 400),
    (TokensMissingError, 400),
    (ModelNotFoundError, 404),
    (ModelExistsError, 409),
]


def _to_http(exc: ModelError) -> HTTPException:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return HTTPException(status_code=status_code, detail=str(exc))
    return HTTPException(status_code=500, detail=str(exc) or "Internal server error")


@router.get("", response_model=list[ModelSummary])
def list_models():
    """List every model that has at least one day PDF, with its day count."""
    return model_lifecycle.list_models()


@router.post("/upload", response_model=UploadResponse)
async def upload_model(
    model_name: Optional[str] = Form(None, alias="modelName"),
    pdf: Optional[UploadFile] = File(None),
    csv: Optional[UploadFile] = File(None),
):
    """Create a model from a calendar PDF and its day schedule CSV.

    Splits the PDF into day files, issues a download token per day and renders
    the QR sheet. On failure nothing of the model is left behind.
    """
    pdf_bytes = await pdf.read() if pdf is not None else None
    csv_bytes = await csv.read() if csv is not None else None

    try:
        return await run_in_threadpool(
            model_lifecycle.create_model,
            model_name,
            pdf.filename if pdf is not None else None,
            pdf_bytes,
            csv.filename if csv is not None else None,
            csv_bytes,
        )
    except ModelError as exc:
        logger.warning("model_upload_rejected", model=model_name, error=str(exc))
        raise _to_http(exc)
    except Exception as exc:
        logger.error("model_upload_failed", model=model_name, error=str(exc), exc_info=True)
        raise HTTPException(status_code=500, detail=str(exc) or "Internal server error")


@router.get("/{model}", response_model=ModelDetail)
def get_model(model: str):
    """List a model's day files and the URL each one is downloaded from."""
    try:
        return model_lifecycle.get_model_detail(model)
    except ModelError as exc:
        raise _to_http(exc)


@router.delete("/{model}/delete", response_model=MessageResponse)
def delete_model(model: str):
    """Recursively delete a model and everything stored for it."""
    try:
        model_lifecycle.delete_model(model)
    except ModelError as exc:
        raise _to_http(exc)
    return MessageResponse(message=f"Model '{model}' deleted successfully")


@router.get("/{model}/qr-codes.get")
def get_qr_codes(model: str):
    """Download the model's stored QR sheet."""
    try:
        path = model_lifecycle.qr_sheet_path(model)
    except ModelError as exc:
        raise _to_http(exc)

    return FileResponse(
        path=str(path),
        media_type="application/pdf",
        filename=f"{model}-qr-codes.pdf",
    )


@router.post("/{model}/regenerate-qr-codes", response_model=UploadResponse)
def regenerate_qr_codes(model: str):
    """Rebuild the QR sheet from the model's existing tokens and the current base URL."""
    try:
        model_lifecycle.regenerate_qr_codes(model)
    except ModelError as exc:
        raise _to_http(exc)
    except Exception as exc:
        logger.error("qr_regeneration_failed", model=model, error=str(exc), exc_info=True)
        raise HTTPException(status_code=500, detail=str(exc) or "Internal server error")

    return UploadResponse(
        message=f"QR codes for model '{model}' regenerated successfully",
        name=model,
    )


@router.get("/{model}/pdf-backup")
def pdf_backup(model: str):
    """Download every day PDF merged into one file with "Day N" separator pages."""
    try:
        pdf_bytes = model_lifecycle.build_pdf_backup(model)
    except ModelError as exc:
        raise _to_http(exc)
    except Exception as exc:
        logger.error("pdf_backup_failed", model=model, error=str(exc), exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to generate PDF backup")

    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="calendar-{model}-backup.pdf"'},
    )


@router.get("/{model}/{day}.pdf")
def get_day_pdf(model: str, day: str):
    """Legacy direct download of a day PDF by number (no token)."""
    if not (day.isascii() and day.isdigit()):
        raise HTTPException(status_code=400, detail="Invalid day number")

    try:
        path = model_lifecycle.day_pdf_path(model, int(day))
    except ModelError as exc:
        raise _to_http(exc)

    return FileResponse(
        path=str(path),
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'inline; filename="day-{int(day)}.pdf"',
            "Cache-Control": "public, max-age=31536000",
        },
    )
