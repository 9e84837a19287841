"""Router: GET /api/download/{token} — public, token-gated day PDF download."""

from __future__ import annotations

import re

import structlog
from fastapi import APIRouter, HTTPException
from fastapi.responses import FileResponse

from daysplit.services.errors import ModelNotFoundError
from daysplit.services.model_lifecycle import resolve_download

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api", tags=["download"])

TOKEN_RE = re.compile(r"^[a-f0-9]{32}$")


@router.get("/download/{token}")
def download_day(token: str):
    """Serve the day PDF a QR code token points at. No authentication required."""
    if not TOKEN_RE.match(token):
        raise HTTPException(status_code=400, detail="Invalid token format")

    try:
        model, day, path = resolve_download(token)
    except ModelNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))

    logger.info("token_download", model=model, day=day)
    return FileResponse(
        path=str(path),
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'inline; filename="day-{day}.pdf"',
            "Cache-Control": "public, max-age=31536000",
        },
    )
