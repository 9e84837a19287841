"""QR sheet generation — one QR code per day, laid out on A4 pages."""

from __future__ import annotations

import io
from typing import Optional

import qrcode
import structlog
from PIL import Image
from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from daysplit.config import settings
from daysplit.schemas.common import TokensFile
from daysplit.storage.token_store import token_for_day

logger = structlog.get_logger(__name__)

PLACEHOLDER_TOKEN = "placeholder-token"

# Layout (points unless noted)
PAGE_WIDTH, PAGE_HEIGHT = A4
QR_PIXELS = 200
QR_SIZE = 180
COLS = 2
ROWS = 3
CODES_PER_PAGE = COLS * ROWS
MARGIN = 40
LABEL_FONT = "Helvetica"
LABEL_FONT_SIZE = 11

_AVAILABLE_WIDTH = PAGE_WIDTH - 2 * MARGIN
_AVAILABLE_HEIGHT = PAGE_HEIGHT - 2 * MARGIN
COL_SPACING = (_AVAILABLE_WIDTH - COLS * QR_SIZE) / (COLS - 1)
ROW_SPACING = (_AVAILABLE_HEIGHT - ROWS * QR_SIZE - 60) / (ROWS - 1)


def model_initial(model_name: str) -> str:
    return model_name[:1].upper()


def qr_payload(model_name: str, day: int, base_url: str, token: str) -> str:
    """String encoded in a day's QR code: ``<Initial>-<day>:<base_url>/api/download/<token>``."""
    return f"{model_initial(model_name)}-{day}:{base_url.rstrip('/')}/api/download/{token}"


def render_qr_png(data: str) -> bytes:
    """Render ``data`` as a QR_PIXELS x QR_PIXELS black-on-white PNG."""
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=10,
        border=2,
    )
    qr.add_data(data)
    qr.make(fit=True)

    raw = io.BytesIO()
    qr.make_image(fill_color="black", back_color="white").save(raw)
    raw.seek(0)

    with Image.open(raw) as img:
        resized = img.convert("RGB").resize((QR_PIXELS, QR_PIXELS), Image.Resampling.NEAREST)
    out = io.BytesIO()
    resized.save(out, format="PNG")
    return out.getvalue()


def slot_position(slot: int) -> tuple[float, float]:
    """Bottom-left corner of the QR image for a grid slot (0..CODES_PER_PAGE-1)."""
    col = slot % COLS
    row = slot // COLS
    x = MARGIN + col * (QR_SIZE + COL_SPACING)
    y = PAGE_HEIGHT - MARGIN - (row + 1) * QR_SIZE - row * ROW_SPACING - 20
    return x, y - 25


def generate_qr_sheet(
    model_name: str,
    base_url: str,
    token_mappings: Optional[TokensFile] = None,
) -> bytes:
    """Build the QR sheet PDF for a model.

    With a token mapping, renders one code per distinct mapped day (ascending).
    Without one, renders placeholder codes for days 1..default_qr_days.
    """
    if token_mappings is not None:
        days = token_mappings.days()
    else:
        days = list(range(1, settings.default_qr_days + 1))
        logger.warning("qr_placeholder_tokens", model=model_name, days=len(days))

    initial = model_initial(model_name)
    buffer = io.BytesIO()
    c = canvas.Canvas(buffer, pagesize=A4)
    c.setTitle(f"{model_name} QR codes")

    slot = 0
    drawn = 0
    for day in days:
        if token_mappings is not None:
            token = token_for_day(token_mappings, day)
            if token is None:
                logger.warning("qr_token_missing", model=model_name, day=day)
                continue
        else:
            token = PLACEHOLDER_TOKEN

        if slot == CODES_PER_PAGE:
            c.showPage()
            slot = 0

        payload = qr_payload(model_name, day, base_url, token)
        x, y = slot_position(slot)
        c.drawImage(ImageReader(io.BytesIO(render_qr_png(payload))), x, y, width=QR_SIZE, height=QR_SIZE)
        c.setFont(LABEL_FONT, LABEL_FONT_SIZE)
        c.drawCentredString(x + QR_SIZE / 2, y - 10, f"{initial}-{day}")

        slot += 1
        drawn += 1
        logger.debug("qr_drawn", model=model_name, day=day)

    c.showPage()
    c.save()

    pdf_bytes = buffer.getvalue()
    logger.info(
        "qr_sheet_generated",
        model=model_name,
        codes=drawn,
        pages=(drawn + CODES_PER_PAGE - 1) // CODES_PER_PAGE or 1,
        size_bytes=len(pdf_bytes),
    )
    return pdf_bytes
