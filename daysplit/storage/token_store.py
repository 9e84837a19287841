"""Download token persistence — one tokens.json per model, scanned for reverse lookups."""

from __future__ import annotations

import json
import secrets
from pathlib import Path
from typing import Iterable, Optional

import structlog

from daysplit.schemas.common import TokenLocation, TokenMapping, TokensFile
from daysplit.storage import local as storage

logger = structlog.get_logger(__name__)

TOKEN_BYTES = 16


# ---------------------------------------------------------------------------
# Token generation
# ---------------------------------------------------------------------------

def generate_token() -> str:
    """Return a new unguessable token: 16 random bytes as 32 lowercase hex chars."""
    return secrets.token_hex(TOKEN_BYTES)


def issue_tokens(days: Iterable[int]) -> TokensFile:
    """Build a fresh mapping with one new token per day."""
    return TokensFile(tokens={generate_token(): TokenMapping(day=day) for day in days})


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def read_tokens(model: str) -> Optional[TokensFile]:
    """Load a model's token mapping.

    Returns None when the file is missing, unreadable or not a valid mapping.
    """
    try:
        raw = storage.tokens_path(model).read_text(encoding="utf-8")
        return TokensFile.model_validate(json.loads(raw))
    except FileNotFoundError:
        return None
    except (OSError, ValueError) as exc:
        logger.warning("tokens_unreadable", model=model, error=str(exc))
        return None


def write_tokens(model: str, tokens_file: TokensFile) -> Path:
    """Persist the full mapping, replacing whatever was there."""
    path = storage.tokens_path(model)
    path.write_text(
        json.dumps(tokens_file.model_dump(), ensure_ascii=False, indent=2),
        encoding="utf-8",
    )
    logger.info("tokens_written", model=model, count=len(tokens_file.tokens))
    return path


def lookup_token(token: str) -> Optional[TokenLocation]:
    """Find which model and day a token belongs to by scanning every model."""
    for model in storage.list_model_names():
        tokens_file = read_tokens(model)
        if tokens_file is None:
            continue
        mapping = tokens_file.tokens.get(token)
        if mapping is not None:
            return TokenLocation(model=model, day=mapping.day)
    return None


def get_token_for_day(model: str, day: int) -> Optional[str]:
    """First token in the model's mapping that points at ``day``."""
    tokens_file = read_tokens(model)
    if tokens_file is None:
        return None
    return token_for_day(tokens_file, day)


def token_for_day(tokens_file: TokensFile, day: int) -> Optional[str]:
    for token, mapping in tokens_file.tokens.items():
        if mapping.day == day:
            return token
    return None
