"""Shared schema types used across the application."""

from __future__ import annotations

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Data Models
# ---------------------------------------------------------------------------

class DayRange(BaseModel):
    """One CSV row: the source pages that make up a single calendar day."""
    day: int = Field(..., description="Calendar day number (positive)")
    step_start: int = Field(..., description="First build step covered by the day")
    step_end: int = Field(..., description="Last build step covered by the day")
    page_start: int = Field(..., description="1-based start page (inclusive)")
    page_end: int = Field(..., description="1-based end page (inclusive)")

    @property
    def page_count(self) -> int:
        return self.page_end - self.page_start + 1


class TokenMapping(BaseModel):
    """What a download token points at inside its model."""
    day: int


class TokensFile(BaseModel):
    """Contents of a model's tokens.json."""
    tokens: dict[str, TokenMapping] = Field(default_factory=dict)

    def days(self) -> list[int]:
        """Distinct mapped days, ascending."""
        return sorted({mapping.day for mapping in self.tokens.values()})


class TokenLocation(BaseModel):
    """Result of resolving a token across all models."""
    model: str
    day: int
