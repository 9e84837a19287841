"""Schemas for model management endpoints."""

from pydantic import BaseModel, Field


class ModelSummary(BaseModel):
    """One entry of GET /api/models."""
    name: str = Field(..., description="Model name")
    days: int = Field(..., description="Number of day PDFs in the model")


class DayEntry(BaseModel):
    """A single day PDF and the URL it is served from."""
    day: int
    filename: str
    url: str = Field(..., description="Tokenized download URL, or the legacy by-day URL")


class ModelDetail(BaseModel):
    """Response for GET /api/models/{model}."""
    model: str
    days: list[DayEntry]
    total_days: int


class UploadResponse(BaseModel):
    """Response returned after a successful model upload."""
    success: bool = True
    message: str
    name: str = Field(..., description="Name of the created model")


class MessageResponse(BaseModel):
    """Generic success acknowledgement."""
    success: bool = True
    message: str
