"""
Data Transfer Objects (DTOs) for API layer.
Separates API contracts from stored records.
"""
from pydantic import BaseModel
from typing import Optional


class ShortenResponseDTO(BaseModel):
    """Response DTO for a stored short link (the id is in `message`)."""
    message: str


class HealthDTO(BaseModel):
    """Health check response."""
    status: str
    binding: Optional[str] = None


class LinkRecordDTO(BaseModel):
    """The record stored under a short id."""
    fulllink: str
    expiry: Optional[str] = None
