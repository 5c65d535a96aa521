"""
Pydantic models for request/response validation, plus the stored Paste record.
"""
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, StrictInt, StrictStr, field_validator


@dataclass(frozen=True)
class Paste:
    """A stored paste as read from the backing store."""

    id: str
    content: str
    expires_at: Optional[datetime] = None
    remaining_views: Optional[int] = None

    def is_available(self, now: datetime) -> bool:
        """A paste is gone once its expiry time is reached or its views run out."""
        if self.expires_at is not None and now >= self.expires_at:
            return False
        if self.remaining_views is not None and self.remaining_views <= 0:
            return False
        return True

    def consume_view(self) -> "Paste":
        """Copy of this paste with one fewer remaining view."""
        return replace(self, remaining_views=self.remaining_views - 1)


def format_expires_at(expires_at: Optional[datetime]) -> Optional[str]:
    """ISO 8601 in UTC with a Z suffix, e.g. 2026-01-01T00:00:00.000Z."""
    if expires_at is None:
        return None
    return expires_at.isoformat(timespec="milliseconds").replace("+00:00", "Z")


# Ten years
MAX_TTL_SECONDS = 10 * 365 * 24 * 60 * 60


class PasteCreate(BaseModel):
    """Schema for creating a new paste."""
    content: StrictStr = Field(..., description="Text content (required, non-empty)")
    ttl_seconds: Optional[StrictInt] = Field(None, ge=1, le=MAX_TTL_SECONDS, description="Optional TTL in seconds")
    max_views: Optional[StrictInt] = Field(None, ge=1, description="Optional view limit")

    @field_validator("content")
    @classmethod
    def content_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("content is required and must be non-empty")
        return value


class PasteResponse(BaseModel):
    """Schema for paste creation response."""
    id: str = Field(..., description="Unique paste ID")
    url: str = Field(..., description="Shareable URL to view the paste")


class PasteView(BaseModel):
    """Schema for viewing/fetching a paste."""
    content: str = Field(..., description="Paste text content")
    remaining_views: Optional[int] = Field(None, description="Views left (null if unlimited)")
    expires_at: Optional[str] = Field(None, description="Expiry timestamp (ISO 8601, null if no TTL)")

    @classmethod
    def from_paste(cls, paste: Paste) -> "PasteView":
        return cls(
            content=paste.content,
            remaining_views=paste.remaining_views,
            expires_at=format_expires_at(paste.expires_at),
        )


class HealthCheck(BaseModel):
    """Schema for health check response."""
    ok: bool = Field(..., description="Is the application healthy?")
    error: Optional[str] = Field(None, description="Why the application is unhealthy")
