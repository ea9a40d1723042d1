"""
KK's Cafe Backend - Pydantic Schemas
=====================================

What:  Pydantic models for the drink record and the API envelopes around it.
Why:   One model is both the persisted shape (JSON store, SQL rows) and the
       API contract, so `image` can never drift from `images`.
How:   Validators normalize legacy single-image records on the way in and
       recompute the derived `image` field on every construction.
"""

from typing import Any, List, Optional

from pydantic import BaseModel, Field, model_validator


class Drink(BaseModel):
    """
    A menu item.

    Field order is the on-disk and on-the-wire order:
        {"id", "name", "description", "images", "image"}

    Invariants:
        - image == images[0] when images is non-empty
        - image == "" when images is empty
    """

    id: int = Field(description="Unique id, derived from the creation timestamp (ms)")
    name: str = Field(description="Drink name")
    description: str = Field(description="Drink description")
    images: List[str] = Field(
        default_factory=list,
        description="Ordered image references; first entry is the primary image",
    )
    image: str = Field(default="", description="Primary image (mirror of images[0])")

    @model_validator(mode="before")
    @classmethod
    def upgrade_single_image_record(cls, data: Any) -> Any:
        """Records written before multi-image support only carry `image`."""
        if isinstance(data, dict) and data.get("images") is None:
            data = dict(data)
            legacy = data.get("image") or ""
            data["images"] = [legacy] if legacy else []
        return data

    @model_validator(mode="after")
    def sync_primary_image(self) -> "Drink":
        self.image = self.images[0] if self.images else ""
        return self


class DeleteResponse(BaseModel):
    """Returned by DELETE /api/drinks/{id}."""
    message: str = Field(default="Drink deleted successfully")


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Example:
        {
            "error": "not_found",
            "message": "Drink with ID '42' was not found",
            "request_id": "a1b2c3d4"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Returned by GET /health."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    store: str = Field(description="Record store status: available, unavailable")
    uptime_seconds: float = Field(description="Seconds since service started")
