"""
Treble API — Pydantic Request/Response Schemas
===============================================

What:  Pydantic models defining the API contract between frontend and backend.
Why:   Input validation, serialization, and OpenAPI doc generation.
How:   Python attributes are snake_case; the wire format is camelCase
       (patternUrl, authorName, ...) through an alias generator, so the
       existing frontend keeps working unchanged.

Design Decision:
    Schemas are separate from the SQLAlchemy model so the internal primary
    key never leaks and the wire names can differ from column names.
    Only presence is checked here; moderation and file-type rules run in
    PatternService so their order relative to the duplicate-slug check is
    fixed in one place.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for wire models: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class PatternCreate(CamelModel):
    """
    What:  Body of POST /upload.
    Rules: Every field except thumbnailUrl must be present and non-empty.
           An empty thumbnailUrl is the same as leaving it out.
    """
    pattern_url: str = Field(min_length=1, description="External URL of the pattern document")
    pattern_name: str = Field(min_length=1, description="Display name of the pattern")
    author_name: str = Field(min_length=1, description="Name of the pattern's author")
    description: str = Field(min_length=1, description="Free-text description")
    slug: str = Field(min_length=1, description="Unique identifier chosen by the uploader")
    thumbnail_url: Optional[str] = Field(default=None, description="Optional preview image URL")

    @field_validator("thumbnail_url")
    @classmethod
    def blank_thumbnail_is_absent(cls, v: Optional[str]) -> Optional[str]:
        return v or None


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class PatternResponse(CamelModel):
    """
    What:  Full representation of a stored pattern.
    Who:   Returned by GET /pattern/{slug} and as items of GET /search.
    """
    pattern_url: str
    pattern_name: str
    author_name: str
    description: str
    slug: str
    thumbnail_url: Optional[str] = None
    date_uploaded: datetime = Field(description="Upload time (UTC ISO 8601)")
    likes: int = Field(ge=0)

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class UploadResponse(BaseModel):
    """Returned by POST /upload with HTTP 201 Created."""
    message: str = Field(default="Pattern uploaded successfully")
    slug: str


class LikeResponse(BaseModel):
    """Returned by POST /like/{slug}: the like count after the increment."""
    likes: int = Field(ge=0)


class MessageResponse(BaseModel):
    message: str


# ══════════════════════════════════════════════════════════════════════════
# Error & Health Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    What:  Standardized error response format for all API errors.

    Example:
        {
            "error": "validation_error",
            "message": "Inappropriate Language Detected",
            "details": {"field": "description"},
            "request_id": "1f0c2a9e"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Returned by GET /health for monitoring and load balancer probes."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
