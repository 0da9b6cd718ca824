"""
Spacetime API — Pydantic Request/Response Schemas
===================================================

What:  Pydantic models defining the API contract with the frontend.
Why:   Strict input validation, automatic serialization, and OpenAPI docs.
How:   FastAPI validates request bodies against these models and serializes
       responses through them (by alias, so JSON keys are camelCase).

Design Decision:
    Schemas are separate from SQLAlchemy models because API contracts change
    independently of the database schema, and we control exactly which
    fields are exposed.

`isPublic` parsing rule:
    absent / null / ""                         → false
    true / false (JSON booleans)               → as given
    1 / 0 (JSON integers)                      → true / false
    "true" "1" "yes" "on" "t" "y"              → true   (case-insensitive)
    "false" "0" "no" "off" "f" "n"             → false  (case-insensitive)
    anything else                              → 400 validation error
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

EXCERPT_LENGTH = 115
EXCERPT_SUFFIX = "..."

_TRUE_STRINGS = frozenset({"true", "1", "yes", "on", "t", "y"})
_FALSE_STRINGS = frozenset({"false", "0", "no", "off", "f", "n", ""})


def parse_visibility_flag(value: Any) -> bool:
    """Applies the documented `isPublic` parsing rule (see module docstring)."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in _TRUE_STRINGS:
            return True
        if normalized in _FALSE_STRINGS:
            return False
    raise ValueError(
        "isPublic must be a boolean, 0/1, or one of "
        "'true', 'false', 'yes', 'no', 'on', 'off'"
    )


class CamelModel(BaseModel):
    """Base model whose JSON keys are camelCase while attributes stay snake_case."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class MemoryBody(CamelModel):
    """
    Body of POST /memories and PUT /memories/{id}.

    PUT uses full-replacement semantics with the same schema: leaving out
    `isPublic` on an update makes the memory private again.
    """
    # Request keys are camelCase only; snake_case names are not accepted
    model_config = ConfigDict(populate_by_name=False)

    content: str = Field(description="Memory text")
    cover_url: str = Field(description="URL of the cover image")
    is_public: bool = Field(default=False, description="Whether other users may read it")

    @field_validator("is_public", mode="before")
    @classmethod
    def coerce_is_public(cls, v: Any) -> bool:
        return parse_visibility_flag(v)


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class MemoryResponse(CamelModel):
    """
    Full representation of a memory.

    Returned by get-one, create and update.
    """
    id: uuid.UUID = Field(description="Unique memory identifier (UUID)")
    content: str
    cover_url: str
    is_public: bool
    user_id: str = Field(description="Owner subject identifier")
    created_at: datetime = Field(description="Creation timestamp (UTC ISO 8601)")

    @field_validator("created_at")
    @classmethod
    def ensure_utc(cls, v: datetime) -> datetime:
        # SQLite hands back naive datetimes; every stored value is UTC
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)


class MemorySummary(CamelModel):
    """
    Compact list item returned by GET /memories.

    `excerpt` holds the first 115 characters of the content, followed by
    "..." when the content was longer than that.
    """
    id: uuid.UUID
    cover_url: str
    excerpt: str


def build_excerpt(content: str, length: int = EXCERPT_LENGTH) -> str:
    if len(content) > length:
        return content[:length] + EXCERPT_SUFFIX
    return content


# ══════════════════════════════════════════════════════════════════════════
# Error / Health Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(CamelModel):
    """
    Standardized error response format.

    Example:
        {
            "error": "not_found",
            "message": "memory with ID '...' was not found",
            "requestId": "a1b2c3d4"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[Any] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(CamelModel):
    """Health check response showing service and database status."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
