"""
Core schemas - shared Pydantic models for API requests and responses.
"""

from datetime import datetime
from typing import Any, Literal
from uuid import UUID

from ninja import Schema
from pydantic import BaseModel, Field


class ErrorBody(BaseModel):
    code: str = Field(..., description="Stable machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: dict[str, Any] | None = None
    timestamp: datetime
    requestId: str | None = Field(None, description="Correlation ID of the failed request")


class ErrorResponse(BaseModel):
    """Standard error response format."""

    success: Literal[False] = False
    error: ErrorBody

    model_config = {
        "json_schema_extra": {
            "example": {
                "success": False,
                "error": {
                    "code": "DUPLICATE_FIELD",
                    "message": "A project group with this name already exists",
                    "details": {"field": "name"},
                    "timestamp": "2025-01-01T00:00:00+00:00",
                    "requestId": "550e8400-e29b-41d4-a716-446655440000",
                },
            }
        }
    }


class PaginationOut(Schema):
    current_page: int
    total_pages: int
    total_count: int
    per_page: int
    has_more: bool


class MessageResponse(Schema):
    success: bool = True
    message: str


class ListParams(Schema):
    """Query parameters shared by every list endpoint."""

    page: int = Field(1, description="1-based page number")
    limit: int | None = Field(None, description="Page size, defaults to LIST_DEFAULT_LIMIT")
    search: str | None = Field(None, description="Case-insensitive substring search")
    sort: str | None = Field(None, description="Sort field, prefix with '-' for descending")
    match: Literal["all", "any"] = Field("all", description="Combine filters with AND or OR")

    def filters(self) -> dict[str, Any]:
        """Resource-specific filter values, i.e. every field not declared here."""
        base = set(ListParams.model_fields)
        return {
            name: value
            for name, value in self.model_dump().items()
            if name not in base and value is not None
        }


class ResourceOut(Schema):
    """Provenance fields present on every tenant-scoped record."""

    id: UUID
    company_id: UUID
    created_by_id: UUID | None = None
    created_at: datetime
    updated_at: datetime


class Payload(Schema):
    """
    Base for create payloads.

    Fields are declared optional so required-field checks (and their
    messages) stay with MutationGuard; only keys the client sent are passed on.
    """

    def as_payload(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class PartialUpdate(Payload):
    """
    Base for update payloads.

    Provenance and system keys are declared so a client that sends them
    reaches MutationGuard and gets an explicit error instead of having
    them silently dropped. Entity schemas declare their own read-only
    and fixed keys the same way.
    """

    id: UUID | None = None
    company_id: UUID | None = None
    created_by_id: UUID | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    deleted_at: datetime | None = None


def envelope(data: Any) -> dict[str, Any]:
    return {"success": True, "data": data}
