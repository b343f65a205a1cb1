"""
Shared response schemas.

Every successful JSON body is wrapped in :class:`ResponseEnvelope`; error
bodies follow :class:`ErrorResponse` / :class:`ValidationErrorResponse` so the
OpenAPI document describes both contracts.
"""

from typing import Any, Generic, List, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class ResponseEnvelope(BaseModel, Generic[T]):
    """Uniform success wrapper: ``{"success": true, "data": ..., "count": n}``."""

    success: bool = Field(default=True, description="Always ``true`` for 2xx responses")
    data: T
    count: int = Field(..., ge=0, description="1 for a single object, list length otherwise")


def envelope(data: Any) -> dict:
    """Build envelope content for ``data``; the route's response_model validates it."""
    count = len(data) if isinstance(data, list) else 1
    return {"success": True, "data": data, "count": count}


class ErrorResponse(BaseModel):
    """Standard error body returned by all non-validation error handlers."""

    error: bool = Field(default=True, description="Always ``true`` for errors")
    message: str = Field(
        ..., description="Human-readable error description", examples=["Company not found"]
    )


class ValidationErrorDetail(BaseModel):
    """Single field-level validation failure."""

    field: str = Field(..., examples=["body -> total_shares"])
    message: str = Field(..., examples=["Input should be greater than or equal to 0"])


class ValidationErrorResponse(BaseModel):
    """Body of a 400 response caused by request validation."""

    error: bool = Field(default=True)
    message: str = Field(default="Validation failed")
    details: List[ValidationErrorDetail]
