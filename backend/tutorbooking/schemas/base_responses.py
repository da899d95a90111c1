"""
Base response schemas for standardized API responses.
"""

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field


class PaginationMeta(BaseModel):
    page: int = Field(ge=1, description="Current page number")
    per_page: int = Field(ge=1, description="Items per page")
    total: int = Field(ge=0, description="Total number of matching items")
    total_pages: int = Field(ge=1, description="Number of pages (never below 1)")


class ErrorResponse(BaseModel):
    """Envelope returned for every error."""

    status: int = Field(description="HTTP status code")
    message: str = Field(description="Human-readable error message")
    code: str = Field(description="Machine-readable error code")
    details: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "status": 409,
                "message": "This time slot conflicts with an existing booking",
                "code": "BOOKING_CONFLICT",
                "details": {"conflicting_public_ids": ["6f1c..."]},
            }
        }
    )


class HealthResponse(BaseModel):
    status: str = "healthy"
    service: str
    version: str
