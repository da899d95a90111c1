"""
Base schemas shared by request and response DTOs.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from ..core.timezone_utils import ensure_utc


class StandardizedModel(BaseModel):
    """Base model with standardized JSON encoding"""

    model_config = ConfigDict(use_enum_values=True, populate_by_name=True)


class StrictModel(BaseModel):
    """Neutral strict base for response DTOs."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)


class StrictRequestModel(StrictModel):
    """Request DTO base that always forbids unexpected fields."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Stored datetimes come back naive on SQLite; responses are always UTC-aware."""
    return ensure_utc(value)
