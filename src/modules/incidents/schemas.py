from datetime import datetime

from pydantic import Field, field_validator

from src.modules.incidents.models import IncidentStatus, IncidentType
from src.shared.schemas import BaseSchema, TimestampMixin


class IncidentCreate(BaseSchema):
    """Schema for reporting a new incident."""

    type: IncidentType
    title: str = Field(..., max_length=300)
    description: str
    severity: int
    occurred_at: datetime
    reported_by: str = Field(..., min_length=1, max_length=100)
    location: str | None = Field(None, max_length=300)
    witness_name: str | None = Field(None, max_length=200)
    immediate_action: str | None = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 5:
            raise ValueError("Title must be at least 5 characters")
        return v

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 20:
            raise ValueError("Description must be at least 20 characters")
        return v

    @field_validator("severity")
    @classmethod
    def validate_severity(cls, v: int) -> int:
        if v < 1 or v > 5:
            raise ValueError("Severity must be 1-5")
        return v


class IncidentStatusUpdate(BaseSchema):
    """Schema for moving an incident through its workflow."""

    status: IncidentStatus


class IncidentResponse(TimestampMixin):
    """Schema for incident response."""

    id: int
    reference_number: str
    type: str
    status: str
    title: str
    description: str
    severity: int
    occurred_at: datetime
    reported_by: str
    location: str | None
    witness_name: str | None
    immediate_action: str | None
