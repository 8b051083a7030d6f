from datetime import datetime

from pydantic import Field, field_validator

from src.shared.schemas import BaseSchema


class SequenceCounterResponse(BaseSchema):
    """Schema for sequence counter response."""

    sequence_type: str
    period: int
    last_number: int
    updated_at: datetime


class AllocateNumberRequest(BaseSchema):
    """Schema for issuing a reference number."""

    sequence_type: str = Field(..., min_length=1, max_length=100)
    year: int | None = None

    @field_validator("sequence_type")
    @classmethod
    def validate_sequence_type(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Sequence type must not be blank")
        return v.strip()

    @field_validator("year")
    @classmethod
    def validate_year(cls, v: int | None) -> int | None:
        if v is not None and (v < 1000 or v > 9999):
            raise ValueError("Year must have four digits")
        return v


class ReferenceNumberResponse(BaseSchema):
    """Schema for an issued or previewed reference number."""

    sequence_type: str
    reference_number: str


class SequenceTagResponse(BaseSchema):
    """Schema for a resolved form sequence tag."""

    prefix: str | None
    sequence_type: str
