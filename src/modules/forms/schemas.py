from typing import Any

from pydantic import Field, field_validator

from src.shared.schemas import BaseSchema, TimestampMixin


# --- Form Template Schemas ---

class FormTemplateCreate(BaseSchema):
    """Schema for creating a form template."""

    title: str = Field(..., min_length=1, max_length=200)
    description: str | None = None
    number_prefix: str | None = Field(None, max_length=20)
    is_active: bool = True

    @field_validator("number_prefix")
    @classmethod
    def normalize_prefix(cls, v: str | None) -> str | None:
        # Blank means "use the default sequence"
        if v is None or not v.strip():
            return None
        return v.strip()


class FormTemplateUpdate(BaseSchema):
    """Schema for updating a form template."""

    title: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = None
    number_prefix: str | None = Field(None, max_length=20)
    is_active: bool | None = None

    @field_validator("number_prefix")
    @classmethod
    def normalize_prefix(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        return v.strip()


class FormTemplateResponse(TimestampMixin):
    """Schema for form template response."""

    id: int
    title: str
    description: str | None
    number_prefix: str | None
    sequence_type: str
    is_active: bool


# --- Submission Schemas ---

class FormSubmissionCreate(BaseSchema):
    """Schema for submitting a form response."""

    data: dict[str, Any] = Field(default_factory=dict)
    submitted_by: str | None = Field(None, max_length=100)


class FormSubmissionResponse(TimestampMixin):
    """Schema for form submission response."""

    id: int
    form_id: int
    submission_number: str
    submitted_by: str
    data: dict[str, Any]
