from typing import Any

from sqlalchemy import BigInteger, Boolean, ForeignKey, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.core.database.base import TenantScopedModel
from src.core.sequences.profiles import resolve_sequence_tag


class FormTemplate(TenantScopedModel):
    """
    Tenant-defined form (checklist, report, inspection sheet).

    Submissions are numbered per template prefix, e.g. a template with
    number_prefix "SJA" numbers its submissions SJA-2025-001, SJA-2025-002.
    Templates without a prefix share the default SKJ sequence.
    """

    __tablename__ = "form_templates"

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    number_prefix: Mapped[str | None] = mapped_column(String(20), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Relationships
    submissions: Mapped[list["FormSubmission"]] = relationship(
        "FormSubmission", back_populates="form", cascade="all, delete-orphan"
    )

    @property
    def sequence_type(self) -> str:
        return resolve_sequence_tag(self.number_prefix)


class FormSubmission(TenantScopedModel):
    """A filled-in form with its reference number."""

    __tablename__ = "form_submissions"

    form_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("form_templates.id"), nullable=False, index=True
    )
    # Not unique: distinct prefixes may render the same display prefix
    submission_number: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    submitted_by: Mapped[str] = mapped_column(String(100), nullable=False)
    data: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    # Relationships
    form: Mapped["FormTemplate"] = relationship("FormTemplate", back_populates="submissions")
