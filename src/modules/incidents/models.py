from datetime import datetime
from enum import StrEnum

from sqlalchemy import CheckConstraint, DateTime, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from src.core.database.base import TenantScopedModel


class IncidentType(StrEnum):
    """Incident type enum."""

    AVVIK = "AVVIK"  # Non-conformance
    NESTEN = "NESTEN"  # Near miss
    SKADE = "SKADE"  # Injury
    MILJO = "MILJO"  # Environmental
    KVALITET = "KVALITET"  # Quality
    CUSTOMER = "CUSTOMER"  # Customer complaint


class IncidentStatus(StrEnum):
    """Incident status enum."""

    OPEN = "OPEN"
    INVESTIGATING = "INVESTIGATING"
    ACTION_TAKEN = "ACTION_TAKEN"
    CLOSED = "CLOSED"


class Incident(TenantScopedModel):
    """
    Reported incident (avvik).

    Every incident gets a reference number like AV-2025-003 when it is
    registered. The number is issued in the same transaction as the insert.
    """

    __tablename__ = "incidents"

    reference_number: Mapped[str] = mapped_column(String(50), nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=IncidentStatus.OPEN.value, index=True
    )

    title: Mapped[str] = mapped_column(String(300), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    severity: Mapped[int] = mapped_column(Integer, nullable=False)  # 1-5

    occurred_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    reported_by: Mapped[str] = mapped_column(String(100), nullable=False)
    location: Mapped[str | None] = mapped_column(String(300), nullable=True)
    witness_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    immediate_action: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        UniqueConstraint("tenant_id", "reference_number", name="uq_incident_tenant_reference"),
        CheckConstraint("severity BETWEEN 1 AND 5", name="ck_incidents_severity"),
    )
