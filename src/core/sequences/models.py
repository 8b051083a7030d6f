from sqlalchemy import Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from src.core.database.base import BaseModel


class SequenceCounter(BaseModel):
    """Last issued reference number per tenant, sequence type and year."""

    __tablename__ = "sequence_counters"

    tenant_id: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    sequence_type: Mapped[str] = mapped_column(String(100), nullable=False)
    period: Mapped[int] = mapped_column(Integer, nullable=False)
    last_number: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (
        UniqueConstraint(
            "tenant_id", "sequence_type", "period", name="uq_sequence_counter_tenant_type_period"
        ),
    )
