from enum import StrEnum
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.audit.models import AuditLog


class AuditAction(StrEnum):
    """Standard audit actions."""

    CREATE = "CREATE"
    UPDATE = "UPDATE"

    # Domain-specific actions
    INCIDENT_CREATED = "INCIDENT_CREATED"
    FORM_SUBMITTED = "FORM_SUBMITTED"


async def create_audit_log(
    session: AsyncSession,
    tenant_id: str,
    action: str | AuditAction,
    entity_type: str,
    entity_id: int,
    user_id: str | None = None,
    entity_identifier: str | None = None,
    new_values: dict[str, Any] | None = None,
) -> AuditLog:
    """
    Create an audit log entry in the caller's transaction.

    Args:
        session: Database session
        tenant_id: Owning tenant
        action: Action performed (e.g., CREATE, INCIDENT_CREATED)
        entity_type: Type of entity (e.g., Incident, FormSubmission)
        entity_id: ID of the entity
        user_id: ID of the user who performed the action
        entity_identifier: Human-readable identifier (e.g., reference number)
        new_values: State after change

    Returns:
        Created AuditLog instance
    """
    audit_log = AuditLog(
        tenant_id=tenant_id,
        user_id=user_id,
        action=str(action),
        entity_type=entity_type,
        entity_id=entity_id,
        entity_identifier=entity_identifier,
        new_values=new_values,
    )

    session.add(audit_log)
    await session.flush()

    return audit_log


async def list_audit_entries(
    session: AsyncSession,
    tenant_id: str,
    *,
    entity_type: str | None = None,
    entity_id: int | None = None,
) -> list[AuditLog]:
    """List a tenant's audit entries, newest first."""
    q = (
        select(AuditLog)
        .where(AuditLog.tenant_id == tenant_id)
        .order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
    )
    if entity_type is not None:
        q = q.where(AuditLog.entity_type == entity_type)
    if entity_id is not None:
        q = q.where(AuditLog.entity_id == entity_id)

    result = await session.execute(q)
    return list(result.scalars().all())
