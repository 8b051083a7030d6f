import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.audit import AuditAction, create_audit_log
from src.core.exceptions import NotFoundError, PersistenceError
from src.core.sequences import SequenceAllocator, SequenceType
from src.modules.incidents.models import Incident, IncidentStatus
from src.modules.incidents.schemas import IncidentCreate, IncidentStatusUpdate

logger = logging.getLogger(__name__)


class IncidentService:
    """Service for incident reporting."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.allocator = SequenceAllocator(session)

    async def get_incident(self, tenant_id: str, incident_id: int) -> Incident:
        """Get incident by ID within the tenant."""
        stmt = select(Incident).where(Incident.id == incident_id, Incident.tenant_id == tenant_id)
        result = await self.session.execute(stmt)
        incident = result.scalar_one_or_none()
        if not incident:
            raise NotFoundError("Incident", incident_id)
        return incident

    async def list_incidents(
        self,
        tenant_id: str,
        type: str | None = None,
        status: str | None = None,
    ) -> list[Incident]:
        """List the tenant's incidents, most recent occurrence first."""
        stmt = (
            select(Incident)
            .where(Incident.tenant_id == tenant_id)
            .order_by(Incident.occurred_at.desc(), Incident.id.desc())
        )
        if type:
            stmt = stmt.where(Incident.type == type)
        if status:
            stmt = stmt.where(Incident.status == status)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def create_incident(
        self, tenant_id: str, data: IncidentCreate, user_id: str | None = None
    ) -> Incident:
        """
        Register a new incident.

        The reference number, the incident row and the audit entry are written
        in the caller's transaction and commit or roll back together.
        """
        try:
            reference_number = await self.allocator.next_number(tenant_id, SequenceType.INCIDENT)
        except PersistenceError:
            logger.warning("Could not allocate incident number for tenant %s", tenant_id)
            raise

        incident = Incident(
            tenant_id=tenant_id,
            reference_number=reference_number,
            type=data.type.value,
            status=IncidentStatus.OPEN.value,
            title=data.title,
            description=data.description,
            severity=data.severity,
            occurred_at=data.occurred_at,
            reported_by=data.reported_by,
            location=data.location,
            witness_name=data.witness_name,
            immediate_action=data.immediate_action,
        )
        self.session.add(incident)
        await self.session.flush()
        await self.session.refresh(incident)

        await create_audit_log(
            session=self.session,
            tenant_id=tenant_id,
            action=AuditAction.INCIDENT_CREATED,
            entity_type="Incident",
            entity_id=incident.id,
            user_id=user_id,
            entity_identifier=reference_number,
            new_values={
                "title": incident.title,
                "type": incident.type,
                "severity": incident.severity,
            },
        )

        logger.info("Incident %s registered for tenant %s", reference_number, tenant_id)
        return incident

    async def update_status(
        self,
        tenant_id: str,
        incident_id: int,
        data: IncidentStatusUpdate,
        user_id: str | None = None,
    ) -> Incident:
        """Change the incident's status. The reference number never changes."""
        incident = await self.get_incident(tenant_id, incident_id)
        previous_status = incident.status

        incident.status = data.status.value
        await self.session.flush()
        await self.session.refresh(incident)

        await create_audit_log(
            session=self.session,
            tenant_id=tenant_id,
            action=AuditAction.UPDATE,
            entity_type="Incident",
            entity_id=incident.id,
            user_id=user_id,
            entity_identifier=incident.reference_number,
            new_values={"status": incident.status, "previous_status": previous_status},
        )

        logger.info(
            "Incident %s moved from %s to %s", incident.reference_number, previous_status, incident.status
        )
        return incident
