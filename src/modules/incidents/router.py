from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.database import get_db
from src.core.tenancy import TenantId, UserId
from src.modules.incidents.models import IncidentStatus, IncidentType
from src.modules.incidents.schemas import IncidentCreate, IncidentResponse, IncidentStatusUpdate
from src.modules.incidents.service import IncidentService
from src.shared.schemas import SuccessResponse

router = APIRouter(prefix="/incidents", tags=["Incidents"])


@router.get("", response_model=SuccessResponse[list[IncidentResponse]])
async def list_incidents(
    tenant_id: TenantId,
    type: IncidentType | None = Query(None),
    status: IncidentStatus | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """List incidents for the tenant."""
    service = IncidentService(db)
    incidents = await service.list_incidents(
        tenant_id,
        type=type.value if type else None,
        status=status.value if status else None,
    )
    return SuccessResponse(
        data=[IncidentResponse.model_validate(i) for i in incidents],
        message="Incidents retrieved",
    )


@router.post("", response_model=SuccessResponse[IncidentResponse], status_code=201)
async def create_incident(
    data: IncidentCreate,
    tenant_id: TenantId,
    user_id: UserId,
    db: AsyncSession = Depends(get_db),
):
    """Report a new incident. The response carries its reference number."""
    service = IncidentService(db)
    incident = await service.create_incident(tenant_id, data, user_id=user_id)
    return SuccessResponse(
        data=IncidentResponse.model_validate(incident),
        message="Incident registered",
    )


@router.get("/{incident_id}", response_model=SuccessResponse[IncidentResponse])
async def get_incident(
    incident_id: int,
    tenant_id: TenantId,
    db: AsyncSession = Depends(get_db),
):
    """Get incident by ID."""
    service = IncidentService(db)
    incident = await service.get_incident(tenant_id, incident_id)
    return SuccessResponse(
        data=IncidentResponse.model_validate(incident),
        message="Incident retrieved",
    )


@router.patch("/{incident_id}/status", response_model=SuccessResponse[IncidentResponse])
async def update_incident_status(
    incident_id: int,
    data: IncidentStatusUpdate,
    tenant_id: TenantId,
    user_id: UserId,
    db: AsyncSession = Depends(get_db),
):
    """Change incident status."""
    service = IncidentService(db)
    incident = await service.update_status(tenant_id, incident_id, data, user_id=user_id)
    return SuccessResponse(
        data=IncidentResponse.model_validate(incident),
        message="Incident status updated",
    )
