from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.database import get_db
from src.core.tenancy import TenantId, UserId
from src.modules.forms.schemas import (
    FormSubmissionCreate,
    FormSubmissionResponse,
    FormTemplateCreate,
    FormTemplateResponse,
    FormTemplateUpdate,
)
from src.modules.forms.service import FormService
from src.shared.schemas import SuccessResponse

router = APIRouter(prefix="/forms", tags=["Forms"])


# --- Template Endpoints ---

@router.get("", response_model=SuccessResponse[list[FormTemplateResponse]])
async def list_templates(
    tenant_id: TenantId,
    active_only: bool = Query(False),
    db: AsyncSession = Depends(get_db),
):
    """List form templates."""
    service = FormService(db)
    templates = await service.list_templates(tenant_id, active_only=active_only)
    return SuccessResponse(
        data=[FormTemplateResponse.model_validate(t) for t in templates],
        message="Forms retrieved",
    )


@router.post("", response_model=SuccessResponse[FormTemplateResponse], status_code=201)
async def create_template(
    data: FormTemplateCreate,
    tenant_id: TenantId,
    user_id: UserId,
    db: AsyncSession = Depends(get_db),
):
    """Create a form template."""
    service = FormService(db)
    template = await service.create_template(tenant_id, data, user_id=user_id)
    return SuccessResponse(
        data=FormTemplateResponse.model_validate(template),
        message="Form created",
    )


@router.get("/{form_id}", response_model=SuccessResponse[FormTemplateResponse])
async def get_template(
    form_id: int,
    tenant_id: TenantId,
    db: AsyncSession = Depends(get_db),
):
    """Get form template by ID."""
    service = FormService(db)
    template = await service.get_template(tenant_id, form_id)
    return SuccessResponse(
        data=FormTemplateResponse.model_validate(template),
        message="Form retrieved",
    )


@router.patch("/{form_id}", response_model=SuccessResponse[FormTemplateResponse])
async def update_template(
    form_id: int,
    data: FormTemplateUpdate,
    tenant_id: TenantId,
    user_id: UserId,
    db: AsyncSession = Depends(get_db),
):
    """Update a form template."""
    service = FormService(db)
    template = await service.update_template(tenant_id, form_id, data, user_id=user_id)
    return SuccessResponse(
        data=FormTemplateResponse.model_validate(template),
        message="Form updated",
    )


# --- Submission Endpoints ---

@router.get("/{form_id}/submissions", response_model=SuccessResponse[list[FormSubmissionResponse]])
async def list_submissions(
    form_id: int,
    tenant_id: TenantId,
    db: AsyncSession = Depends(get_db),
):
    """List submissions for a form."""
    service = FormService(db)
    submissions = await service.list_submissions(tenant_id, form_id)
    return SuccessResponse(
        data=[FormSubmissionResponse.model_validate(s) for s in submissions],
        message="Submissions retrieved",
    )


@router.post(
    "/{form_id}/submissions",
    response_model=SuccessResponse[FormSubmissionResponse],
    status_code=201,
)
async def submit_form(
    form_id: int,
    data: FormSubmissionCreate,
    tenant_id: TenantId,
    user_id: UserId,
    db: AsyncSession = Depends(get_db),
):
    """Submit a form response. The response carries its reference number."""
    service = FormService(db)
    submission = await service.submit(tenant_id, form_id, data, user_id=user_id)
    return SuccessResponse(
        data=FormSubmissionResponse.model_validate(submission),
        message="Form submitted",
    )
