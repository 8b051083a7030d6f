import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.audit import AuditAction, create_audit_log
from src.core.exceptions import NotFoundError, PersistenceError, ValidationError
from src.core.sequences import SequenceAllocator
from src.modules.forms.models import FormSubmission, FormTemplate
from src.modules.forms.schemas import FormSubmissionCreate, FormTemplateCreate, FormTemplateUpdate

logger = logging.getLogger(__name__)


class FormService:
    """Service for form templates and numbered submissions."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.allocator = SequenceAllocator(session)

    # --- Template Methods ---

    async def get_template(self, tenant_id: str, form_id: int) -> FormTemplate:
        """Get form template by ID within the tenant."""
        stmt = select(FormTemplate).where(
            FormTemplate.id == form_id, FormTemplate.tenant_id == tenant_id
        )
        result = await self.session.execute(stmt)
        template = result.scalar_one_or_none()
        if not template:
            raise NotFoundError("Form", form_id)
        return template

    async def list_templates(self, tenant_id: str, active_only: bool = False) -> list[FormTemplate]:
        """List the tenant's form templates by title."""
        stmt = (
            select(FormTemplate)
            .where(FormTemplate.tenant_id == tenant_id)
            .order_by(FormTemplate.title, FormTemplate.id)
        )
        if active_only:
            stmt = stmt.where(FormTemplate.is_active.is_(True))
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def create_template(
        self, tenant_id: str, data: FormTemplateCreate, user_id: str | None = None
    ) -> FormTemplate:
        """Create a form template."""
        template = FormTemplate(
            tenant_id=tenant_id,
            title=data.title,
            description=data.description,
            number_prefix=data.number_prefix,
            is_active=data.is_active,
        )
        self.session.add(template)
        await self.session.flush()
        await self.session.refresh(template)

        await create_audit_log(
            session=self.session,
            tenant_id=tenant_id,
            action=AuditAction.CREATE,
            entity_type="FormTemplate",
            entity_id=template.id,
            user_id=user_id,
            entity_identifier=template.title,
            new_values={"number_prefix": template.number_prefix, "is_active": template.is_active},
        )

        return template

    async def update_template(
        self,
        tenant_id: str,
        form_id: int,
        data: FormTemplateUpdate,
        user_id: str | None = None,
    ) -> FormTemplate:
        """Update a form template. A new prefix only affects future submissions."""
        template = await self.get_template(tenant_id, form_id)

        changes = data.model_dump(exclude_unset=True)
        for field in ("title", "is_active"):
            if field in changes and changes[field] is None:
                raise ValidationError(f"{field} cannot be cleared", field=field)
        for field, value in changes.items():
            setattr(template, field, value)

        await self.session.flush()
        await self.session.refresh(template)

        await create_audit_log(
            session=self.session,
            tenant_id=tenant_id,
            action=AuditAction.UPDATE,
            entity_type="FormTemplate",
            entity_id=template.id,
            user_id=user_id,
            entity_identifier=template.title,
            new_values=changes,
        )

        return template

    # --- Submission Methods ---

    async def list_submissions(self, tenant_id: str, form_id: int) -> list[FormSubmission]:
        """List submissions for a form, newest first."""
        await self.get_template(tenant_id, form_id)
        stmt = (
            select(FormSubmission)
            .where(FormSubmission.tenant_id == tenant_id, FormSubmission.form_id == form_id)
            .order_by(FormSubmission.id.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def submit(
        self,
        tenant_id: str,
        form_id: int,
        data: FormSubmissionCreate,
        user_id: str | None = None,
    ) -> FormSubmission:
        """
        Store a form response with the next number for the template's prefix.

        The number, submission and audit entry share the caller's transaction.
        """
        template = await self.get_template(tenant_id, form_id)
        if not template.is_active:
            raise ValidationError("Form is not active", field="form_id")

        submitted_by = data.submitted_by or user_id
        if not submitted_by:
            raise ValidationError("submitted_by is required", field="submitted_by")

        sequence_type = template.sequence_type
        try:
            submission_number = await self.allocator.next_number(tenant_id, sequence_type)
        except PersistenceError:
            logger.warning(
                "Could not allocate %s number for tenant %s", sequence_type, tenant_id
            )
            raise

        submission = FormSubmission(
            tenant_id=tenant_id,
            form_id=template.id,
            submission_number=submission_number,
            submitted_by=submitted_by,
            data=data.data,
        )
        self.session.add(submission)
        await self.session.flush()
        await self.session.refresh(submission)

        await create_audit_log(
            session=self.session,
            tenant_id=tenant_id,
            action=AuditAction.FORM_SUBMITTED,
            entity_type="FormSubmission",
            entity_id=submission.id,
            user_id=user_id,
            entity_identifier=submission_number,
            new_values={"form_id": template.id, "sequence_type": sequence_type},
        )

        logger.info("Form submission %s stored for tenant %s", submission_number, tenant_id)
        return submission
