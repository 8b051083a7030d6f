from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.database import get_db
from src.core.sequences.allocator import SequenceAllocator
from src.core.sequences.profiles import resolve_sequence_tag
from src.core.sequences.schemas import (
    AllocateNumberRequest,
    ReferenceNumberResponse,
    SequenceCounterResponse,
    SequenceTagResponse,
)
from src.core.tenancy import TenantId
from src.shared.schemas import SuccessResponse

router = APIRouter(prefix="/sequences", tags=["Sequences"])


@router.get("", response_model=SuccessResponse[list[SequenceCounterResponse]])
async def list_counters(
    tenant_id: TenantId,
    year: int | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """List reference number counters for the tenant."""
    allocator = SequenceAllocator(db)
    counters = await allocator.list_counters(tenant_id, year=year)
    return SuccessResponse(
        data=[SequenceCounterResponse.model_validate(c) for c in counters],
        message="Counters retrieved",
    )


@router.get("/preview", response_model=SuccessResponse[ReferenceNumberResponse])
async def preview_next_number(
    tenant_id: TenantId,
    sequence_type: str = Query(..., min_length=1, max_length=100),
    year: int | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """Show the number the next record would get, without issuing it."""
    allocator = SequenceAllocator(db)
    number = await allocator.peek_next_number(tenant_id, sequence_type, year)
    return SuccessResponse(
        data=ReferenceNumberResponse(sequence_type=sequence_type.strip(), reference_number=number),
        message="Next number previewed",
    )


@router.post("/allocate", response_model=SuccessResponse[ReferenceNumberResponse], status_code=201)
async def allocate_number(
    data: AllocateNumberRequest,
    tenant_id: TenantId,
    db: AsyncSession = Depends(get_db),
):
    """Issue a reference number for a record created outside this service."""
    allocator = SequenceAllocator(db)
    number = await allocator.next_number(tenant_id, data.sequence_type, data.year)
    return SuccessResponse(
        data=ReferenceNumberResponse(sequence_type=data.sequence_type, reference_number=number),
        message="Reference number issued",
    )


@router.get("/resolve-tag", response_model=SuccessResponse[SequenceTagResponse])
async def resolve_tag(
    tenant_id: TenantId,
    prefix: str | None = Query(None, max_length=100),
):
    """Resolve a form template prefix to the sequence tag it numbers under."""
    return SuccessResponse(
        data=SequenceTagResponse(prefix=prefix, sequence_type=resolve_sequence_tag(prefix)),
        message="Sequence tag resolved",
    )
