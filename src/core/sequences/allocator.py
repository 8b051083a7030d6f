import asyncio
from datetime import datetime
from zoneinfo import ZoneInfo

from sqlalchemy import Insert, func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import DBAPIError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config import settings
from src.core.exceptions import InvalidArgumentError, PersistenceError
from src.core.sequences.models import SequenceCounter
from src.core.sequences.profiles import resolve_profile

MAX_IDENTIFIER_LENGTH = 100
MIN_YEAR = 1000
MAX_YEAR = 9999

# serialization_failure, deadlock_detected, lock_not_available
TRANSIENT_SQLSTATES = frozenset({"40001", "40P01", "55P03"})

_UPSERT_BUILDERS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


def current_year() -> int:
    """Calendar year in the configured timezone."""
    return datetime.now(ZoneInfo(settings.timezone)).year


def is_transient_error(exc: DBAPIError) -> bool:
    """True for lock contention and other errors worth retrying."""
    if exc.connection_invalidated:
        return False
    if isinstance(exc, OperationalError):
        return True
    orig = exc.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    return code in TRANSIENT_SQLSTATES


class SequenceAllocator:
    """
    Issues gap-free reference numbers per (tenant, sequence type, year).

    The counter row is bumped with a single upsert inside a SAVEPOINT, so the
    number belongs to the caller's transaction: it is only issued if the
    caller commits, and a failed attempt never consumes a number.
    """

    def __init__(
        self,
        session: AsyncSession,
        *,
        max_attempts: int | None = None,
        base_delay: float | None = None,
        max_delay: float | None = None,
    ):
        self.session = session
        self.max_attempts = settings.sequence_max_attempts if max_attempts is None else max_attempts
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.base_delay = settings.sequence_retry_base_delay if base_delay is None else base_delay
        self.max_delay = settings.sequence_retry_max_delay if max_delay is None else max_delay

    async def next_number(
        self, tenant_id: str, sequence_type: str, year: int | None = None
    ) -> str:
        """
        Issue the next reference number, e.g. AV-2025-003.

        Raises InvalidArgumentError for empty identifiers and PersistenceError
        when the counter cannot be updated after retries.
        """
        tenant_id, sequence_type, year = _validate(tenant_id, sequence_type, year)
        profile = resolve_profile(sequence_type)

        stmt = self._upsert_statement(tenant_id, sequence_type, year)
        number = await self._increment(stmt)
        return profile.render(year, number)

    async def peek_next_number(
        self, tenant_id: str, sequence_type: str, year: int | None = None
    ) -> str:
        """Number the next call would issue. Reserves nothing."""
        tenant_id, sequence_type, year = _validate(tenant_id, sequence_type, year)
        profile = resolve_profile(sequence_type)

        stmt = select(SequenceCounter.last_number).where(
            SequenceCounter.tenant_id == tenant_id,
            SequenceCounter.sequence_type == sequence_type,
            SequenceCounter.period == year,
        )
        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as exc:
            raise PersistenceError("Could not read sequence counter") from exc
        last_number = result.scalar_one_or_none() or 0
        return profile.render(year, last_number + 1)

    async def list_counters(self, tenant_id: str, year: int | None = None) -> list[SequenceCounter]:
        """List the tenant's counters, newest period first."""
        if not tenant_id or not tenant_id.strip():
            raise InvalidArgumentError("tenant_id is required", field="tenant_id")

        stmt = (
            select(SequenceCounter)
            .where(SequenceCounter.tenant_id == tenant_id.strip())
            .order_by(SequenceCounter.period.desc(), SequenceCounter.sequence_type)
            .execution_options(populate_existing=True)
        )
        if year is not None:
            stmt = stmt.where(SequenceCounter.period == year)
        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as exc:
            raise PersistenceError("Could not read sequence counters") from exc
        return list(result.scalars().all())

    def _upsert_statement(self, tenant_id: str, sequence_type: str, year: int) -> Insert:
        dialect = self.session.get_bind().dialect.name
        build_insert = _UPSERT_BUILDERS.get(dialect)
        if build_insert is None:
            raise PersistenceError(f"Sequence counters are not supported on {dialect}")

        stmt = build_insert(SequenceCounter).values(
            tenant_id=tenant_id,
            sequence_type=sequence_type,
            period=year,
            last_number=1,
        )
        return stmt.on_conflict_do_update(
            index_elements=[
                SequenceCounter.tenant_id,
                SequenceCounter.sequence_type,
                SequenceCounter.period,
            ],
            set_={
                "last_number": SequenceCounter.last_number + 1,
                "updated_at": func.now(),
            },
        ).returning(SequenceCounter.last_number)

    async def _increment(self, stmt: Insert) -> int:
        attempt = 1
        while True:
            try:
                return await self._upsert_once(stmt)
            except DBAPIError as exc:
                if not is_transient_error(exc) or attempt >= self.max_attempts:
                    raise PersistenceError("Could not allocate reference number, please retry") from exc
            except SQLAlchemyError as exc:
                raise PersistenceError("Could not allocate reference number, please retry") from exc

            await asyncio.sleep(self._backoff(attempt))
            attempt += 1

    async def _upsert_once(self, stmt: Insert) -> int:
        async with self.session.begin_nested():
            result = await self.session.execute(stmt)
            return result.scalar_one()

    def _backoff(self, attempt: int) -> float:
        return min(self.max_delay, self.base_delay * 2 ** (attempt - 1))


def _validate(tenant_id: str, sequence_type: str, year: int | None) -> tuple[str, str, int]:
    if not tenant_id or not tenant_id.strip():
        raise InvalidArgumentError("tenant_id is required", field="tenant_id")
    if not sequence_type or not sequence_type.strip():
        raise InvalidArgumentError("sequence_type is required", field="sequence_type")

    tenant_id = tenant_id.strip()
    sequence_type = sequence_type.strip()
    if len(tenant_id) > MAX_IDENTIFIER_LENGTH:
        raise InvalidArgumentError("tenant_id is too long", field="tenant_id")
    if len(sequence_type) > MAX_IDENTIFIER_LENGTH:
        raise InvalidArgumentError("sequence_type is too long", field="sequence_type")

    if year is None:
        year = current_year()
    elif isinstance(year, bool) or not MIN_YEAR <= year <= MAX_YEAR:
        raise InvalidArgumentError("year must have four digits", field="year")
    return tenant_id, sequence_type, year


async def get_next_number(
    session: AsyncSession, tenant_id: str, sequence_type: str, year: int | None = None
) -> str:
    """Convenience function to issue a reference number."""
    allocator = SequenceAllocator(session)
    return await allocator.next_number(tenant_id, sequence_type, year)
