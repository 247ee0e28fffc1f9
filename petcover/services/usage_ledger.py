"""
Usage Ledger.

Per-(pet, procedure, plan, calendar year) counters of committed claims.
This is the engine's only mutable state.

Counters:
- start at zero (a missing record reads as 0)
- are created lazily by the first increment of a key
- only ever grow; there is no reset

``increment`` is atomic per key. The in-memory ledger holds one lock per
key for the read-add-write; the database ledger issues a single
INSERT ... ON CONFLICT DO UPDATE ... RETURNING statement so the storage
engine serialises concurrent increments of the same row.

Source: https://docs.sqlalchemy.org/en/20/dialects/postgresql.html#insert-on-conflict-upsert
"""

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from petcover.models.base import new_id
from petcover.models.usage import ProcedureUsageRecord
from petcover.schemas.usage import UsageRecord
from petcover.utils.errors import LedgerUnavailableError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UsageKey:
    """Identity of one yearly counter."""

    pet_id: str
    procedure_id: str
    plan_id: str
    year: int


class UsageLedger(ABC):
    """Yearly procedure usage counters."""

    @abstractmethod
    async def current_count(self, pet_id: str, procedure_id: str, plan_id: str, year: int) -> int:
        """Uses committed so far for the key; 0 if none."""
        pass

    @abstractmethod
    async def increment(self, pet_id: str, procedure_id: str, plan_id: str, year: int) -> int:
        """
        Atomically add one use to the key, creating the counter if needed.

        Returns:
            The new count
        """
        pass

    @abstractmethod
    async def records_for_pet(self, pet_id: str, year: int) -> list[UsageRecord]:
        """Every counter of a pet for one year."""
        pass

    async def counts_for_pet(self, pet_id: str, year: int) -> dict[tuple[str, str], int]:
        """Counts of a pet for one year keyed by (procedure_id, plan_id)."""
        return {
            (record.procedure_id, record.plan_id): record.count
            for record in await self.records_for_pet(pet_id, year)
        }


# =============================================================================
# In-Memory Implementation
# =============================================================================


class InMemoryUsageLedger(UsageLedger):
    """
    Keyed-map ledger with one lock per key.

    Locks are ``threading.Lock`` so increments stay atomic whether callers are
    threads or asyncio tasks; the critical section never awaits.
    """

    def __init__(self) -> None:
        self._counts: dict[UsageKey, int] = {}
        self._key_locks: dict[UsageKey, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    def _lock_for(self, key: UsageKey) -> threading.Lock:
        with self._registry_lock:
            lock = self._key_locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._key_locks[key] = lock
            return lock

    async def current_count(self, pet_id: str, procedure_id: str, plan_id: str, year: int) -> int:
        return self._counts.get(UsageKey(pet_id, procedure_id, plan_id, year), 0)

    async def increment(self, pet_id: str, procedure_id: str, plan_id: str, year: int) -> int:
        key = UsageKey(pet_id, procedure_id, plan_id, year)
        with self._lock_for(key):
            new_count = self._counts.get(key, 0) + 1
            self._counts[key] = new_count
        logger.debug(f"Usage incremented: {key} -> {new_count}")
        return new_count

    async def records_for_pet(self, pet_id: str, year: int) -> list[UsageRecord]:
        return [
            UsageRecord(
                pet_id=key.pet_id,
                procedure_id=key.procedure_id,
                plan_id=key.plan_id,
                year=key.year,
                count=count,
            )
            for key, count in list(self._counts.items())
            if key.pet_id == pet_id and key.year == year
        ]


# =============================================================================
# Database Implementation
# =============================================================================


def _upsert_increment(dialect_name: str, key: UsageKey) -> Any:
    """Build the single-statement increment for the given SQL dialect."""
    if dialect_name == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
    elif dialect_name == "sqlite":
        from sqlalchemy.dialects.sqlite import insert
    else:
        raise LedgerUnavailableError(f"Atomic increment not supported on dialect {dialect_name!r}")

    table = ProcedureUsageRecord.__table__
    stmt = insert(table).values(
        id=new_id(),
        pet_id=key.pet_id,
        procedure_id=key.procedure_id,
        plan_id=key.plan_id,
        year=key.year,
        usage_count=1,
    )
    return stmt.on_conflict_do_update(
        index_elements=[table.c.pet_id, table.c.procedure_id, table.c.plan_id, table.c.year],
        set_={
            "usage_count": table.c.usage_count + 1,
            "updated_at": func.now(),
        },
    ).returning(table.c.usage_count)


class DatabaseUsageLedger(UsageLedger):
    """
    Ledger backed by the procedure_usage table.

    One round trip per operation. Failures are logged and re-raised as
    LedgerUnavailableError (retryable); nothing is defaulted.
    """

    def __init__(self, session_maker: Optional[async_sessionmaker[AsyncSession]] = None):
        if session_maker is None:
            from petcover.db.connection import get_session_maker

            session_maker = get_session_maker()
        self._session_maker = session_maker

    async def current_count(self, pet_id: str, procedure_id: str, plan_id: str, year: int) -> int:
        stmt = select(ProcedureUsageRecord.usage_count).where(
            ProcedureUsageRecord.pet_id == pet_id,
            ProcedureUsageRecord.procedure_id == procedure_id,
            ProcedureUsageRecord.plan_id == plan_id,
            ProcedureUsageRecord.year == year,
        )
        try:
            async with self._session_maker() as session:
                count = (await session.execute(stmt)).scalar_one_or_none()
        except SQLAlchemyError as exc:
            logger.error(f"Usage read failed: pet={pet_id}, procedure={procedure_id}, year={year}: {exc}")
            raise LedgerUnavailableError("Usage ledger read failed") from exc
        return count or 0

    async def increment(self, pet_id: str, procedure_id: str, plan_id: str, year: int) -> int:
        key = UsageKey(pet_id, procedure_id, plan_id, year)
        try:
            async with self._session_maker() as session:
                async with session.begin():
                    stmt = _upsert_increment(session.get_bind().dialect.name, key)
                    new_count = (await session.execute(stmt)).scalar_one()
        except SQLAlchemyError as exc:
            logger.error(f"Usage increment failed: {key}: {exc}")
            raise LedgerUnavailableError("Usage ledger write failed") from exc
        logger.debug(f"Usage incremented: {key} -> {new_count}")
        return new_count

    async def records_for_pet(self, pet_id: str, year: int) -> list[UsageRecord]:
        stmt = select(ProcedureUsageRecord).where(
            ProcedureUsageRecord.pet_id == pet_id,
            ProcedureUsageRecord.year == year,
        )
        try:
            async with self._session_maker() as session:
                records = (await session.execute(stmt)).scalars().all()
        except SQLAlchemyError as exc:
            logger.error(f"Usage listing failed: pet={pet_id}, year={year}: {exc}")
            raise LedgerUnavailableError("Usage ledger read failed") from exc
        return [
            UsageRecord(
                pet_id=r.pet_id,
                procedure_id=r.procedure_id,
                plan_id=r.plan_id,
                year=r.year,
                count=r.usage_count,
                updated_at=r.updated_at,
            )
            for r in records
        ]
