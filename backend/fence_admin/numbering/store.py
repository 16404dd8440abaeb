"""Storage backends the sequence allocator reads existing numbers from."""

from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, AsyncSessionTransaction
from sqlmodel import col

from fence_admin.models.lead import (
    LEAD_NUMBER_CONSTRAINT,
    QUOTE_NUMBER_CONSTRAINT,
    QUOTE_SEQUENCE_CONSTRAINT,
    Lead,
    Quote,
)
from fence_admin.numbering.formats import NumberFormat, number_format, quote_prefix_for


class SequenceKind(StrEnum):
    LEAD = "lead"
    QUOTE = "quote"


@dataclass(frozen=True)
class SequenceFamily:
    """Identifiers sharing one uniqueness scope.

    All lead numbers form a single family; the quotes of each lead form
    their own family keyed by the lead number.
    """

    kind: SequenceKind
    parent: str | None = None

    @classmethod
    def leads(cls) -> "SequenceFamily":
        return cls(SequenceKind.LEAD)

    @classmethod
    def quotes_of(cls, lead_number: str) -> "SequenceFamily":
        return cls(SequenceKind.QUOTE, lead_number)

    @property
    def key(self) -> str:
        if self.parent is None:
            return self.kind.value
        return f"{self.kind.value}:{self.parent}"


class NumberStore(Protocol):
    """What the allocator needs from persistence.

    An attempt brackets one read-max-and-insert cycle. Implementations
    either serialize attempts of the same family or rely on a uniqueness
    check at insert time reported through ``is_conflict``.
    """

    async def existing_numbers(self, family: SequenceFamily) -> list[str]:
        """Every number ever issued in ``family``, including soft-deleted rows."""
        ...

    async def begin_attempt(self, family: SequenceFamily) -> None: ...

    async def commit_attempt(self) -> None: ...

    async def rollback_attempt(self) -> None: ...

    def is_conflict(self, family: SequenceFamily, exc: BaseException) -> bool:
        """Whether ``exc`` is a uniqueness violation on the family's numbers."""
        ...


_CONFLICT_CONSTRAINTS = {
    SequenceKind.LEAD: (LEAD_NUMBER_CONSTRAINT,),
    SequenceKind.QUOTE: (QUOTE_NUMBER_CONSTRAINT, QUOTE_SEQUENCE_CONSTRAINT),
}


class SqlNumberStore:
    """NumberStore over an async SQLAlchemy session.

    Each attempt runs inside a savepoint. On PostgreSQL the attempt also
    takes a transaction-scoped advisory lock keyed by the family, so
    concurrent allocations of the same family queue up instead of
    colliding. The unique constraints remain the final arbiter.
    """

    def __init__(self, session: AsyncSession, *, formats: NumberFormat = number_format):
        self.session = session
        self.formats = formats
        self._savepoint: AsyncSessionTransaction | None = None

    async def existing_numbers(self, family: SequenceFamily) -> list[str]:
        if family.kind is SequenceKind.LEAD:
            # Numbers outside the prefix can never parse, so skip loading them
            stmt = select(Lead.lead_number).where(
                col(Lead.lead_number).startswith(self.formats.prefix, autoescape=True)
            )
        else:
            assert family.parent is not None
            stmt = select(Quote.quote_number).where(
                col(Quote.quote_number).startswith(quote_prefix_for(family.parent), autoescape=True)
            )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def begin_attempt(self, family: SequenceFamily) -> None:
        self._savepoint = await self.session.begin_nested()
        if self.session.get_bind().dialect.name == "postgresql":
            await self.session.execute(select(func.pg_advisory_xact_lock(func.hashtext(family.key))))

    async def commit_attempt(self) -> None:
        # Commits the savepoint and the enclosing transaction
        await self.session.commit()
        self._savepoint = None

    async def rollback_attempt(self) -> None:
        # A failed flush leaves the savepoint deactivated; rollback() still has to close it
        if self._savepoint is not None:
            await self._savepoint.rollback()  # Rollback to savepoint
        self._savepoint = None

    def is_conflict(self, family: SequenceFamily, exc: BaseException) -> bool:
        if not isinstance(exc, IntegrityError):
            return False
        error_str = str(exc).lower()
        return any(f'"{constraint.name}"' in error_str for constraint in _CONFLICT_CONSTRAINTS[family.kind])
