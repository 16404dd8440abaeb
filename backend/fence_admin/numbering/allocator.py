"""Race-safe allocation of lead and quote numbers.

Next numbers are always derived from the durable store (max parsed
suffix + 1), never from an in-process counter, so several API instances
can allocate from the same database.
"""

from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Any

import structlog

from fence_admin.config import settings
from fence_admin.numbering.exceptions import DuplicateNumberCollision, InvalidParentReference
from fence_admin.numbering.formats import JobInvoiceNumbers, NumberFormat, next_value, number_format
from fence_admin.numbering.store import NumberStore, SequenceFamily

logger = structlog.get_logger(__name__)


class AllocateOnConflict:
    """Async iterator with attempt-scoped retry on unique number conflict.

    Uses an async for loop to retry on unique constraint violations.
    Entering an attempt opens it on the store and computes a fresh value;
    the body inserts the row using ``attempt.value``.

    Usage:
        async for attempt in allocator.lead_number_attempts():
            async with attempt:
                lead = Lead(lead_number=attempt.value, ...)
                session.add(lead)
                await session.flush()
    """

    def __init__(
        self,
        store: NumberStore,
        family: SequenceFamily,
        compute: Callable[[], Awaitable[str]],
        max_retries: int,
    ):
        if max_retries < 1:
            raise ValueError("max_retries must be at least 1")
        self.store = store
        self.family = family
        self.max_retries = max_retries
        self.current_attempt = 0
        self._compute = compute
        self._value: str | None = None
        self._success = False

    async def __aiter__(self) -> AsyncIterator["AllocateOnConflict"]:
        while self.current_attempt < self.max_retries and not self._success:
            self.current_attempt += 1
            self._value = None
            yield self
        if not self._success:
            logger.error(
                "Number allocation retries exhausted",
                family=self.family.key,
                attempts=self.current_attempt,
            )
            raise DuplicateNumberCollision(self.family.key, self.current_attempt)

    @property
    def value(self) -> str:
        if self._value is None:
            raise RuntimeError("Value not yet calculated for this attempt.")
        return self._value

    @property
    def succeeded(self) -> bool:
        return self._success

    async def __aenter__(self) -> "AllocateOnConflict":
        await self.store.begin_attempt(self.family)
        try:
            self._value = await self._compute()
        except BaseException:
            await self.store.rollback_attempt()
            raise
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> bool:
        if exc_type is None:
            await self.store.commit_attempt()
            self._success = True
            return False
        if exc_val is not None and self.store.is_conflict(self.family, exc_val):
            logger.warning(
                "Number conflict, retrying",
                family=self.family.key,
                value=self._value,
                attempt=self.current_attempt,
                max_retries=self.max_retries,
            )
            await self.store.rollback_attempt()
            return True  # Suppress exception, allow retry
        await self.store.rollback_attempt()
        return False


class SequenceAllocator:
    """Allocates lead and quote numbers and derives job/invoice numbers."""

    def __init__(
        self,
        store: NumberStore,
        *,
        formats: NumberFormat = number_format,
        max_retries: int | None = None,
    ):
        self.store = store
        self.formats = formats
        self.max_retries = max_retries if max_retries is not None else settings.numbering_max_retries

    async def allocate_lead_number(self) -> str:
        """Next lead number: one above the highest suffix ever issued."""
        numbers = await self.store.existing_numbers(SequenceFamily.leads())
        value = next_value(self.formats.parse_lead_suffix(number) for number in numbers)
        return self.formats.format_lead_number(value)

    async def allocate_quote_number(self, lead_number: str) -> str:
        """Next quote number within ``lead_number``'s family."""
        self._require_valid_parent(lead_number)
        numbers = await self.store.existing_numbers(SequenceFamily.quotes_of(lead_number))
        value = next_value(self.formats.parse_quote_sequence(lead_number, number) for number in numbers)
        return self.formats.format_quote_number(lead_number, value)

    def derive_job_and_invoice_numbers(self, lead_number: str) -> JobInvoiceNumbers:
        """Job and invoice numbers for a lead. Pure, no store access."""
        self._require_valid_parent(lead_number)
        return self.formats.derive_job_and_invoice_numbers(lead_number)

    def lead_number_attempts(self) -> AllocateOnConflict:
        return AllocateOnConflict(
            store=self.store,
            family=SequenceFamily.leads(),
            compute=self.allocate_lead_number,
            max_retries=self.max_retries,
        )

    def quote_number_attempts(self, lead_number: str) -> AllocateOnConflict:
        # Validate before any attempt is opened so a bad parent never writes
        self._require_valid_parent(lead_number)
        return AllocateOnConflict(
            store=self.store,
            family=SequenceFamily.quotes_of(lead_number),
            compute=lambda: self.allocate_quote_number(lead_number),
            max_retries=self.max_retries,
        )

    def _require_valid_parent(self, lead_number: str | None) -> None:
        if not self.formats.is_valid_lead_number(lead_number):
            raise InvalidParentReference(lead_number)
