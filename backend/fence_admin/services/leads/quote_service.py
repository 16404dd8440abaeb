"""Quote management service."""

from decimal import Decimal

import structlog
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import col, select

from fence_admin.models.base import utc_now
from fence_admin.models.enums import LeadStage, QuoteStatus
from fence_admin.models.lead import Lead, Quote
from fence_admin.numbering import SequenceAllocator, SqlNumberStore
from fence_admin.services.leads.exceptions import LeadNotFound, QuoteNotFound

logger = structlog.get_logger(__name__)

# Stages a new quote may move a lead out of; later stages are left alone
_PRE_QUOTE_STAGES = frozenset(
    {
        LeadStage.NEW,
        LeadStage.CONTACTED,
        LeadStage.SITE_VISIT_SCHEDULED,
        LeadStage.SITE_VISIT_COMPLETE,
        LeadStage.QUOTE_SENT,
        LeadStage.QUOTE_REVISED,
    }
)


class QuoteService:
    """Service for quote management operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.allocator = SequenceAllocator(SqlNumberStore(session))

    async def create_quote(
        self,
        lead_number: str,
        *,
        total_amount: Decimal | None = None,
        status: QuoteStatus = QuoteStatus.DRAFT,
    ) -> Quote:
        """Create the next quote of a lead.

        Raises InvalidParentReference before touching the database when
        ``lead_number`` is malformed.
        """
        attempts = self.allocator.quote_number_attempts(lead_number)

        lead_result = await self.session.execute(
            select(Lead).where(Lead.lead_number == lead_number, col(Lead.deleted_at).is_(None))
        )
        lead = lead_result.scalars().first()
        if not lead:
            raise LeadNotFound()
        lead_id = lead.id

        quote: Quote | None = None
        async for attempt in attempts:
            async with attempt:
                sequence = self.allocator.formats.parse_quote_sequence(lead_number, attempt.value)
                assert sequence is not None
                quote = Quote(
                    lead_id=lead_id,
                    quote_number=attempt.value,
                    sequence_in_lead=sequence,
                    total_amount=total_amount,
                    status=status,
                )
                self.session.add(quote)
                await self.session.flush()
                # Read under the family lock so concurrent first quotes see each other
                stage_result = await self.session.execute(select(Lead.stage).where(col(Lead.id) == lead_id))
                new_stage = self._stage_after_quote(stage_result.scalar_one())
                if new_stage is not None:
                    # Bulk UPDATE keeps the lead instance clean across savepoint rollbacks
                    await self.session.execute(
                        update(Lead).where(col(Lead.id) == lead_id).values(stage=new_stage, updated_at=utc_now())
                    )
        assert quote is not None

        logger.info("Created quote", quote_id=quote.id, quote_number=quote.quote_number, lead_number=lead_number)
        return quote

    async def list_quotes(self, lead_number: str, *, include_deleted: bool = False) -> list[Quote]:
        """List quotes of an active lead in sequence order."""
        statement = (
            select(Quote)
            .join(Lead, col(Quote.lead_id) == col(Lead.id))
            .where(Lead.lead_number == lead_number, col(Lead.deleted_at).is_(None))
            .order_by(col(Quote.sequence_in_lead))
        )
        if not include_deleted:
            statement = statement.where(col(Quote.deleted_at).is_(None))
        result = await self.session.execute(statement)
        quotes = list(result.scalars().all())
        if not quotes:
            # Distinguish "no quotes yet" from "no such lead"
            lead_result = await self.session.execute(
                select(Lead.id).where(Lead.lead_number == lead_number, col(Lead.deleted_at).is_(None))
            )
            if lead_result.first() is None:
                raise LeadNotFound()
        return quotes

    async def get_quote(self, quote_number: str) -> Quote:
        statement = select(Quote).where(Quote.quote_number == quote_number, col(Quote.deleted_at).is_(None))
        result = await self.session.execute(statement)
        quote = result.scalars().first()
        if not quote:
            raise QuoteNotFound()
        return quote

    async def update_status(self, quote_number: str, status: QuoteStatus) -> Quote:
        quote = await self.get_quote(quote_number)
        if quote.status != status:
            logger.info("Quote status changed", quote_number=quote_number, old=quote.status, new=status)
            quote.status = status
            await self.session.commit()
        return quote

    async def delete_quote(self, quote_number: str) -> None:
        """Soft-delete a quote. Its sequence number is never reissued."""
        quote = await self.get_quote(quote_number)
        quote.deleted_at = utc_now()
        await self.session.commit()
        logger.info("Deleted quote", quote_id=quote.id, quote_number=quote_number)

    def _stage_after_quote(self, stage: LeadStage) -> LeadStage | None:
        if stage not in _PRE_QUOTE_STAGES:
            return None
        if stage in (LeadStage.QUOTE_SENT, LeadStage.QUOTE_REVISED):
            return LeadStage.QUOTE_REVISED
        return LeadStage.QUOTE_SENT
