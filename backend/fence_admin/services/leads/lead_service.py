"""Lead management service.

Lead numbers are allocated inside the creation transaction by the
sequence allocator; they are never changed or reused afterwards.
"""

from decimal import Decimal

import structlog
from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlmodel import col, select

from fence_admin.models.base import utc_now
from fence_admin.models.enums import LeadStage, LeadType
from fence_admin.models.lead import Lead
from fence_admin.numbering import SequenceAllocator, SqlNumberStore
from fence_admin.services.leads.exceptions import LeadNotFound

logger = structlog.get_logger(__name__)


class LeadService:
    """Service for lead management operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.allocator = SequenceAllocator(SqlNumberStore(session))

    async def create_lead(
        self,
        *,
        lead_type: LeadType = LeadType.PUBLIC,
        stage: LeadStage = LeadStage.NEW,
        source: str | None = None,
        site_address: str | None = None,
        description: str | None = None,
        fence_style: str | None = None,
        fence_length: Decimal | None = None,
    ) -> Lead:
        """Create a lead with the next lead number."""
        lead: Lead | None = None
        async for attempt in self.allocator.lead_number_attempts():
            async with attempt:
                lead = Lead(
                    lead_number=attempt.value,
                    lead_type=lead_type,
                    stage=stage,
                    source=source,
                    site_address=site_address,
                    description=description,
                    fence_style=fence_style,
                    fence_length=fence_length,
                )
                self.session.add(lead)
                await self.session.flush()
        # AllocateOnConflict guarantees success or raises
        assert lead is not None

        logger.info("Created lead", lead_id=lead.id, lead_number=lead.lead_number)
        return lead

    async def list_leads(
        self,
        *,
        skip: int = 0,
        limit: int = 50,
        include_deleted: bool = False,
    ) -> tuple[list[Lead], int]:
        """List leads with pagination. Returns (leads, total_count)."""
        filters = [] if include_deleted else [col(Lead.deleted_at).is_(None)]

        leads_statement = (
            select(Lead)
            .options(selectinload(Lead.quotes))  # type: ignore[arg-type]
            .where(*filters)
            .offset(skip)
            .limit(limit)
            .order_by(col(Lead.created_at).desc())
        )
        leads_result = await self.session.execute(leads_statement)
        leads = list(leads_result.scalars().all())

        count_statement = select(func.count()).select_from(Lead).where(*filters)
        count_result = await self.session.execute(count_statement)
        total = count_result.scalar() or 0

        return leads, total

    async def get_lead(self, lead_number: str) -> Lead:
        """Get an active lead by number with its quotes loaded."""
        statement = (
            select(Lead)
            .options(selectinload(Lead.quotes), selectinload(Lead.job))  # type: ignore[arg-type]
            .where(Lead.lead_number == lead_number, col(Lead.deleted_at).is_(None))
        )
        result = await self.session.execute(statement)
        lead = result.scalars().first()
        if not lead:
            raise LeadNotFound()
        return lead

    async def update_stage(self, lead_number: str, stage: LeadStage) -> Lead:
        lead = await self.get_lead(lead_number)
        if lead.stage != stage:
            logger.info("Lead stage changed", lead_number=lead_number, old=lead.stage, new=stage)
            lead.stage = stage
            lead.updated_at = utc_now()
            await self.session.commit()
        return lead

    async def delete_lead(self, lead_number: str) -> None:
        """Soft-delete a lead. Its number stays reserved."""
        lead = await self.get_lead(lead_number)
        lead.deleted_at = utc_now()
        await self.session.commit()
        logger.info("Deleted lead", lead_id=lead.id, lead_number=lead_number)
