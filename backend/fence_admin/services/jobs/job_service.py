"""Job management service.

A job and its invoice are created together in one transaction. Their
numbers are derived from the lead number, so no sequence lookup is
needed; the unique constraint on ``jobs.lead_id`` enforces one job per lead.
"""

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlmodel import col, select

from fence_admin.models.base import utc_now
from fence_admin.models.enums import LeadStage, QuoteStatus
from fence_admin.models.job import JOB_LEAD_CONSTRAINT, JOB_NUMBER_CONSTRAINT, Invoice, Job
from fence_admin.models.lead import Lead, Quote
from fence_admin.numbering import SequenceAllocator, SqlNumberStore
from fence_admin.services.jobs.exceptions import JobAlreadyExists, JobNotFound, QuoteNotInLead
from fence_admin.services.leads.exceptions import LeadNotFound

logger = structlog.get_logger(__name__)


class JobService:
    """Service for job and invoice operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.allocator = SequenceAllocator(SqlNumberStore(session))

    async def create_job(self, lead_number: str, *, quote_number: str | None = None) -> tuple[Job, Invoice]:
        """Convert a lead into a job with its invoice. Returns (job, invoice).

        The invoice amount is taken from ``quote_number`` when given, and
        that quote is marked approved.
        """
        numbers = self.allocator.derive_job_and_invoice_numbers(lead_number)

        lead_result = await self.session.execute(
            select(Lead).where(Lead.lead_number == lead_number, col(Lead.deleted_at).is_(None))
        )
        lead = lead_result.scalars().first()
        if not lead:
            raise LeadNotFound()

        existing = await self.session.execute(select(Job.id).where(Job.lead_id == lead.id))
        if existing.first() is not None:
            raise JobAlreadyExists()

        quote: Quote | None = None
        if quote_number is not None:
            quote_result = await self.session.execute(
                select(Quote).where(
                    Quote.quote_number == quote_number,
                    Quote.lead_id == lead.id,
                    col(Quote.deleted_at).is_(None),
                )
            )
            quote = quote_result.scalars().first()
            if not quote:
                raise QuoteNotInLead()

        job = Job(
            lead_id=lead.id,
            quote_id=quote.id if quote else None,
            job_number=numbers.job_number,
        )
        invoice = Invoice(
            job_id=job.id,
            invoice_number=numbers.invoice_number,
            amount=quote.total_amount if quote else None,
        )
        self.session.add(job)
        self.session.add(invoice)

        if quote is not None:
            quote.status = QuoteStatus.APPROVED
        lead.stage = LeadStage.CONVERTED_TO_JOB
        lead.updated_at = utc_now()

        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            error_str = str(e).lower()
            if any(f'"{c.name}"' in error_str for c in (JOB_LEAD_CONSTRAINT, JOB_NUMBER_CONSTRAINT)):
                # Another request converted the same lead first
                raise JobAlreadyExists() from e
            raise

        logger.info(
            "Created job",
            job_id=job.id,
            job_number=job.job_number,
            invoice_number=invoice.invoice_number,
            lead_number=lead_number,
        )
        return job, invoice

    async def get_job(self, job_number: str) -> Job:
        """Get job by number with its invoice and lead loaded."""
        statement = (
            select(Job)
            .options(selectinload(Job.invoice), selectinload(Job.lead))  # type: ignore[arg-type]
            .where(Job.job_number == job_number)
        )
        result = await self.session.execute(statement)
        job = result.scalars().first()
        if not job:
            raise JobNotFound()
        return job
