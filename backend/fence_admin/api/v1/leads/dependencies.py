"""FastAPI dependencies for service injection."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from fence_admin.db import get_session
from fence_admin.services.jobs.job_service import JobService
from fence_admin.services.leads.lead_service import LeadService
from fence_admin.services.leads.quote_service import QuoteService


async def get_lead_service(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> LeadService:
    """Get a LeadService instance with the current session."""
    return LeadService(session)


async def get_quote_service(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> QuoteService:
    """Get a QuoteService instance with the current session."""
    return QuoteService(session)


async def get_job_service(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> JobService:
    """Get a JobService instance with the current session."""
    return JobService(session)


# Type aliases for cleaner endpoint signatures
LeadServiceDep = Annotated[LeadService, Depends(get_lead_service)]
QuoteServiceDep = Annotated[QuoteService, Depends(get_quote_service)]
JobServiceDep = Annotated[JobService, Depends(get_job_service)]
