"""Job API endpoints."""

import structlog
from fastapi import APIRouter, HTTPException

from fence_admin.api.v1.leads.dependencies import JobServiceDep
from fence_admin.api.v1.leads.schemas import CreateJobRequest, JobResponse
from fence_admin.numbering import InvalidParentReference
from fence_admin.services.jobs.exceptions import JobAlreadyExists, JobNotFound, QuoteNotInLead
from fence_admin.services.leads.exceptions import LeadNotFound

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["jobs"])


@router.post("/leads/{lead_number}/job", response_model=JobResponse, status_code=201, operation_id="createJob")
async def create_job(
    lead_number: str,
    body: CreateJobRequest,
    service: JobServiceDep,
) -> JobResponse:
    """Convert a lead into a job. The invoice is created alongside it."""
    try:
        job, invoice = await service.create_job(lead_number, quote_number=body.quote_number)
    except InvalidParentReference:
        raise HTTPException(status_code=422, detail=f"Invalid lead number: {lead_number}")
    except LeadNotFound:
        raise HTTPException(status_code=404, detail="Lead not found")
    except QuoteNotInLead:
        raise HTTPException(status_code=404, detail="Quote not found for this lead")
    except JobAlreadyExists:
        raise HTTPException(status_code=409, detail="Lead already has a job")
    return JobResponse.from_model(job, invoice, lead_number)


@router.get("/jobs/{job_number}", response_model=JobResponse, operation_id="getJob")
async def get_job(
    job_number: str,
    service: JobServiceDep,
) -> JobResponse:
    """Get a job with its invoice."""
    try:
        job = await service.get_job(job_number)
    except JobNotFound:
        raise HTTPException(status_code=404, detail="Job not found")
    return JobResponse.from_model(job, job.invoice, job.lead.lead_number)
