"""Lead CRUD API endpoints."""

import structlog
from fastapi import APIRouter, HTTPException

from fence_admin.api.v1.leads.dependencies import LeadServiceDep
from fence_admin.api.v1.leads.schemas import (
    CreateLeadRequest,
    LeadDetailResponse,
    LeadListResponse,
    LeadResponse,
    StatusResponse,
    UpdateLeadStageRequest,
)
from fence_admin.numbering import DuplicateNumberCollision
from fence_admin.services.leads.exceptions import LeadNotFound

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["leads"])


@router.post("/leads", response_model=LeadResponse, status_code=201, operation_id="createLead")
async def create_lead(
    body: CreateLeadRequest,
    service: LeadServiceDep,
) -> LeadResponse:
    """Create a lead. The lead number is allocated by the server."""
    try:
        lead = await service.create_lead(
            lead_type=body.lead_type,
            source=body.source,
            site_address=body.site_address,
            description=body.description,
            fence_style=body.fence_style,
            fence_length=body.fence_length,
        )
    except DuplicateNumberCollision:
        raise HTTPException(status_code=503, detail="Could not create lead, please retry")
    return LeadResponse.from_model(lead)


@router.get("/leads", response_model=LeadListResponse, operation_id="listLeads")
async def list_leads(
    service: LeadServiceDep,
    skip: int = 0,
    limit: int = 50,
    include_deleted: bool = False,
) -> LeadListResponse:
    """List leads with pagination, newest first."""
    leads, total = await service.list_leads(skip=skip, limit=limit, include_deleted=include_deleted)

    return LeadListResponse(
        leads=[LeadResponse.from_model(lead) for lead in leads],
        total=total,
    )


@router.get("/leads/{lead_number}", response_model=LeadDetailResponse, operation_id="getLead")
async def get_lead(
    lead_number: str,
    service: LeadServiceDep,
) -> LeadDetailResponse:
    """Get a single lead with its quotes."""
    try:
        lead = await service.get_lead(lead_number)
        return LeadDetailResponse.from_model(lead)
    except LeadNotFound:
        raise HTTPException(status_code=404, detail="Lead not found")


@router.patch("/leads/{lead_number}/stage", response_model=LeadResponse, operation_id="updateLeadStage")
async def update_lead_stage(
    lead_number: str,
    body: UpdateLeadStageRequest,
    service: LeadServiceDep,
) -> LeadResponse:
    """Move a lead to another stage."""
    try:
        lead = await service.update_stage(lead_number, body.stage)
        return LeadResponse.from_model(lead)
    except LeadNotFound:
        raise HTTPException(status_code=404, detail="Lead not found")


@router.delete("/leads/{lead_number}", response_model=StatusResponse, operation_id="deleteLead")
async def delete_lead(
    lead_number: str,
    service: LeadServiceDep,
) -> StatusResponse:
    """Delete a lead. Its number is never reissued."""
    try:
        await service.delete_lead(lead_number)
    except LeadNotFound:
        raise HTTPException(status_code=404, detail="Lead not found")
    return StatusResponse(status="deleted", message=f"Lead {lead_number} deleted")
