"""Quote API endpoints."""

import structlog
from fastapi import APIRouter, HTTPException

from fence_admin.api.v1.leads.dependencies import QuoteServiceDep
from fence_admin.api.v1.leads.schemas import (
    CreateQuoteRequest,
    QuoteResponse,
    StatusResponse,
    UpdateQuoteStatusRequest,
)
from fence_admin.numbering import DuplicateNumberCollision, InvalidParentReference
from fence_admin.services.leads.exceptions import LeadNotFound, QuoteNotFound

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["quotes"])


@router.post(
    "/leads/{lead_number}/quotes",
    response_model=QuoteResponse,
    status_code=201,
    operation_id="createQuote",
)
async def create_quote(
    lead_number: str,
    body: CreateQuoteRequest,
    service: QuoteServiceDep,
) -> QuoteResponse:
    """Create the next quote for a lead."""
    try:
        quote = await service.create_quote(lead_number, total_amount=body.total_amount, status=body.status)
    except InvalidParentReference:
        raise HTTPException(status_code=422, detail=f"Invalid lead number: {lead_number}")
    except LeadNotFound:
        raise HTTPException(status_code=404, detail="Lead not found")
    except DuplicateNumberCollision:
        raise HTTPException(status_code=503, detail="Could not create quote, please retry")
    return QuoteResponse.from_model(quote)


@router.get("/leads/{lead_number}/quotes", response_model=list[QuoteResponse], operation_id="listQuotes")
async def list_quotes(
    lead_number: str,
    service: QuoteServiceDep,
    include_deleted: bool = False,
) -> list[QuoteResponse]:
    """List quotes of a lead in sequence order."""
    try:
        quotes = await service.list_quotes(lead_number, include_deleted=include_deleted)
    except LeadNotFound:
        raise HTTPException(status_code=404, detail="Lead not found")
    return [QuoteResponse.from_model(quote) for quote in quotes]


@router.patch("/quotes/{quote_number}/status", response_model=QuoteResponse, operation_id="updateQuoteStatus")
async def update_quote_status(
    quote_number: str,
    body: UpdateQuoteStatusRequest,
    service: QuoteServiceDep,
) -> QuoteResponse:
    """Change the status of a quote."""
    try:
        quote = await service.update_status(quote_number, body.status)
        return QuoteResponse.from_model(quote)
    except QuoteNotFound:
        raise HTTPException(status_code=404, detail="Quote not found")


@router.delete("/quotes/{quote_number}", response_model=StatusResponse, operation_id="deleteQuote")
async def delete_quote(
    quote_number: str,
    service: QuoteServiceDep,
) -> StatusResponse:
    """Delete a quote. Its sequence number is never reissued."""
    try:
        await service.delete_quote(quote_number)
    except QuoteNotFound:
        raise HTTPException(status_code=404, detail="Quote not found")
    return StatusResponse(status="deleted", message=f"Quote {quote_number} deleted")
