"""API schemas for lead, quote and job endpoints."""

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field, field_serializer

from fence_admin.models.enums import InvoiceStatus, JobStatus, LeadBoardStatus, LeadStage, LeadType, QuoteStatus
from fence_admin.models.job import Invoice, Job
from fence_admin.models.lead import Lead, Quote
from fence_admin.utils.datetime_utils import serialize_api_datetime

# =============================================================================
# Response Schemas
# =============================================================================


class QuoteResponse(BaseModel):
    """Quote response schema."""

    id: str
    quote_number: str
    sequence_in_lead: int
    status: QuoteStatus
    total_amount: Decimal | None
    created_at: datetime
    deleted: bool

    @field_serializer("created_at")
    def serialize_created_at(self, dt: datetime) -> str | None:
        """Serialize datetime to API timezone."""
        return serialize_api_datetime(dt)

    @classmethod
    def from_model(cls, quote: Quote) -> "QuoteResponse":
        """Create response from Quote model."""
        return cls(
            id=quote.id,
            quote_number=quote.quote_number,
            sequence_in_lead=quote.sequence_in_lead,
            status=quote.status,
            total_amount=quote.total_amount,
            created_at=quote.created_at,
            deleted=quote.is_deleted,
        )


def _lead_fields(lead: Lead) -> dict[str, Any]:
    return {
        "id": lead.id,
        "lead_number": lead.lead_number,
        "stage": lead.stage,
        "board_status": LeadStage(lead.stage).board_status,
        "lead_type": lead.lead_type,
        "source": lead.source,
        "site_address": lead.site_address,
        "fence_style": lead.fence_style,
        "fence_length": lead.fence_length,
        "created_at": lead.created_at,
    }


class LeadResponse(BaseModel):
    """Lead response schema for list view."""

    id: str
    lead_number: str
    stage: LeadStage
    board_status: LeadBoardStatus
    lead_type: LeadType
    source: str | None
    site_address: str | None
    fence_style: str | None
    fence_length: Decimal | None
    created_at: datetime

    @field_serializer("created_at")
    def serialize_created_at(self, dt: datetime) -> str | None:
        """Serialize datetime to API timezone."""
        return serialize_api_datetime(dt)

    @classmethod
    def from_model(cls, lead: Lead) -> "LeadResponse":
        """Create response from Lead model."""
        return cls(**_lead_fields(lead))


class LeadDetailResponse(LeadResponse):
    """Lead detail response including quotes."""

    description: str | None
    quotes: list[QuoteResponse]

    @classmethod
    def from_model(cls, lead: Lead) -> "LeadDetailResponse":
        """Create response from Lead model with active quotes loaded."""
        return cls(
            **_lead_fields(lead),
            description=lead.description,
            quotes=[
                QuoteResponse.from_model(q)
                for q in sorted(lead.quotes, key=lambda x: x.sequence_in_lead)
                if not q.is_deleted
            ],
        )


class LeadListResponse(BaseModel):
    """Lead list response schema."""

    leads: list[LeadResponse]
    total: int


class InvoiceResponse(BaseModel):
    """Invoice response schema."""

    id: str
    invoice_number: str
    amount: Decimal | None
    status: InvoiceStatus

    @classmethod
    def from_model(cls, invoice: Invoice) -> "InvoiceResponse":
        return cls(
            id=invoice.id,
            invoice_number=invoice.invoice_number,
            amount=invoice.amount,
            status=invoice.status,
        )


class JobResponse(BaseModel):
    """Job response schema with its invoice."""

    id: str
    job_number: str
    lead_number: str
    status: JobStatus
    invoice: InvoiceResponse
    created_at: datetime

    @field_serializer("created_at")
    def serialize_created_at(self, dt: datetime) -> str | None:
        """Serialize datetime to API timezone."""
        return serialize_api_datetime(dt)

    @classmethod
    def from_model(cls, job: Job, invoice: Invoice, lead_number: str) -> "JobResponse":
        """Create response from Job and Invoice models."""
        return cls(
            id=job.id,
            job_number=job.job_number,
            lead_number=lead_number,
            status=job.status,
            invoice=InvoiceResponse.from_model(invoice),
            created_at=job.created_at,
        )


# =============================================================================
# Request Schemas
# =============================================================================


class CreateLeadRequest(BaseModel):
    """Request body for lead creation. The lead number is always allocated."""

    lead_type: LeadType = LeadType.PUBLIC
    source: str | None = "website"
    site_address: str | None = None
    description: str | None = None
    fence_style: str | None = None
    fence_length: Decimal | None = Field(default=None, ge=0)


class UpdateLeadStageRequest(BaseModel):
    """Request body for moving a lead to another stage."""

    stage: LeadStage


class CreateQuoteRequest(BaseModel):
    """Request body for quote creation."""

    total_amount: Decimal | None = Field(default=None, ge=0)
    status: QuoteStatus = QuoteStatus.DRAFT


class UpdateQuoteStatusRequest(BaseModel):
    """Request body for changing a quote status."""

    status: QuoteStatus


class CreateJobRequest(BaseModel):
    """Request body for converting a lead into a job."""

    quote_number: str | None = None


# =============================================================================
# Simple Response Schemas
# =============================================================================


class StatusResponse(BaseModel):
    """Simple status response."""

    status: str
    message: str
