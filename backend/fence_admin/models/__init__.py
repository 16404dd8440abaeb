"""Database models."""

# ruff: noqa: I001 - Import order matters for SQLAlchemy relationship resolution
from sqlmodel import SQLModel

from fence_admin.models.enums import (
    InvoiceStatus,
    JobStatus,
    LeadBoardStatus,
    LeadStage,
    LeadType,
    QuoteStatus,
)

# lead.py must be imported first (defines Lead), then job.py (references Lead)
from fence_admin.models.lead import Lead, Quote
from fence_admin.models.job import Invoice, Job

__all__ = [
    "SQLModel",
    "Lead",
    "Quote",
    "Job",
    "Invoice",
    "LeadStage",
    "LeadBoardStatus",
    "LeadType",
    "QuoteStatus",
    "JobStatus",
    "InvoiceStatus",
]
