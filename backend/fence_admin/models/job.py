"""Job and Invoice database models."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import Column, DateTime, ForeignKey, UniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

from fence_admin.models.base import new_ulid, utc_now
from fence_admin.models.enums import INVOICE_STATUS_PG_ENUM, JOB_STATUS_PG_ENUM, InvoiceStatus, JobStatus
from fence_admin.models.lead import Lead
from fence_admin.models.types import ULIDType

# At most one job per lead; job numbers are derived from the lead number
JOB_LEAD_CONSTRAINT = UniqueConstraint("lead_id", name="uq_jobs_lead_id")
JOB_NUMBER_CONSTRAINT = UniqueConstraint("job_number", name="uq_jobs_job_number")


class Job(SQLModel, table=True):
    """Won work for a lead, from scheduling to installation."""

    __tablename__ = "jobs"
    __table_args__ = (JOB_LEAD_CONSTRAINT, JOB_NUMBER_CONSTRAINT)

    id: str = Field(
        default_factory=new_ulid,
        max_length=26,
        sa_column=Column(ULIDType, primary_key=True),
    )
    lead_id: str = Field(
        sa_column=Column(ULIDType, ForeignKey("leads.id"), nullable=False),
    )
    quote_id: str | None = Field(
        default=None,
        sa_column=Column(ULIDType, ForeignKey("quotes.id"), nullable=True),
    )

    job_number: str  # "PVC-007-JOB"
    status: JobStatus = Field(
        default=JobStatus.SCHEDULED,
        sa_column=Column(JOB_STATUS_PG_ENUM, nullable=False),
    )
    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime(timezone=True), nullable=False))

    # Relationships
    lead: Lead = Relationship(back_populates="job")
    invoice: "Invoice" = Relationship(  # noqa: UP037
        back_populates="job",
        sa_relationship_kwargs={"uselist": False},
    )


INVOICE_JOB_CONSTRAINT = UniqueConstraint("job_id", name="uq_invoices_job_id")
INVOICE_NUMBER_CONSTRAINT = UniqueConstraint("invoice_number", name="uq_invoices_invoice_number")


class Invoice(SQLModel, table=True):
    """Invoice created together with its job."""

    __tablename__ = "invoices"
    __table_args__ = (INVOICE_JOB_CONSTRAINT, INVOICE_NUMBER_CONSTRAINT)

    id: str = Field(
        default_factory=new_ulid,
        max_length=26,
        sa_column=Column(ULIDType, primary_key=True),
    )
    job_id: str = Field(
        sa_column=Column(ULIDType, ForeignKey("jobs.id"), nullable=False),
    )

    invoice_number: str  # "PVC-007-INV"
    amount: Decimal | None = Field(default=None, max_digits=12, decimal_places=2)
    status: InvoiceStatus = Field(
        default=InvoiceStatus.UNPAID,
        sa_column=Column(INVOICE_STATUS_PG_ENUM, nullable=False),
    )
    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime(timezone=True), nullable=False))

    # Relationships
    job: Job = Relationship(back_populates="invoice")
