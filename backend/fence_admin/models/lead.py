"""Lead and Quote database models."""

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import Column, DateTime, ForeignKey, UniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

from fence_admin.models.base import new_ulid, utc_now
from fence_admin.models.enums import (
    LEAD_STAGE_PG_ENUM,
    LEAD_TYPE_PG_ENUM,
    QUOTE_STATUS_PG_ENUM,
    LeadStage,
    LeadType,
    QuoteStatus,
)
from fence_admin.models.types import ULIDType

if TYPE_CHECKING:
    from fence_admin.models.job import Job


# Last line of defense against two writers allocating the same number
LEAD_NUMBER_CONSTRAINT = UniqueConstraint("lead_number", name="uq_leads_lead_number")


class Lead(SQLModel, table=True):
    """Sales enquiry; root of a numbering family."""

    __tablename__ = "leads"
    __table_args__ = (LEAD_NUMBER_CONSTRAINT,)

    # ULID stored as PostgreSQL UUID
    id: str = Field(
        default_factory=new_ulid,
        max_length=26,
        sa_column=Column(ULIDType, primary_key=True),
    )

    # "PVC-001", assigned once by the sequence allocator
    lead_number: str

    stage: LeadStage = Field(
        default=LeadStage.NEW,
        sa_column=Column(LEAD_STAGE_PG_ENUM, nullable=False),
    )
    lead_type: LeadType = Field(
        default=LeadType.PUBLIC,
        sa_column=Column(LEAD_TYPE_PG_ENUM, nullable=False),
    )
    source: str | None = None  # website, phone, referral, ...
    site_address: str | None = None
    description: str | None = None
    fence_style: str | None = None
    fence_length: Decimal | None = Field(default=None, max_digits=10, decimal_places=2)  # metres

    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime(timezone=True), nullable=False))
    updated_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime(timezone=True), nullable=False))
    # Soft delete: the row keeps its number so the number is never reissued
    deleted_at: datetime | None = Field(default=None, sa_column=Column(DateTime(timezone=True), nullable=True))

    # Relationships
    quotes: list["Quote"] = Relationship(back_populates="lead")
    job: "Job" = Relationship(  # noqa: UP037
        back_populates="lead",
        sa_relationship_kwargs={"uselist": False},
    )

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None


QUOTE_NUMBER_CONSTRAINT = UniqueConstraint("quote_number", name="uq_quotes_quote_number")
QUOTE_SEQUENCE_CONSTRAINT = UniqueConstraint("lead_id", "sequence_in_lead", name="uq_quotes_lead_sequence")


class Quote(SQLModel, table=True):
    """Priced quote for a lead."""

    __tablename__ = "quotes"
    __table_args__ = (QUOTE_NUMBER_CONSTRAINT, QUOTE_SEQUENCE_CONSTRAINT)

    id: str = Field(
        default_factory=new_ulid,
        max_length=26,
        sa_column=Column(ULIDType, primary_key=True),
    )
    lead_id: str = Field(
        sa_column=Column(ULIDType, ForeignKey("leads.id"), index=True, nullable=False),
    )

    # "PVC-005-Q2", sequence_in_lead mirrors the trailing number
    quote_number: str
    sequence_in_lead: int

    status: QuoteStatus = Field(
        default=QuoteStatus.DRAFT,
        sa_column=Column(QUOTE_STATUS_PG_ENUM, nullable=False),
    )
    total_amount: Decimal | None = Field(default=None, max_digits=12, decimal_places=2)

    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime(timezone=True), nullable=False))
    deleted_at: datetime | None = Field(default=None, sa_column=Column(DateTime(timezone=True), nullable=True))

    # Relationships
    lead: Lead = Relationship(back_populates="quotes")

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None
