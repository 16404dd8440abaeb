"""Enum definitions for database models."""

from enum import StrEnum

from sqlalchemy.dialects.postgresql import ENUM as PgEnum


class LeadStage(StrEnum):
    """Sales stage of a lead."""

    NEW = "new"
    CONTACTED = "contacted"
    SITE_VISIT_SCHEDULED = "site_visit_scheduled"
    SITE_VISIT_COMPLETE = "site_visit_complete"
    QUOTE_SENT = "quote_sent"
    QUOTE_REVISED = "quote_revised"
    APPROVED = "approved"
    CONVERTED_TO_JOB = "converted_to_job"
    DECLINED = "declined"
    LOST = "lost"

    @property
    def board_status(self) -> "LeadBoardStatus":
        """Column the lead is shown in on the leads board."""
        return _BOARD_STATUS[self]


class LeadBoardStatus(StrEnum):
    """Coarse lead grouping used by the leads board."""

    NEW = "new"
    CONTACTED = "contacted"
    QUOTED = "quoted"
    APPROVED = "approved"
    DECLINED = "declined"


_BOARD_STATUS = {
    LeadStage.NEW: LeadBoardStatus.NEW,
    LeadStage.CONTACTED: LeadBoardStatus.CONTACTED,
    LeadStage.SITE_VISIT_SCHEDULED: LeadBoardStatus.CONTACTED,
    LeadStage.SITE_VISIT_COMPLETE: LeadBoardStatus.CONTACTED,
    LeadStage.QUOTE_SENT: LeadBoardStatus.QUOTED,
    LeadStage.QUOTE_REVISED: LeadBoardStatus.QUOTED,
    LeadStage.APPROVED: LeadBoardStatus.APPROVED,
    LeadStage.CONVERTED_TO_JOB: LeadBoardStatus.APPROVED,
    LeadStage.DECLINED: LeadBoardStatus.DECLINED,
    LeadStage.LOST: LeadBoardStatus.DECLINED,
}


class LeadType(StrEnum):
    """Customer segment of a lead."""

    PUBLIC = "public"
    TRADE = "trade"


class QuoteStatus(StrEnum):
    """Status of a quote."""

    DRAFT = "draft"
    SENT = "sent"
    APPROVED = "approved"
    REJECTED = "rejected"
    EXPIRED = "expired"


class JobStatus(StrEnum):
    """Status of a job from scheduling to completion."""

    SCHEDULED = "scheduled"
    IN_PRODUCTION = "in_production"
    READY_FOR_INSTALL = "ready_for_install"
    INSTALLED = "installed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class InvoiceStatus(StrEnum):
    """Payment status of an invoice."""

    UNPAID = "unpaid"
    PAID = "paid"
    VOID = "void"


# PostgreSQL enum types - define alongside the enums for co-location
LEAD_STAGE_PG_ENUM = PgEnum(
    LeadStage,
    name="leadstage",
    create_type=False,
    values_callable=lambda e: [member.value for member in e],
)

LEAD_TYPE_PG_ENUM = PgEnum(
    LeadType,
    name="leadtype",
    create_type=False,
    values_callable=lambda e: [member.value for member in e],
)

QUOTE_STATUS_PG_ENUM = PgEnum(
    QuoteStatus,
    name="quotestatus",
    create_type=False,
    values_callable=lambda e: [member.value for member in e],
)

JOB_STATUS_PG_ENUM = PgEnum(
    JobStatus,
    name="jobstatus",
    create_type=False,
    values_callable=lambda e: [member.value for member in e],
)

INVOICE_STATUS_PG_ENUM = PgEnum(
    InvoiceStatus,
    name="invoicestatus",
    create_type=False,
    values_callable=lambda e: [member.value for member in e],
)
