"""Create leads, quotes, jobs and invoices.

Revision ID: 001
Revises:
Create Date: 2026-10-16

"""

from collections.abc import Sequence

import sqlalchemy as sa
import sqlmodel
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # Create enums first
    op.execute(
        """
        CREATE TYPE leadstage AS ENUM (
            'new', 'contacted', 'site_visit_scheduled', 'site_visit_complete',
            'quote_sent', 'quote_revised', 'approved', 'converted_to_job',
            'declined', 'lost'
        )
        """
    )
    op.execute("CREATE TYPE leadtype AS ENUM ('public', 'trade')")
    op.execute("CREATE TYPE quotestatus AS ENUM ('draft', 'sent', 'approved', 'rejected', 'expired')")
    op.execute(
        """
        CREATE TYPE jobstatus AS ENUM (
            'scheduled', 'in_production', 'ready_for_install', 'installed',
            'completed', 'cancelled'
        )
        """
    )
    op.execute("CREATE TYPE invoicestatus AS ENUM ('unpaid', 'paid', 'void')")

    # Create leads table (ULID as UUID)
    op.create_table(
        "leads",
        sa.Column("id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("lead_number", sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column(
            "stage",
            postgresql.ENUM(
                "new",
                "contacted",
                "site_visit_scheduled",
                "site_visit_complete",
                "quote_sent",
                "quote_revised",
                "approved",
                "converted_to_job",
                "declined",
                "lost",
                name="leadstage",
                create_type=False,
            ),
            nullable=False,
        ),
        sa.Column("lead_type", postgresql.ENUM("public", "trade", name="leadtype", create_type=False), nullable=False),
        sa.Column("source", sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column("site_address", sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column("description", sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column("fence_style", sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column("fence_length", sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("lead_number", name="uq_leads_lead_number"),
    )

    # Create quotes table
    op.create_table(
        "quotes",
        sa.Column("id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("lead_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("quote_number", sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column("sequence_in_lead", sa.Integer(), nullable=False),
        sa.Column(
            "status",
            postgresql.ENUM(
                "draft", "sent", "approved", "rejected", "expired", name="quotestatus", create_type=False
            ),
            nullable=False,
        ),
        sa.Column("total_amount", sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["lead_id"], ["leads.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("quote_number", name="uq_quotes_quote_number"),
        sa.UniqueConstraint("lead_id", "sequence_in_lead", name="uq_quotes_lead_sequence"),
    )
    op.create_index(op.f("ix_quotes_lead_id"), "quotes", ["lead_id"], unique=False)

    # Create jobs table
    op.create_table(
        "jobs",
        sa.Column("id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("lead_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("quote_id", postgresql.UUID(as_uuid=False), nullable=True),
        sa.Column("job_number", sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column(
            "status",
            postgresql.ENUM(
                "scheduled",
                "in_production",
                "ready_for_install",
                "installed",
                "completed",
                "cancelled",
                name="jobstatus",
                create_type=False,
            ),
            nullable=False,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["lead_id"], ["leads.id"]),
        sa.ForeignKeyConstraint(["quote_id"], ["quotes.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("lead_id", name="uq_jobs_lead_id"),
        sa.UniqueConstraint("job_number", name="uq_jobs_job_number"),
    )

    # Create invoices table
    op.create_table(
        "invoices",
        sa.Column("id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("job_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("invoice_number", sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column("amount", sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column(
            "status",
            postgresql.ENUM("unpaid", "paid", "void", name="invoicestatus", create_type=False),
            nullable=False,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["job_id"], ["jobs.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("job_id", name="uq_invoices_job_id"),
        sa.UniqueConstraint("invoice_number", name="uq_invoices_invoice_number"),
    )


def downgrade() -> None:
    op.drop_table("invoices")
    op.drop_table("jobs")
    op.drop_index(op.f("ix_quotes_lead_id"), table_name="quotes")
    op.drop_table("quotes")
    op.drop_table("leads")

    op.execute("DROP TYPE IF EXISTS invoicestatus")
    op.execute("DROP TYPE IF EXISTS jobstatus")
    op.execute("DROP TYPE IF EXISTS quotestatus")
    op.execute("DROP TYPE IF EXISTS leadtype")
    op.execute("DROP TYPE IF EXISTS leadstage")
