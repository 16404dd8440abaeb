"""Service tests against a SQLite database: numbering, soft delete and lead conversion."""

from decimal import Decimal

import pytest
from sqlalchemy import event, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel, select

from fence_admin.models import Lead, LeadStage, Quote, QuoteStatus
from fence_admin.models.base import utc_now
from fence_admin.numbering import InvalidParentReference, SequenceAllocator, SequenceFamily, SqlNumberStore
from fence_admin.services.jobs.exceptions import JobAlreadyExists, QuoteNotInLead
from fence_admin.services.jobs.job_service import JobService
from fence_admin.services.leads.exceptions import LeadNotFound
from fence_admin.services.leads.lead_service import LeadService
from fence_admin.services.leads.quote_service import QuoteService


@pytest.fixture
async def session_maker(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'fence_admin.db'}")

    # pysqlite defers BEGIN itself, which breaks SAVEPOINT; take over transaction control
    @event.listens_for(engine.sync_engine, "connect")
    def _connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin(conn):
        conn.exec_driver_sql("BEGIN")

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


async def create_leads(session_maker, count: int, **fields) -> list[str]:
    numbers = []
    for _ in range(count):
        async with session_maker() as session:
            lead = await LeadService(session).create_lead(**fields)
            numbers.append(lead.lead_number)
    return numbers


async def create_quotes(session_maker, lead_number: str, *amounts: str) -> list[Quote]:
    quotes = []
    for amount in amounts:
        async with session_maker() as session:
            quotes.append(await QuoteService(session).create_quote(lead_number, total_amount=Decimal(amount)))
    return quotes


async def insert_rows(session_maker, *rows) -> None:
    async with session_maker() as session:
        session.add_all(rows)
        await session.commit()


class TestLeadNumbers:
    async def test_sequential_leads_are_contiguous(self, session_maker):
        assert await create_leads(session_maker, 3) == ["PVC-001", "PVC-002", "PVC-003"]

    async def test_deleted_highest_lead_keeps_its_number(self, session_maker):
        await create_leads(session_maker, 3)
        async with session_maker() as session:
            await LeadService(session).delete_lead("PVC-003")

        assert await create_leads(session_maker, 1) == ["PVC-004"]

    async def test_deleted_middle_lead_leaves_a_gap(self, session_maker):
        await create_leads(session_maker, 3)
        async with session_maker() as session:
            await LeadService(session).delete_lead("PVC-002")

        assert await create_leads(session_maker, 1) == ["PVC-004"]

    async def test_numbers_compare_numerically(self, session_maker):
        await insert_rows(
            session_maker,
            Lead(lead_number="PVC-998"),
            Lead(lead_number="PVC-999"),
            Lead(lead_number="PVC-1000"),
        )

        assert await create_leads(session_maker, 1) == ["PVC-1001"]

    async def test_foreign_numbers_are_ignored(self, session_maker):
        # LEGACY-77 is filtered out by prefix in SQL; PVC-abc is read but does not parse
        await insert_rows(session_maker, Lead(lead_number="LEGACY-77"), Lead(lead_number="PVC-abc"))

        assert await create_leads(session_maker, 1) == ["PVC-001"]

    async def test_deleted_lead_is_not_found(self, session_maker):
        await create_leads(session_maker, 1)
        async with session_maker() as session:
            await LeadService(session).delete_lead("PVC-001")

        async with session_maker() as session:
            with pytest.raises(LeadNotFound):
                await LeadService(session).get_lead("PVC-001")
            with pytest.raises(LeadNotFound):
                await QuoteService(session).create_quote("PVC-001")

    async def test_list_hides_deleted_leads(self, session_maker):
        await create_leads(session_maker, 3)
        async with session_maker() as session:
            await LeadService(session).delete_lead("PVC-002")

        async with session_maker() as session:
            service = LeadService(session)
            leads, total = await service.list_leads()
            assert total == 2
            assert sorted(lead.lead_number for lead in leads) == ["PVC-001", "PVC-003"]

            _, total_with_deleted = await service.list_leads(include_deleted=True)
            assert total_with_deleted == 3


class TestSqlNumberStore:
    async def test_existing_lead_numbers_include_deleted_rows(self, session_maker):
        await insert_rows(
            session_maker,
            Lead(lead_number="PVC-001"),
            Lead(lead_number="PVC-002", deleted_at=utc_now()),
            Lead(lead_number="LEGACY-9"),
        )

        async with session_maker() as session:
            numbers = await SqlNumberStore(session).existing_numbers(SequenceFamily.leads())

        assert sorted(numbers) == ["PVC-001", "PVC-002"]

    async def test_quote_family_is_scoped_to_its_lead(self, session_maker):
        first = Lead(lead_number="PVC-001")
        other = Lead(lead_number="PVC-010")
        await insert_rows(
            session_maker,
            first,
            other,
            Quote(lead_id=first.id, quote_number="PVC-001-Q1", sequence_in_lead=1),
            Quote(lead_id=first.id, quote_number="PVC-001-Q2", sequence_in_lead=2, deleted_at=utc_now()),
            Quote(lead_id=other.id, quote_number="PVC-010-Q1", sequence_in_lead=1),
        )

        async with session_maker() as session:
            numbers = await SqlNumberStore(session).existing_numbers(SequenceFamily.quotes_of("PVC-001"))

        assert sorted(numbers) == ["PVC-001-Q1", "PVC-001-Q2"]

    async def test_other_integrity_error_propagates_and_rolls_back(self, session_maker):
        async with session_maker() as session:
            attempts = SequenceAllocator(SqlNumberStore(session)).lead_number_attempts()

            with pytest.raises(IntegrityError):
                async for attempt in attempts:
                    async with attempt:
                        # stage is NOT NULL
                        session.add(Lead(lead_number=attempt.value, stage=None))
                        await session.flush()

            assert attempts.current_attempt == 1
            assert not attempts.succeeded

            # The savepoint is closed, so the session keeps working
            lead = await LeadService(session).create_lead()
            assert lead.lead_number == "PVC-001"

        async with session_maker() as session:
            count = (await session.execute(select(func.count()).select_from(Lead))).scalar()
        assert count == 1


class TestQuotes:
    async def test_quotes_are_numbered_per_lead(self, session_maker):
        await create_leads(session_maker, 2)

        quotes = await create_quotes(session_maker, "PVC-001", "100", "200", "300")
        other = await create_quotes(session_maker, "PVC-002", "50")

        assert [q.quote_number for q in quotes] == ["PVC-001-Q1", "PVC-001-Q2", "PVC-001-Q3"]
        assert [q.sequence_in_lead for q in quotes] == [1, 2, 3]
        assert other[0].quote_number == "PVC-002-Q1"

    @pytest.mark.parametrize("deleted", ["PVC-001-Q2", "PVC-001-Q3"])
    async def test_deleted_quote_number_is_not_reused(self, session_maker, deleted):
        await create_leads(session_maker, 1)
        await create_quotes(session_maker, "PVC-001", "100", "200", "300")
        async with session_maker() as session:
            await QuoteService(session).delete_quote(deleted)

        quote = (await create_quotes(session_maker, "PVC-001", "400"))[0]

        assert quote.quote_number == "PVC-001-Q4"
        assert quote.sequence_in_lead == 4

    async def test_quotes_move_lead_stage(self, session_maker):
        await create_leads(session_maker, 1)

        await create_quotes(session_maker, "PVC-001", "100")
        async with session_maker() as session:
            assert (await LeadService(session).get_lead("PVC-001")).stage is LeadStage.QUOTE_SENT

        await create_quotes(session_maker, "PVC-001", "120")
        async with session_maker() as session:
            assert (await LeadService(session).get_lead("PVC-001")).stage is LeadStage.QUOTE_REVISED

    async def test_stage_sees_quote_committed_by_another_session(self, session_maker):
        await create_leads(session_maker, 1)

        async with session_maker() as session:
            stale = await LeadService(session).get_lead("PVC-001")
            # End the read transaction; the loaded lead stays in the identity map
            await session.commit()

            await create_quotes(session_maker, "PVC-001", "100")
            assert stale.stage is LeadStage.NEW

            await QuoteService(session).create_quote("PVC-001", total_amount=Decimal("120"))

        async with session_maker() as session:
            assert (await LeadService(session).get_lead("PVC-001")).stage is LeadStage.QUOTE_REVISED

    async def test_quote_keeps_later_stage(self, session_maker):
        await create_leads(session_maker, 1, stage=LeadStage.APPROVED)

        await create_quotes(session_maker, "PVC-001", "100")

        async with session_maker() as session:
            assert (await LeadService(session).get_lead("PVC-001")).stage is LeadStage.APPROVED

    async def test_malformed_parent_writes_nothing(self, session_maker):
        async with session_maker() as session:
            with pytest.raises(InvalidParentReference):
                await QuoteService(session).create_quote("not-a-number")

            count = (await session.execute(select(func.count()).select_from(Quote))).scalar()
        assert count == 0


class TestJobs:
    async def test_conversion_creates_job_and_invoice(self, session_maker):
        await create_leads(session_maker, 1)
        await create_quotes(session_maker, "PVC-001", "3900.00", "4200.00")

        async with session_maker() as session:
            job, invoice = await JobService(session).create_job("PVC-001", quote_number="PVC-001-Q2")

        assert job.job_number == "PVC-001-JOB"
        assert invoice.invoice_number == "PVC-001-INV"
        assert invoice.amount == Decimal("4200.00")
        assert invoice.job_id == job.id

        async with session_maker() as session:
            lead = await LeadService(session).get_lead("PVC-001")
            quote_service = QuoteService(session)
            approved = await quote_service.get_quote("PVC-001-Q2")
            untouched = await quote_service.get_quote("PVC-001-Q1")
            stored = await JobService(session).get_job("PVC-001-JOB")

        assert lead.stage is LeadStage.CONVERTED_TO_JOB
        assert approved.status is QuoteStatus.APPROVED
        assert untouched.status is QuoteStatus.DRAFT
        assert stored.quote_id == approved.id
        assert stored.invoice.invoice_number == "PVC-001-INV"

    async def test_conversion_without_quote(self, session_maker):
        await create_leads(session_maker, 1)

        async with session_maker() as session:
            _, invoice = await JobService(session).create_job("PVC-001")

        assert invoice.amount is None

    async def test_second_conversion_conflicts(self, session_maker):
        await create_leads(session_maker, 1)
        async with session_maker() as session:
            await JobService(session).create_job("PVC-001")

        async with session_maker() as session:
            with pytest.raises(JobAlreadyExists):
                await JobService(session).create_job("PVC-001")

    async def test_quote_of_another_lead_is_rejected(self, session_maker):
        await create_leads(session_maker, 2)
        await create_quotes(session_maker, "PVC-002", "100")

        async with session_maker() as session:
            with pytest.raises(QuoteNotInLead):
                await JobService(session).create_job("PVC-001", quote_number="PVC-002-Q1")
