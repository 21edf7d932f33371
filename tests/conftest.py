"""
Test configuration and fixtures.

Every test gets its own file-backed SQLite database (aiosqlite) with the full
schema and a small set of seeded users, contractors and jetties.
"""

import os
import tempfile

os.environ["APP_ENV"] = "development"
os.environ["DB_TYPE"] = "sqlite"
os.environ["SQLITE_PATH"] = os.path.join(tempfile.gettempdir(), "coal_terminal_app.db")

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.core.db import Base, configure_sqlite_engine
from app.models.enums.coal_grade import CoalGrade
from app.models.enums.user_role import UserRole
from app.models.masters.contractor_models import Contractor
from app.models.masters.jetty_models import Jetty
from app.models.users.user_models import User
from app.schemas.stock.stock_schemas import StockBalanceSnapshot
from app.services.stock import ledger_store


@dataclass
class Seed:
    admin_id: int
    operator_id: int
    barging_operator_id: int
    auditor_id: int
    inactive_user_id: int
    contractor_id: int
    other_contractor_id: int
    inactive_contractor_id: int
    deleted_contractor_id: int
    jetty_id: int
    other_jetty_id: int
    inactive_jetty_id: int


@pytest.fixture
async def engine(tmp_path):
    eng = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'ledger_test.db'}",
        connect_args={"timeout": 30},
    )
    configure_sqlite_engine(eng)

    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield eng

    await eng.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        autoflush=False,
        expire_on_commit=False,
    )


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def seed(session_factory) -> Seed:
    async with session_factory() as session:
        admin = User(username="admin", full_name="Admin User", role=UserRole.admin)
        operator = User(username="prod_op", full_name="Production Operator", role=UserRole.operator_produksi)
        barging_operator = User(username="barge_op", full_name="Barging Operator", role=UserRole.operator_barging)
        auditor = User(username="auditor", full_name="Audit Person", role=UserRole.auditor)
        inactive_user = User(username="former", full_name="Former Operator", role=UserRole.operator_produksi, is_active=False)

        contractor = Contractor(name="Alpha Mining", code="C1", contact_person="Ana", default_grade=CoalGrade.high)
        other_contractor = Contractor(name="Borneo Coal", code="C2", contact_person="Budi", default_grade=CoalGrade.medium)
        inactive_contractor = Contractor(name="Closed Co", code="C3", contact_person="Citra", default_grade=CoalGrade.low, is_active=False)
        deleted_contractor = Contractor(
            name="Deleted Co",
            code="C4",
            contact_person="Dewi",
            default_grade=CoalGrade.low,
            deleted_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        )

        jetty = Jetty(name="North Jetty", code="J1", capacity=Decimal("50000.00"))
        other_jetty = Jetty(name="South Jetty", code="J2", capacity=Decimal("30000.00"))
        inactive_jetty = Jetty(name="Old Jetty", code="J3", capacity=Decimal("10000.00"), is_active=False)

        session.add_all([
            admin, operator, barging_operator, auditor, inactive_user,
            contractor, other_contractor, inactive_contractor, deleted_contractor,
            jetty, other_jetty, inactive_jetty,
        ])
        await session.commit()

        return Seed(
            admin_id=admin.id,
            operator_id=operator.id,
            barging_operator_id=barging_operator.id,
            auditor_id=auditor.id,
            inactive_user_id=inactive_user.id,
            contractor_id=contractor.id,
            other_contractor_id=other_contractor.id,
            inactive_contractor_id=inactive_contractor.id,
            deleted_contractor_id=deleted_contractor.id,
            jetty_id=jetty.id,
            other_jetty_id=other_jetty.id,
            inactive_jetty_id=inactive_jetty.id,
        )


@pytest.fixture
def make_stock(session_factory):
    """Create a committed stock row (version 1) for a pair."""

    async def _make(contractor_id: int, jetty_id: int, tonnage) -> StockBalanceSnapshot:
        async with session_factory() as session:
            snapshot = await ledger_store.create(
                session,
                contractor_id,
                jetty_id,
                Decimal(str(tonnage)),
                datetime.now(timezone.utc),
            )
            await session.commit()
            return snapshot

    return _make


@pytest.fixture
def read_stock(session_factory):
    """Read a pair's row through a fresh session, i.e. what is committed."""

    async def _read(contractor_id: int, jetty_id: int) -> StockBalanceSnapshot | None:
        async with session_factory() as session:
            return await ledger_store.find(session, contractor_id, jetty_id)

    return _read


@pytest.fixture
def interleave(monkeypatch):
    """
    Run ``competitor(db, snapshot)`` right after the protocol's read, before
    its conditional write, on the calls listed in ``on_calls``.

    The competitor writes through the same session, which is how another
    committed writer looks from the protocol's point of view.
    """

    def _install(competitor, on_calls=(1,)):
        real_find = ledger_store.find
        calls = {"n": 0}

        async def find(session, contractor_id, jetty_id):
            snapshot = await real_find(session, contractor_id, jetty_id)
            calls["n"] += 1
            if calls["n"] in on_calls:
                await competitor(session, snapshot)
            return snapshot

        monkeypatch.setattr(ledger_store, "find", find)
        return calls

    return _install
