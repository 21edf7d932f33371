import asyncio
from datetime import datetime
from decimal import Decimal

import pytest
from sqlalchemy import select, func

from app.core.exceptions import (
    InactiveEntityError,
    InsufficientStockError,
    InvalidTonnageError,
    NoStockFoundError,
    NotFoundError,
)
from app.models.enums.coal_grade import CoalGrade
from app.models.operations.barging_models import BargingRecord
from app.schemas.operations.barging_schemas import BargingCreateSchema
from app.schemas.operations.production_schemas import ProductionCreateSchema
from app.services.operations.barging_service import (
    create_barging_record,
    get_barging_record,
    list_barging_records,
    validate_stock_for_barging,
)
from app.services.operations.production_service import create_production_record


def _barging(seed, tonnage, **overrides) -> BargingCreateSchema:
    data = {
        "date_time": datetime(2024, 5, 2, 14, 0),
        "contractor_id": seed.contractor_id,
        "ship_batch_number": "MV-0042",
        "tonnage": Decimal(tonnage),
        "jetty_id": seed.jetty_id,
        "buyer": "PT Energi",
        "operator_id": seed.barging_operator_id,
    }
    data.update(overrides)
    return BargingCreateSchema(**data)


async def _produce(db, seed, tonnage):
    return await create_production_record(
        db,
        ProductionCreateSchema(
            date_time=datetime(2024, 5, 1, 8, 0),
            contractor_id=seed.contractor_id,
            truck_number="KT 1",
            tonnage=Decimal(tonnage),
            coal_grade=CoalGrade.medium,
            jetty_id=seed.jetty_id,
            operator_id=seed.operator_id,
        ),
    )


async def _barging_count(session_factory) -> int:
    async with session_factory() as session:
        return await session.scalar(select(func.count()).select_from(BargingRecord))


async def test_intake_then_outflow_sequence(db, seed, read_stock, session_factory):
    await _produce(db, seed, "25.5")
    await _produce(db, seed, "30.5")

    result = await create_barging_record(db, _barging(seed, "56.0"))
    assert result.stock_tonnage == Decimal("0.00")
    assert result.stock_version == 3

    with pytest.raises(InsufficientStockError) as exc:
        await create_barging_record(db, _barging(seed, "0.01"))
    assert "insufficient stock" in str(exc.value).lower()

    stock = await read_stock(seed.contractor_id, seed.jetty_id)
    assert stock.tonnage == Decimal("0.00")
    assert stock.version == 3
    assert await _barging_count(session_factory) == 1


async def test_barging_without_stock_row(db, seed, read_stock, session_factory):
    with pytest.raises(NoStockFoundError) as exc:
        await create_barging_record(db, _barging(seed, "10"))

    assert "no stock found" in str(exc.value).lower()
    assert await read_stock(seed.contractor_id, seed.jetty_id) is None
    assert await _barging_count(session_factory) == 0


async def test_insufficient_stock_reports_available_and_requested(db, seed, make_stock):
    await make_stock(seed.contractor_id, seed.jetty_id, "100")

    with pytest.raises(InsufficientStockError) as exc:
        await create_barging_record(db, _barging(seed, "150"))

    assert exc.value.available == Decimal("100.00")
    assert exc.value.requested == Decimal("150.00")
    assert str(exc.value) == "Insufficient stock. Available: 100.00 tons, Requested: 150.00 tons"


@pytest.mark.parametrize("tonnage", ["0", "-1"])
async def test_non_positive_barging_tonnage(db, seed, make_stock, tonnage):
    await make_stock(seed.contractor_id, seed.jetty_id, "100")

    with pytest.raises(InvalidTonnageError) as exc:
        await create_barging_record(db, _barging(seed, tonnage))

    assert str(exc.value) == "Barging tonnage must be positive"


async def test_barging_checks_entities_before_stock(db, seed):
    with pytest.raises(InactiveEntityError):
        await create_barging_record(db, _barging(seed, "1", jetty_id=seed.inactive_jetty_id))

    with pytest.raises(NotFoundError):
        await create_barging_record(db, _barging(seed, "1", operator_id=9999))


async def test_failing_audit_rolls_back_debit(db, seed, make_stock, read_stock, session_factory):
    await make_stock(seed.contractor_id, seed.jetty_id, "100")

    async def broken_audit(*args, **kwargs):
        raise RuntimeError("audit store unavailable")

    with pytest.raises(RuntimeError):
        await create_barging_record(db, _barging(seed, "40"), audit=broken_audit)

    stock = await read_stock(seed.contractor_id, seed.jetty_id)
    assert stock.tonnage == Decimal("100.00")
    assert stock.version == 1
    assert await _barging_count(session_factory) == 0


async def test_get_and_list_barging_records(db, seed, make_stock):
    await make_stock(seed.contractor_id, seed.jetty_id, "100")
    created = await create_barging_record(db, _barging(seed, "40"))

    assert await get_barging_record(db, created.record.id) == created.record

    with pytest.raises(NotFoundError):
        await get_barging_record(db, created.record.id + 1)

    listed = await list_barging_records(db, contractor_id=seed.contractor_id)
    assert listed["total"] == 1
    assert listed["items"][0].ship_batch_number == "MV-0042"

    assert (await list_barging_records(db, contractor_id=seed.other_contractor_id))["total"] == 0


# =====================================================
# PRE-CHECK
# =====================================================
async def test_validate_stock_without_row(db, seed):
    result = await validate_stock_for_barging(db, seed.contractor_id, seed.jetty_id, "10")

    assert result.valid is False
    assert result.available_stock == Decimal("0.00")
    assert "no stock found" in result.message.lower()


async def test_validate_stock_sufficient_and_insufficient(db, seed, make_stock):
    await make_stock(seed.contractor_id, seed.jetty_id, "100")

    ok = await validate_stock_for_barging(db, seed.contractor_id, seed.jetty_id, "100")
    assert ok.valid is True
    assert ok.available_stock == Decimal("100.00")
    assert ok.message is None

    short = await validate_stock_for_barging(db, seed.contractor_id, seed.jetty_id, "100.01")
    assert short.valid is False
    assert "insufficient stock" in short.message.lower()


async def test_validate_stock_does_not_write(db, seed, make_stock, read_stock):
    created = await make_stock(seed.contractor_id, seed.jetty_id, "100")

    await validate_stock_for_barging(db, seed.contractor_id, seed.jetty_id, "30")
    await db.commit()

    assert await read_stock(seed.contractor_id, seed.jetty_id) == created


async def test_concurrent_bargings_only_one_fits(seed, make_stock, read_stock, session_factory):
    await make_stock(seed.contractor_id, seed.jetty_id, "1000")

    async def barge(tonnage):
        async with session_factory() as session:
            return await create_barging_record(session, _barging(seed, tonnage))

    results = await asyncio.gather(barge("600"), barge("700"), return_exceptions=True)

    succeeded = [r for r in results if not isinstance(r, Exception)]
    failed = [r for r in results if isinstance(r, Exception)]
    assert len(succeeded) == 1
    assert len(failed) == 1
    assert isinstance(failed[0], InsufficientStockError)

    stock = await read_stock(seed.contractor_id, seed.jetty_id)
    assert stock.tonnage == succeeded[0].stock_tonnage
    assert stock.version == 2
    assert await _barging_count(session_factory) == 1
