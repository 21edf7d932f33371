"""
Durable storage of stock rows, one per (contractor, jetty).

Every function returns ``StockBalanceSnapshot`` values rather than ORM
instances: a snapshot is the "read" half of a read-check-write cycle and must
keep its version even after the row moves on.

The only mutation primitive is ``conditional_update``. Nothing in the code
base writes ``stock.tonnage`` any other way.
"""

import logging
from datetime import datetime
from decimal import Decimal

from sqlalchemy import select, update, insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import DuplicateKeyError
from app.models.stock.stock_balance_models import StockBalance
from app.schemas.stock.stock_schemas import StockBalanceSnapshot

logger = logging.getLogger(__name__)

_SNAPSHOT_COLUMNS = (
    StockBalance.id,
    StockBalance.contractor_id,
    StockBalance.jetty_id,
    StockBalance.tonnage,
    StockBalance.last_updated,
    StockBalance.version,
)


def _to_snapshot(row) -> StockBalanceSnapshot:
    return StockBalanceSnapshot(
        id=row.id,
        contractor_id=row.contractor_id,
        jetty_id=row.jetty_id,
        tonnage=row.tonnage,
        last_updated=row.last_updated,
        version=row.version,
    )


# =====================================================
# READ
# =====================================================
async def find(
    db: AsyncSession,
    contractor_id: int,
    jetty_id: int,
) -> StockBalanceSnapshot | None:
    result = await db.execute(
        select(*_SNAPSHOT_COLUMNS).where(
            StockBalance.contractor_id == contractor_id,
            StockBalance.jetty_id == jetty_id,
        )
    )
    row = result.first()
    return _to_snapshot(row) if row else None


async def find_by_id(
    db: AsyncSession,
    stock_id: int,
) -> StockBalanceSnapshot | None:
    result = await db.execute(
        select(*_SNAPSHOT_COLUMNS).where(StockBalance.id == stock_id)
    )
    row = result.first()
    return _to_snapshot(row) if row else None


# =====================================================
# CREATE
# =====================================================
async def create(
    db: AsyncSession,
    contractor_id: int,
    jetty_id: int,
    initial_tonnage: Decimal,
    now: datetime,
) -> StockBalanceSnapshot:
    """
    Insert the first row for a pair with version 1.

    Runs inside a SAVEPOINT so that losing the unique-key race only undoes
    this insert, not the caller's transaction.
    """
    try:
        async with db.begin_nested():
            result = await db.execute(
                insert(StockBalance)
                .values(
                    contractor_id=contractor_id,
                    jetty_id=jetty_id,
                    tonnage=initial_tonnage,
                    last_updated=now,
                    version=1,
                )
                .returning(*_SNAPSHOT_COLUMNS)
            )
            row = result.one()
    except IntegrityError as exc:
        logger.info(
            "Stock row create lost race",
            extra={"contractor_id": contractor_id, "jetty_id": jetty_id},
        )
        raise DuplicateKeyError(contractor_id, jetty_id) from exc

    return _to_snapshot(row)


# =====================================================
# CONDITIONAL UPDATE
# =====================================================
async def conditional_update(
    db: AsyncSession,
    stock_id: int,
    expected_version: int,
    new_tonnage: Decimal,
    new_last_updated: datetime,
) -> StockBalanceSnapshot | None:
    """
    Set tonnage and bump version by one, only if the row is still at
    ``expected_version``. Returns ``None`` on a version conflict (no write).
    """
    result = await db.execute(
        update(StockBalance)
        .where(
            StockBalance.id == stock_id,
            StockBalance.version == expected_version,
        )
        .values(
            tonnage=new_tonnage,
            last_updated=new_last_updated,
            version=StockBalance.version + 1,
        )
        .returning(*_SNAPSHOT_COLUMNS)
        .execution_options(synchronize_session=False)
    )
    row = result.first()
    return _to_snapshot(row) if row else None
