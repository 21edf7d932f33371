"""Read-only views over the stock ledger and its adjustment journal."""

import logging
from datetime import datetime
from decimal import Decimal

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.masters.contractor_models import Contractor
from app.models.masters.jetty_models import Jetty
from app.models.stock.stock_adjustment_models import StockAdjustment
from app.models.stock.stock_balance_models import StockBalance
from app.models.users.user_models import User
from app.schemas.stock.stock_schemas import (
    StockListItemSchema,
    ContractorStockSchema,
    JettyStockSchema,
    JettyStockGroupSchema,
    ContractorAtJettySchema,
    StockTotalsSchema,
)
from app.schemas.stock.stock_adjustment_schemas import StockAdjustmentListItemSchema
from app.utils.decimal_utils import to_tonnage, sum_tonnage

logger = logging.getLogger(__name__)


def _visible_filters() -> list:
    return [
        Contractor.is_active.is_(True),
        ~Contractor.is_deleted,
        Jetty.is_active.is_(True),
    ]


def _stock_with_names():
    return (
        select(
            StockBalance.id,
            StockBalance.contractor_id,
            StockBalance.jetty_id,
            StockBalance.tonnage,
            StockBalance.last_updated,
            StockBalance.version,
            Contractor.name.label("contractor_name"),
            Contractor.code.label("contractor_code"),
            Jetty.name.label("jetty_name"),
            Jetty.code.label("jetty_code"),
        )
        .join(Contractor, StockBalance.contractor_id == Contractor.id)
        .join(Jetty, StockBalance.jetty_id == Jetty.id)
    )


# =====================================================
# LIST
# =====================================================
async def list_stock(
    db: AsyncSession,
    contractor_id: int | None = None,
    jetty_id: int | None = None,
    date_from: datetime | None = None,
    date_to: datetime | None = None,
) -> list[StockListItemSchema]:
    filters = _visible_filters()

    if contractor_id is not None:
        filters.append(StockBalance.contractor_id == contractor_id)

    if jetty_id is not None:
        filters.append(StockBalance.jetty_id == jetty_id)

    if date_from is not None:
        filters.append(StockBalance.last_updated >= date_from)

    if date_to is not None:
        filters.append(StockBalance.last_updated <= date_to)

    rows = await db.execute(
        _stock_with_names()
        .where(*filters)
        .order_by(Contractor.name.asc(), Jetty.name.asc())
    )

    return [StockListItemSchema(**r._mapping) for r in rows.all()]


# =====================================================
# GROUPED
# =====================================================
async def stock_by_contractor(db: AsyncSession) -> list[ContractorStockSchema]:
    rows = await db.execute(
        _stock_with_names()
        .where(*_visible_filters())
        .order_by(Contractor.name.asc(), Jetty.name.asc())
    )

    grouped: dict[int, dict] = {}

    for r in rows.all():
        group = grouped.setdefault(
            r.contractor_id,
            {
                "contractor_id": r.contractor_id,
                "contractor_name": r.contractor_name,
                "contractor_code": r.contractor_code,
                "total_tonnage": Decimal("0.00"),
                "jetties": [],
            },
        )
        tonnage = to_tonnage(r.tonnage)
        group["total_tonnage"] += tonnage
        group["jetties"].append(
            JettyStockSchema(
                jetty_id=r.jetty_id,
                jetty_name=r.jetty_name,
                tonnage=tonnage,
                last_updated=r.last_updated,
            )
        )

    return [ContractorStockSchema(**g) for g in grouped.values()]


async def stock_by_jetty(db: AsyncSession) -> list[JettyStockGroupSchema]:
    rows = await db.execute(
        _stock_with_names()
        .where(*_visible_filters())
        .order_by(Jetty.name.asc(), Contractor.name.asc())
    )

    grouped: dict[int, dict] = {}

    for r in rows.all():
        group = grouped.setdefault(
            r.jetty_id,
            {
                "jetty_id": r.jetty_id,
                "jetty_name": r.jetty_name,
                "jetty_code": r.jetty_code,
                "total_tonnage": Decimal("0.00"),
                "contractors": [],
            },
        )
        tonnage = to_tonnage(r.tonnage)
        group["total_tonnage"] += tonnage
        group["contractors"].append(
            ContractorAtJettySchema(
                contractor_id=r.contractor_id,
                contractor_name=r.contractor_name,
                tonnage=tonnage,
                last_updated=r.last_updated,
            )
        )

    return [JettyStockGroupSchema(**g) for g in grouped.values()]


async def stock_totals(db: AsyncSession) -> StockTotalsSchema:
    rows = await db.execute(
        select(
            StockBalance.contractor_id,
            StockBalance.jetty_id,
            StockBalance.tonnage,
            StockBalance.last_updated,
        )
        .join(Contractor, StockBalance.contractor_id == Contractor.id)
        .join(Jetty, StockBalance.jetty_id == Jetty.id)
        .where(*_visible_filters())
    )
    rows = rows.all()

    total = sum_tonnage(r.tonnage for r in rows)
    last_updated = await db.scalar(select(func.max(StockBalance.last_updated)))

    return StockTotalsSchema(
        total_tonnage=total,
        total_contractors=len({r.contractor_id for r in rows}),
        total_jetties=len({r.jetty_id for r in rows}),
        last_updated=last_updated,
    )


# =====================================================
# ADJUSTMENT HISTORY
# =====================================================
async def list_stock_adjustments(
    db: AsyncSession,
    stock_id: int | None = None,
    date_from: datetime | None = None,
    date_to: datetime | None = None,
) -> list[StockAdjustmentListItemSchema]:
    filters = []

    if stock_id is not None:
        filters.append(StockAdjustment.stock_id == stock_id)

    if date_from is not None:
        filters.append(StockAdjustment.created_at >= date_from)

    if date_to is not None:
        filters.append(StockAdjustment.created_at <= date_to)

    rows = await db.execute(
        select(
            StockAdjustment,
            Contractor.name.label("contractor_name"),
            Jetty.name.label("jetty_name"),
        )
        .join(StockBalance, StockAdjustment.stock_id == StockBalance.id)
        .join(Contractor, StockBalance.contractor_id == Contractor.id)
        .join(Jetty, StockBalance.jetty_id == Jetty.id)
        .where(*filters)
        .order_by(StockAdjustment.created_at.desc(), StockAdjustment.id.desc())
    )
    rows = rows.all()

    # -------------------------------------------------
    # USER NAMES (single batched lookup)
    # -------------------------------------------------
    user_ids = {r.StockAdjustment.adjusted_by for r in rows}
    user_ids |= {
        r.StockAdjustment.approved_by
        for r in rows
        if r.StockAdjustment.approved_by is not None
    }

    names: dict[int, str] = {}
    if user_ids:
        user_rows = await db.execute(
            select(User.id, User.full_name).where(User.id.in_(user_ids))
        )
        names = {uid: full_name for uid, full_name in user_rows.all()}

    items = []
    for r in rows:
        adj = r.StockAdjustment
        items.append(
            StockAdjustmentListItemSchema(
                id=adj.id,
                stock_id=adj.stock_id,
                adjusted_by=adj.adjusted_by,
                previous_tonnage=adj.previous_tonnage,
                new_tonnage=adj.new_tonnage,
                adjustment_amount=adj.adjustment_amount,
                reason=adj.reason,
                reason_description=adj.reason_description,
                reference_document=adj.reference_document,
                attachment=adj.attachment,
                approved_by=adj.approved_by,
                approved_at=adj.approved_at,
                created_at=adj.created_at,
                adjusted_by_name=names.get(adj.adjusted_by, "Unknown User"),
                approved_by_name=names.get(adj.approved_by) if adj.approved_by else None,
                contractor_name=r.contractor_name,
                jetty_name=r.jetty_name,
            )
        )

    return items
