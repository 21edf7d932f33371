from datetime import datetime

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.models.enums.user_role import UserRole
from app.utils.check_roles import require_role, ALL_ROLES
from app.utils.response import success_response, APIResponse

from app.schemas.stock.stock_schemas import (
    StockListItemSchema,
    ContractorStockSchema,
    JettyStockGroupSchema,
    StockTotalsSchema,
)
from app.schemas.stock.stock_adjustment_schemas import (
    StockAdjustmentCreateSchema,
    StockAdjustmentOutSchema,
    StockAdjustmentListItemSchema,
)
from app.services.stock.stock_query_service import (
    list_stock,
    stock_by_contractor,
    stock_by_jetty,
    stock_totals,
    list_stock_adjustments,
)
from app.services.stock.stock_adjustment_service import create_stock_adjustment
from app.services.stock.adjustment_journal import approve_adjustment

router = APIRouter(prefix="/stock", tags=["Stock"])


# =========================
# BALANCES
# =========================
@router.get("/", response_model=APIResponse[list[StockListItemSchema]])
async def list_stock_api(
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role(ALL_ROLES)),
    contractor_id: int | None = Query(None),
    jetty_id: int | None = Query(None),
    date_from: datetime | None = Query(None),
    date_to: datetime | None = Query(None),
):
    items = await list_stock(
        db,
        contractor_id=contractor_id,
        jetty_id=jetty_id,
        date_from=date_from,
        date_to=date_to,
    )
    return success_response("Stock fetched", items)


@router.get("/by-contractor", response_model=APIResponse[list[ContractorStockSchema]])
async def stock_by_contractor_api(
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role(ALL_ROLES)),
):
    return success_response("Stock by contractor fetched", await stock_by_contractor(db))


@router.get("/by-jetty", response_model=APIResponse[list[JettyStockGroupSchema]])
async def stock_by_jetty_api(
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role(ALL_ROLES)),
):
    return success_response("Stock by jetty fetched", await stock_by_jetty(db))


@router.get("/totals", response_model=APIResponse[StockTotalsSchema])
async def stock_totals_api(
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role(ALL_ROLES)),
):
    return success_response("Stock totals fetched", await stock_totals(db))


# =========================
# ADJUSTMENTS
# =========================
@router.post("/adjustments", response_model=APIResponse[StockAdjustmentOutSchema])
async def create_adjustment_api(
    payload: StockAdjustmentCreateSchema,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role([UserRole.admin])),
):
    return success_response(
        "Stock adjustment created",
        await create_stock_adjustment(db, payload),
    )


@router.get("/adjustments", response_model=APIResponse[list[StockAdjustmentListItemSchema]])
async def list_adjustments_api(
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role([UserRole.admin, UserRole.auditor])),
    stock_id: int | None = Query(None),
    date_from: datetime | None = Query(None),
    date_to: datetime | None = Query(None),
):
    items = await list_stock_adjustments(
        db,
        stock_id=stock_id,
        date_from=date_from,
        date_to=date_to,
    )
    return success_response("Stock adjustments fetched", items)


@router.post("/adjustments/{adjustment_id}/approve", response_model=APIResponse[StockAdjustmentOutSchema])
async def approve_adjustment_api(
    adjustment_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role([UserRole.admin, UserRole.auditor])),
):
    return success_response(
        "Stock adjustment approved",
        await approve_adjustment(db, adjustment_id, user.id),
    )
