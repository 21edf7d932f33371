from datetime import datetime
from decimal import Decimal

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.models.enums.user_role import UserRole
from app.utils.check_roles import require_role, ALL_ROLES
from app.utils.response import success_response, APIResponse, Page

from app.schemas.operations.barging_schemas import (
    BargingCreateSchema,
    BargingCreatedSchema,
    BargingOutSchema,
)
from app.schemas.stock.stock_schemas import StockAvailabilitySchema
from app.services.operations.barging_service import (
    create_barging_record,
    get_barging_record,
    list_barging_records,
    validate_stock_for_barging,
)

router = APIRouter(prefix="/barging", tags=["Barging"])


@router.post("/", response_model=APIResponse[BargingCreatedSchema])
async def create_barging_api(
    payload: BargingCreateSchema,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role([UserRole.admin, UserRole.operator_barging])),
):
    return success_response(
        "Barging recorded",
        await create_barging_record(db, payload),
    )


@router.get("/validate-stock", response_model=APIResponse[StockAvailabilitySchema])
async def validate_stock_api(
    contractor_id: int = Query(...),
    jetty_id: int = Query(...),
    tonnage: Decimal = Query(...),
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role(ALL_ROLES)),
):
    return success_response(
        "Stock availability checked",
        await validate_stock_for_barging(db, contractor_id, jetty_id, tonnage),
    )


@router.get("/", response_model=APIResponse[Page[BargingOutSchema]])
async def list_barging_api(
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role(ALL_ROLES)),
    date_from: datetime | None = Query(None),
    date_to: datetime | None = Query(None),
    contractor_id: int | None = Query(None),
    jetty_id: int | None = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=200),
):
    result = await list_barging_records(
        db,
        date_from=date_from,
        date_to=date_to,
        contractor_id=contractor_id,
        jetty_id=jetty_id,
        page=page,
        page_size=page_size,
    )
    return success_response("Barging records fetched", result)


@router.get("/{record_id}", response_model=APIResponse[BargingOutSchema])
async def get_barging_api(
    record_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role(ALL_ROLES)),
):
    return success_response(
        "Barging record fetched",
        await get_barging_record(db, record_id),
    )
