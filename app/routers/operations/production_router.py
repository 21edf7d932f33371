from datetime import datetime

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.models.enums.user_role import UserRole
from app.utils.check_roles import require_role, ALL_ROLES
from app.utils.response import success_response, APIResponse, Page

from app.schemas.operations.production_schemas import (
    ProductionCreateSchema,
    ProductionCreatedSchema,
    ProductionOutSchema,
)
from app.services.operations.production_service import (
    create_production_record,
    get_production_record,
    list_production_records,
)

router = APIRouter(prefix="/production", tags=["Production"])


@router.post("/", response_model=APIResponse[ProductionCreatedSchema])
async def create_production_api(
    payload: ProductionCreateSchema,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role([UserRole.admin, UserRole.operator_produksi])),
):
    return success_response(
        "Production recorded",
        await create_production_record(db, payload),
    )


@router.get("/", response_model=APIResponse[Page[ProductionOutSchema]])
async def list_production_api(
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role(ALL_ROLES)),
    date_from: datetime | None = Query(None),
    date_to: datetime | None = Query(None),
    contractor_id: int | None = Query(None),
    jetty_id: int | None = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=200),
):
    result = await list_production_records(
        db,
        date_from=date_from,
        date_to=date_to,
        contractor_id=contractor_id,
        jetty_id=jetty_id,
        page=page,
        page_size=page_size,
    )
    return success_response("Production records fetched", result)


@router.get("/{record_id}", response_model=APIResponse[ProductionOutSchema])
async def get_production_api(
    record_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role(ALL_ROLES)),
):
    return success_response(
        "Production record fetched",
        await get_production_record(db, record_id),
    )
