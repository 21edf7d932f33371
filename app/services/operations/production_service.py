import logging
from datetime import datetime

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundError, InvalidTonnageError
from app.models.operations.production_models import ProductionRecord
from app.schemas.operations.production_schemas import (
    ProductionCreateSchema,
    ProductionOutSchema,
    ProductionCreatedSchema,
)
from app.services.masters.entity_guards import (
    ensure_active_contractor,
    ensure_active_jetty,
    ensure_active_user,
)
from app.services.stock.stock_update_service import apply_delta
from app.utils.audit_helpers import AuditRecorder, emit_audit
from app.utils.decimal_utils import to_tonnage

logger = logging.getLogger(__name__)


# =====================================================
# CREATE (intake event + ledger credit, one transaction)
# =====================================================
async def create_production_record(
    db: AsyncSession,
    payload: ProductionCreateSchema,
    audit: AuditRecorder = emit_audit,
) -> ProductionCreatedSchema:
    logger.info(
        "Recording production",
        extra={
            "contractor_id": payload.contractor_id,
            "jetty_id": payload.jetty_id,
            "truck_number": payload.truck_number,
            "tonnage": str(payload.tonnage),
        },
    )

    try:
        # -------------------------
        # VALIDATION
        # -------------------------
        await ensure_active_contractor(db, payload.contractor_id)
        await ensure_active_jetty(db, payload.jetty_id)
        await ensure_active_user(db, payload.operator_id, "Operator")

        tonnage = to_tonnage(payload.tonnage)
        if tonnage <= 0:
            raise InvalidTonnageError()

        # -------------------------
        # LEDGER CREDIT
        # -------------------------
        stock = await apply_delta(
            db,
            payload.contractor_id,
            payload.jetty_id,
            tonnage,
            allow_create=True,
        )

        # -------------------------
        # INTAKE EVENT
        # -------------------------
        record = ProductionRecord(
            date_time=payload.date_time,
            contractor_id=payload.contractor_id,
            truck_number=payload.truck_number,
            tonnage=tonnage,
            coal_grade=payload.coal_grade,
            jetty_id=payload.jetty_id,
            document_photo=payload.document_photo,
            operator_id=payload.operator_id,
            notes=payload.notes,
        )
        db.add(record)
        await db.flush()
        await db.refresh(record)

        out = ProductionOutSchema.model_validate(record)

        await audit(
            db,
            user_id=payload.operator_id,
            action="production_create",
            table_name="production_records",
            record_id=record.id,
            new_values=out.model_dump(),
        )

        await db.commit()

    except Exception:
        await db.rollback()
        raise

    logger.info(
        "Production recorded",
        extra={
            "record_id": out.id,
            "stock_id": stock.id,
            "stock_tonnage": str(stock.tonnage),
            "stock_version": stock.version,
        },
    )

    return ProductionCreatedSchema(
        record=out,
        stock_tonnage=stock.tonnage,
        stock_version=stock.version,
    )


# =====================================================
# READ
# =====================================================
async def get_production_record(
    db: AsyncSession,
    record_id: int,
) -> ProductionOutSchema:
    record = await db.scalar(
        select(ProductionRecord).where(ProductionRecord.id == record_id)
    )

    if not record:
        raise NotFoundError(
            "Production record not found",
            {"record_id": record_id},
        )

    return ProductionOutSchema.model_validate(record)


async def list_production_records(
    db: AsyncSession,
    date_from: datetime | None = None,
    date_to: datetime | None = None,
    contractor_id: int | None = None,
    jetty_id: int | None = None,
    page: int = 1,
    page_size: int = 50,
) -> dict:
    filters = []

    if date_from:
        filters.append(ProductionRecord.date_time >= date_from)

    if date_to:
        filters.append(ProductionRecord.date_time <= date_to)

    if contractor_id:
        filters.append(ProductionRecord.contractor_id == contractor_id)

    if jetty_id:
        filters.append(ProductionRecord.jetty_id == jetty_id)

    total = await db.scalar(
        select(func.count()).select_from(ProductionRecord).where(*filters)
    )

    rows = await db.execute(
        select(ProductionRecord)
        .where(*filters)
        .order_by(ProductionRecord.date_time.desc(), ProductionRecord.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )

    return {
        "total": total or 0,
        "page": page,
        "page_size": page_size,
        "items": [
            ProductionOutSchema.model_validate(r)
            for r in rows.scalars().all()
        ],
    }
