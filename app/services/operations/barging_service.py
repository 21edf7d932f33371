import logging
from datetime import datetime

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundError, InvalidTonnageError
from app.models.operations.barging_models import BargingRecord
from app.schemas.operations.barging_schemas import (
    BargingCreateSchema,
    BargingOutSchema,
    BargingCreatedSchema,
)
from app.schemas.stock.stock_schemas import StockAvailabilitySchema
from app.services.masters.entity_guards import (
    ensure_active_contractor,
    ensure_active_jetty,
    ensure_active_user,
)
from app.services.stock import ledger_store
from app.services.stock.stock_update_service import apply_delta
from app.utils.audit_helpers import AuditRecorder, emit_audit
from app.utils.decimal_utils import to_tonnage

logger = logging.getLogger(__name__)


# =====================================================
# CREATE (outflow event + ledger debit, one transaction)
# =====================================================
async def create_barging_record(
    db: AsyncSession,
    payload: BargingCreateSchema,
    audit: AuditRecorder = emit_audit,
) -> BargingCreatedSchema:
    logger.info(
        "Recording barging",
        extra={
            "contractor_id": payload.contractor_id,
            "jetty_id": payload.jetty_id,
            "ship_batch_number": payload.ship_batch_number,
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
            raise InvalidTonnageError("Barging tonnage must be positive")

        # -------------------------
        # LEDGER DEBIT
        # NoStockFound / InsufficientStock pass through untouched
        # -------------------------
        stock = await apply_delta(
            db,
            payload.contractor_id,
            payload.jetty_id,
            -tonnage,
            allow_create=False,
        )

        # -------------------------
        # OUTFLOW EVENT
        # -------------------------
        record = BargingRecord(
            date_time=payload.date_time,
            contractor_id=payload.contractor_id,
            ship_batch_number=payload.ship_batch_number,
            tonnage=tonnage,
            jetty_id=payload.jetty_id,
            buyer=payload.buyer,
            loading_document=payload.loading_document,
            operator_id=payload.operator_id,
            notes=payload.notes,
        )
        db.add(record)
        await db.flush()
        await db.refresh(record)

        out = BargingOutSchema.model_validate(record)

        await audit(
            db,
            user_id=payload.operator_id,
            action="barging_create",
            table_name="barging_records",
            record_id=record.id,
            new_values=out.model_dump(),
        )

        await db.commit()

    except Exception:
        await db.rollback()
        raise

    logger.info(
        "Barging recorded",
        extra={
            "record_id": out.id,
            "stock_id": stock.id,
            "stock_tonnage": str(stock.tonnage),
            "stock_version": stock.version,
        },
    )

    return BargingCreatedSchema(
        record=out,
        stock_tonnage=stock.tonnage,
        stock_version=stock.version,
    )


# =====================================================
# PRE-CHECK (read only, no guarantee at write time)
# =====================================================
async def validate_stock_for_barging(
    db: AsyncSession,
    contractor_id: int,
    jetty_id: int,
    tonnage,
) -> StockAvailabilitySchema:
    requested = to_tonnage(tonnage)
    stock = await ledger_store.find(db, contractor_id, jetty_id)

    if stock is None:
        return StockAvailabilitySchema(
            valid=False,
            available_stock=to_tonnage(0),
            message=f"No stock found for contractor {contractor_id} at jetty {jetty_id}",
        )

    available = to_tonnage(stock.tonnage)

    if requested <= 0:
        return StockAvailabilitySchema(
            valid=False,
            available_stock=available,
            message="Barging tonnage must be positive",
        )

    if available < requested:
        return StockAvailabilitySchema(
            valid=False,
            available_stock=available,
            message=f"Insufficient stock. Available: {available} tons, Requested: {requested} tons",
        )

    return StockAvailabilitySchema(valid=True, available_stock=available)


# =====================================================
# READ
# =====================================================
async def get_barging_record(
    db: AsyncSession,
    record_id: int,
) -> BargingOutSchema:
    record = await db.scalar(
        select(BargingRecord).where(BargingRecord.id == record_id)
    )

    if not record:
        raise NotFoundError(
            "Barging record not found",
            {"record_id": record_id},
        )

    return BargingOutSchema.model_validate(record)


async def list_barging_records(
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
        filters.append(BargingRecord.date_time >= date_from)

    if date_to:
        filters.append(BargingRecord.date_time <= date_to)

    if contractor_id:
        filters.append(BargingRecord.contractor_id == contractor_id)

    if jetty_id:
        filters.append(BargingRecord.jetty_id == jetty_id)

    total = await db.scalar(
        select(func.count()).select_from(BargingRecord).where(*filters)
    )

    rows = await db.execute(
        select(BargingRecord)
        .where(*filters)
        .order_by(BargingRecord.date_time.desc(), BargingRecord.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )

    return {
        "total": total or 0,
        "page": page,
        "page_size": page_size,
        "items": [
            BargingOutSchema.model_validate(r)
            for r in rows.scalars().all()
        ],
    }
