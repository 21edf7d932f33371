import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    NotFoundError,
    InvalidTonnageError,
    InsufficientStockError,
    NegativeStockError,
)
from app.schemas.stock.stock_adjustment_schemas import (
    StockAdjustmentCreateSchema,
    StockAdjustmentOutSchema,
)
from app.services.masters.entity_guards import ensure_active_user
from app.services.stock import adjustment_journal, ledger_store
from app.services.stock.stock_update_service import apply_delta
from app.utils.audit_helpers import AuditRecorder, emit_audit
from app.utils.decimal_utils import to_tonnage

logger = logging.getLogger(__name__)


# =====================================================
# CREATE (ledger write + journal entry, one transaction)
# =====================================================
async def create_stock_adjustment(
    db: AsyncSession,
    payload: StockAdjustmentCreateSchema,
    audit: AuditRecorder = emit_audit,
) -> StockAdjustmentOutSchema:
    logger.info(
        "Creating stock adjustment",
        extra={
            "stock_id": payload.stock_id,
            "amount": str(payload.adjustment_amount),
            "actor_id": payload.adjusted_by,
        },
    )

    try:
        # -------------------------
        # PRECONDITIONS
        # -------------------------
        stock = await ledger_store.find_by_id(db, payload.stock_id)
        if not stock:
            raise NotFoundError(
                "Stock record not found",
                {"stock_id": payload.stock_id},
            )

        await ensure_active_user(db, payload.adjusted_by, "User")

        amount = to_tonnage(payload.adjustment_amount)
        if amount == 0:
            raise InvalidTonnageError("Adjustment amount cannot be zero")

        # -------------------------
        # LEDGER
        # -------------------------
        try:
            updated = await apply_delta(
                db,
                stock.contractor_id,
                stock.jetty_id,
                amount,
                allow_create=False,
            )
        except InsufficientStockError as exc:
            raise NegativeStockError(exc.available, exc.requested) from exc

        # balance as seen by the write that actually won
        previous_tonnage = to_tonnage(updated.tonnage - amount)

        # -------------------------
        # JOURNAL
        # -------------------------
        adjustment = await adjustment_journal.record_adjustment(
            db,
            stock_id=updated.id,
            adjusted_by=payload.adjusted_by,
            previous_tonnage=previous_tonnage,
            new_tonnage=updated.tonnage,
            adjustment_amount=amount,
            reason=payload.reason,
            reason_description=payload.reason_description,
            reference_document=payload.reference_document,
            attachment=payload.attachment,
        )
        out = StockAdjustmentOutSchema.model_validate(adjustment)

        await audit(
            db,
            user_id=payload.adjusted_by,
            action="stock_adjustment_create",
            table_name="stock_adjustments",
            record_id=adjustment.id,
            new_values=out.model_dump(),
        )

        await db.commit()

    except Exception:
        await db.rollback()
        raise

    logger.info(
        "Stock adjustment created",
        extra={
            "adjustment_id": out.id,
            "stock_id": out.stock_id,
            "new_tonnage": str(out.new_tonnage),
            "version": updated.version,
        },
    )

    return out
