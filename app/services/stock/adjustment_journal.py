"""
Append-only journal of manual stock corrections.

Entries are immutable once written. The approval columns are the only ones
ever touched after insert, and only once.
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundError, AlreadyApprovedError
from app.models.enums.adjustment_reason import AdjustmentReason
from app.models.stock.stock_adjustment_models import StockAdjustment
from app.schemas.stock.stock_adjustment_schemas import StockAdjustmentOutSchema
from app.services.masters.entity_guards import ensure_active_user
from app.utils.audit_helpers import AuditRecorder, emit_audit
from app.utils.decimal_utils import to_tonnage

logger = logging.getLogger(__name__)


# =====================================================
# RECORD (NO COMMIT HERE)
# =====================================================
async def record_adjustment(
    db: AsyncSession,
    *,
    stock_id: int,
    adjusted_by: int,
    previous_tonnage: Decimal,
    new_tonnage: Decimal,
    adjustment_amount: Decimal,
    reason: AdjustmentReason,
    reason_description: str,
    reference_document: str | None = None,
    attachment: str | None = None,
) -> StockAdjustment:
    previous_tonnage = to_tonnage(previous_tonnage)
    new_tonnage = to_tonnage(new_tonnage)
    adjustment_amount = to_tonnage(adjustment_amount)

    if previous_tonnage + adjustment_amount != new_tonnage:
        raise ValueError(
            f"Adjustment does not balance: {previous_tonnage} + {adjustment_amount} != {new_tonnage}"
        )
    if new_tonnage < 0:
        raise ValueError("Journal entry would record a negative balance")
    if not reason_description:
        raise ValueError("reason_description is required")

    adjustment = StockAdjustment(
        stock_id=stock_id,
        adjusted_by=adjusted_by,
        previous_tonnage=previous_tonnage,
        new_tonnage=new_tonnage,
        adjustment_amount=adjustment_amount,
        reason=AdjustmentReason(reason),
        reason_description=reason_description,
        reference_document=reference_document,
        attachment=attachment,
    )

    db.add(adjustment)
    await db.flush()
    await db.refresh(adjustment)

    return adjustment


# =====================================================
# APPROVE
# =====================================================
async def approve_adjustment(
    db: AsyncSession,
    adjustment_id: int,
    approver_id: int,
    audit: AuditRecorder = emit_audit,
) -> StockAdjustmentOutSchema:
    try:
        existing = await db.scalar(
            select(StockAdjustment).where(StockAdjustment.id == adjustment_id)
        )

        if not existing:
            raise NotFoundError(
                "Stock adjustment not found",
                {"adjustment_id": adjustment_id},
            )

        if existing.approved_by is not None:
            raise AlreadyApprovedError(adjustment_id)

        await ensure_active_user(db, approver_id, "Approver")

        before = StockAdjustmentOutSchema.model_validate(existing)

        # -------------------------------------------------
        # ONE-TIME APPROVAL (guarded in the UPDATE itself)
        # -------------------------------------------------
        result = await db.execute(
            update(StockAdjustment)
            .where(
                StockAdjustment.id == adjustment_id,
                StockAdjustment.approved_by.is_(None),
            )
            .values(
                approved_by=approver_id,
                approved_at=datetime.now(timezone.utc),
            )
            .returning(StockAdjustment.id)
            .execution_options(synchronize_session=False)
        )

        if result.scalar_one_or_none() is None:
            logger.warning(
                "Concurrent approval lost",
                extra={"adjustment_id": adjustment_id, "approver_id": approver_id},
            )
            raise AlreadyApprovedError(adjustment_id)

        await db.refresh(existing)
        after = StockAdjustmentOutSchema.model_validate(existing)

        await audit(
            db,
            user_id=approver_id,
            action="stock_adjustment_approve",
            table_name="stock_adjustments",
            record_id=adjustment_id,
            old_values=before.model_dump(),
            new_values=after.model_dump(),
        )

        await db.commit()

    except Exception:
        await db.rollback()
        raise

    logger.info(
        "Stock adjustment approved",
        extra={"adjustment_id": adjustment_id, "approver_id": approver_id},
    )

    return after
