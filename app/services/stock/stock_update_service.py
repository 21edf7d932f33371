"""
Optimistic update protocol for stock balances.

``apply_delta`` is the single path through which intake, outflow and manual
adjustment deltas reach the ledger. It never commits: the calling mutator
owns the transaction and commits the ledger write together with its event
or journal row.
"""

import asyncio
import logging
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from app.core import config
from app.core.exceptions import (
    ConcurrentModificationError,
    DuplicateKeyError,
    InsufficientStockError,
    InvalidTonnageError,
    NoStockFoundError,
)
from app.schemas.stock.stock_schemas import StockBalanceSnapshot
from app.services.stock import ledger_store
from app.utils.decimal_utils import to_tonnage, MAX_TONNAGE

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


async def apply_delta(
    db: AsyncSession,
    contractor_id: int,
    jetty_id: int,
    delta,
    allow_create: bool,
    *,
    max_attempts: int | None = None,
) -> StockBalanceSnapshot:
    try:
        delta = to_tonnage(delta)
    except ValueError as exc:
        raise InvalidTonnageError(str(exc)) from exc

    attempts = max_attempts or config.STOCK_UPDATE_MAX_ATTEMPTS

    for attempt in range(1, attempts + 1):
        # -------------------------------------------------
        # 1. READ
        # -------------------------------------------------
        current = await ledger_store.find(db, contractor_id, jetty_id)

        # -------------------------------------------------
        # 2-3. ABSENT ROW
        # -------------------------------------------------
        if current is None:
            if not allow_create:
                raise NoStockFoundError(contractor_id, jetty_id)

            if delta <= 0:
                raise InvalidTonnageError()

            try:
                created = await ledger_store.create(
                    db, contractor_id, jetty_id, delta, _now()
                )
            except DuplicateKeyError:
                # a concurrent creator won; proceed as if the row existed
                current = await ledger_store.find(db, contractor_id, jetty_id)
                if current is None:
                    continue
            else:
                logger.info(
                    "Stock row created",
                    extra={
                        "stock_id": created.id,
                        "contractor_id": contractor_id,
                        "jetty_id": jetty_id,
                        "tonnage": str(created.tonnage),
                    },
                )
                return created

        # -------------------------------------------------
        # 4. CHECK
        # -------------------------------------------------
        available = to_tonnage(current.tonnage)
        try:
            new_tonnage = to_tonnage(available + delta)
        except ValueError as exc:
            raise InvalidTonnageError(
                f"Resulting stock exceeds the supported precision (max {MAX_TONNAGE} tons)"
            ) from exc

        if new_tonnage < 0:
            raise InsufficientStockError(available=available, requested=-delta)

        # -------------------------------------------------
        # 5. CONDITIONAL WRITE
        # -------------------------------------------------
        updated = await ledger_store.conditional_update(
            db,
            current.id,
            current.version,
            new_tonnage,
            _now(),
        )

        if updated is not None:
            logger.debug(
                "Stock delta applied",
                extra={
                    "stock_id": updated.id,
                    "delta": str(delta),
                    "tonnage": str(updated.tonnage),
                    "version": updated.version,
                    "attempt": attempt,
                },
            )
            return updated

        # -------------------------------------------------
        # 6. VERSION CONFLICT
        # -------------------------------------------------
        logger.warning(
            "Stock version conflict",
            extra={
                "stock_id": current.id,
                "expected_version": current.version,
                "attempt": attempt,
                "max_attempts": attempts,
            },
        )

        if attempt < attempts and config.STOCK_UPDATE_RETRY_BACKOFF_SECONDS:
            await asyncio.sleep(config.STOCK_UPDATE_RETRY_BACKOFF_SECONDS * attempt)

    logger.error(
        "Stock update retries exhausted",
        extra={
            "contractor_id": contractor_id,
            "jetty_id": jetty_id,
            "delta": str(delta),
            "attempts": attempts,
        },
    )
    raise ConcurrentModificationError(attempts)
