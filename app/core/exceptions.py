from decimal import Decimal

from fastapi import HTTPException
from app.constants.error_codes import ErrorCode


class AppException(HTTPException):
    def __init__(
        self,
        status_code: int,
        message: str,
        error_code: ErrorCode,
        details: dict | None = None,
    ):
        super().__init__(status_code=status_code, detail=message)
        self.error_code = error_code
        self.details = details

    @property
    def message(self) -> str:
        return self.detail

    def __str__(self) -> str:
        return self.detail


# =====================================================
# VALIDATION (caller's fault, never retried)
# =====================================================
class NotFoundError(AppException):
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(404, message, ErrorCode.NOT_FOUND, details)


class InactiveEntityError(AppException):
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(400, message, ErrorCode.INACTIVE_ENTITY, details)


class InvalidTonnageError(AppException):
    def __init__(self, message: str = "Tonnage must be positive"):
        super().__init__(400, message, ErrorCode.INVALID_TONNAGE)


# =====================================================
# STOCK LEDGER
# =====================================================
class NoStockFoundError(AppException):
    def __init__(self, contractor_id: int, jetty_id: int):
        super().__init__(
            404,
            f"No stock found for contractor {contractor_id} at jetty {jetty_id}",
            ErrorCode.NO_STOCK_FOUND,
            {"contractor_id": contractor_id, "jetty_id": jetty_id},
        )


class InsufficientStockError(AppException):
    def __init__(
        self,
        available: Decimal,
        requested: Decimal,
        message: str | None = None,
    ):
        self.available = available
        self.requested = requested
        super().__init__(
            409,
            message
            or f"Insufficient stock. Available: {available} tons, Requested: {requested} tons",
            ErrorCode.INSUFFICIENT_STOCK,
            {"available": str(available), "requested": str(requested)},
        )


class NegativeStockError(InsufficientStockError):
    """Manual adjustment that would drive a balance below zero."""

    def __init__(self, available: Decimal, requested: Decimal):
        super().__init__(
            available,
            requested,
            "Stock cannot be negative. "
            f"Insufficient stock: available {available} tons, "
            f"adjustment removes {requested} tons",
        )


class ConcurrentModificationError(AppException):
    def __init__(self, attempts: int):
        super().__init__(
            409,
            "Stock was modified by another operation. Please try again.",
            ErrorCode.STOCK_VERSION_CONFLICT,
            {"attempts": attempts},
        )


class DuplicateKeyError(Exception):
    """A stock row for the (contractor, jetty) pair already exists."""

    def __init__(self, contractor_id: int, jetty_id: int):
        super().__init__(
            f"Stock row already exists for contractor {contractor_id} at jetty {jetty_id}"
        )
        self.contractor_id = contractor_id
        self.jetty_id = jetty_id


# =====================================================
# ADJUSTMENT JOURNAL
# =====================================================
class AlreadyApprovedError(AppException):
    def __init__(self, adjustment_id: int):
        super().__init__(
            409,
            "Stock adjustment is already approved",
            ErrorCode.ALREADY_APPROVED,
            {"adjustment_id": adjustment_id},
        )
