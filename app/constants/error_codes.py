from enum import Enum


class ErrorCode(str, Enum):
    # ---------------- GENERIC ----------------
    VALIDATION_ERROR = "VALIDATION_ERROR"
    UNAUTHORIZED = "UNAUTHORIZED"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    INTERNAL_ERROR = "INTERNAL_ERROR"

    # ---------------- ENTITIES ----------------
    INACTIVE_ENTITY = "INACTIVE_ENTITY"

    # ---------------- STOCK ----------------
    INVALID_TONNAGE = "INVALID_TONNAGE"
    NO_STOCK_FOUND = "NO_STOCK_FOUND"
    INSUFFICIENT_STOCK = "INSUFFICIENT_STOCK"
    STOCK_VERSION_CONFLICT = "STOCK_VERSION_CONFLICT"

    # ---------------- ADJUSTMENTS ----------------
    ALREADY_APPROVED = "ALREADY_APPROVED"
