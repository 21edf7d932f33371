from decimal import Decimal
from datetime import datetime, date
from enum import Enum
from typing import Any, Awaitable, Protocol

from sqlalchemy.ext.asyncio import AsyncSession
from app.models.support.audit_models import AuditLog


class AuditRecorder(Protocol):
    def __call__(
        self,
        db: AsyncSession,
        *,
        user_id: int,
        action: str,
        table_name: str,
        record_id: int | None = None,
        old_values: dict | None = None,
        new_values: dict | None = None,
    ) -> Awaitable[None]: ...


def to_audit_json(values: dict | None) -> dict | None:
    """Make a value snapshot JSON-safe (Decimal -> str, datetime -> ISO)."""
    if values is None:
        return None

    def _convert(v: Any):
        if isinstance(v, Decimal):
            return str(v)
        if isinstance(v, (datetime, date)):
            return v.isoformat()
        if isinstance(v, Enum):
            return v.value
        if isinstance(v, dict):
            return {k: _convert(i) for k, i in v.items()}
        if isinstance(v, (list, tuple)):
            return [_convert(i) for i in v]
        return v

    return _convert(values)


async def emit_audit(
    db: AsyncSession,
    *,
    user_id: int,
    action: str,
    table_name: str,
    record_id: int | None = None,
    old_values: dict | None = None,
    new_values: dict | None = None,
) -> None:
    """Append an audit row to the caller's transaction. Never commits."""
    if not action or not table_name:
        raise ValueError("Audit entries need an action and a table name")

    db.add(
        AuditLog(
            user_id=user_id,
            action=action,
            table_name=table_name,
            record_id=record_id,
            old_values=to_audit_json(old_values),
            new_values=to_audit_json(new_values),
        )
    )
