from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundError, InactiveEntityError
from app.models.masters.contractor_models import Contractor
from app.models.masters.jetty_models import Jetty
from app.models.users.user_models import User


async def ensure_active_contractor(db: AsyncSession, contractor_id: int) -> None:
    row = await db.execute(
        select(Contractor.is_active, Contractor.deleted_at)
        .where(Contractor.id == contractor_id)
    )
    contractor = row.first()

    # soft-deleted contractors do not exist for new operations
    if not contractor or contractor.deleted_at is not None:
        raise NotFoundError(
            f"Contractor with ID {contractor_id} not found",
            {"contractor_id": contractor_id},
        )

    if not contractor.is_active:
        raise InactiveEntityError(
            f"Contractor with ID {contractor_id} is inactive",
            {"contractor_id": contractor_id},
        )


async def ensure_active_jetty(db: AsyncSession, jetty_id: int) -> None:
    is_active = await db.scalar(
        select(Jetty.is_active).where(Jetty.id == jetty_id)
    )

    if is_active is None:
        raise NotFoundError(
            f"Jetty with ID {jetty_id} not found",
            {"jetty_id": jetty_id},
        )

    if not is_active:
        raise InactiveEntityError(
            f"Jetty with ID {jetty_id} is inactive",
            {"jetty_id": jetty_id},
        )


async def ensure_active_user(
    db: AsyncSession,
    user_id: int,
    label: str = "User",
) -> None:
    is_active = await db.scalar(
        select(User.is_active).where(User.id == user_id)
    )

    if is_active is None:
        raise NotFoundError(
            f"{label} with ID {user_id} not found",
            {"user_id": user_id},
        )

    if not is_active:
        raise InactiveEntityError(
            f"{label} with ID {user_id} is inactive",
            {"user_id": user_id},
        )
