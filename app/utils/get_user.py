import logging

from fastapi import Depends, HTTPException, Header, status, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from app.core.db import get_db
from app.models.users.user_models import User

logger = logging.getLogger("auth.guard")


async def get_current_user(
    request: Request,
    x_user_id: int = Header(..., alias="X-User-Id"),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Resolve the acting user. Authentication happens upstream of this service."""
    user = await db.scalar(select(User).where(User.id == x_user_id))

    if not user:
        logger.warning("Acting user not found", extra={"user_id": x_user_id})
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")

    if not user.is_active:
        logger.warning("Inactive user access blocked", extra={"user_id": user.id})
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User account is inactive")

    request.state.user = user
    request.state.user_id = user.id
    return user
