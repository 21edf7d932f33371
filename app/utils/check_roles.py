from fastapi import Depends, HTTPException, status
from app.utils.get_user import get_current_user
from app.models.users.user_models import User
from app.models.enums.user_role import UserRole


def require_role(roles: list[UserRole]):
    allowed = {UserRole(r) for r in roles}

    async def role_checker(user: User = Depends(get_current_user)):
        if UserRole(user.role) not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Permission denied"
            )
        return user
    return role_checker


ALL_ROLES = list(UserRole)
