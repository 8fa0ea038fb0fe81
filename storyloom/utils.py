from fastapi import Depends, HTTPException, status

from .models import User
from .users import current_active_user


# Dependency to enforce authentication; routers pass user.id to the services
async def require_authenticated_user(
    user: User = Depends(current_active_user),
) -> User:
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    return user


__all__ = ["require_authenticated_user"]
