from datetime import datetime, timedelta, timezone
from typing import Callable

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from pydantic import BaseModel

from app.core.config import settings
from app.core.permissions import has_permission

security = HTTPBearer()


class StaffPrincipal(BaseModel):
    """Caller identity carried by the bearer token."""
    id: str
    role: str


def create_access_token(staff_id: str, role: str, expires_delta: timedelta | None = None) -> str:
    """Create JWT access token."""
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    now = datetime.now(timezone.utc)
    expire = now + expires_delta

    payload = {
        "sub": staff_id,
        "role": role,
        "exp": int(expire.timestamp()),
        "iat": int(now.timestamp())
    }

    return jwt.encode(
        payload,
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM
    )


async def get_current_staff(
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> StaffPrincipal:
    """Get current staff member from JWT token."""
    try:
        payload = jwt.decode(
            credentials.credentials,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM]
        )
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    staff_id = payload.get("sub")
    role = payload.get("role")
    if staff_id is None or role is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return StaffPrincipal(id=staff_id, role=role)


def require_permission(permission: str) -> Callable:
    """Dependency factory: reject callers whose role lacks `permission`."""

    async def checker(staff: StaffPrincipal = Depends(get_current_staff)) -> StaffPrincipal:
        if not has_permission(staff.role, permission):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Missing permission: {permission}"
            )
        return staff

    return checker
