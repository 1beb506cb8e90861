"""FastAPI dependencies: get_current_user, require_admin.

Usage in any protected router:
    from src.mt_gateway.auth.dependencies import get_current_user

    @router.get("/protected")
    async def protected(user: CurrentUser = Depends(get_current_user)):
        ...
"""

from dataclasses import dataclass

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from src.mt_common.enums import UserRole
from src.mt_common.errors import InvalidCredentialsError, PermissionDeniedError
from src.mt_gateway.auth.jwt_handler import decode_token

# Tokens come from the external login service; tokenUrl only feeds Swagger UI.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")

# Reusable 401 exception with WWW-Authenticate header (OAuth2 standard)
_CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Invalid or expired token",
    headers={"WWW-Authenticate": "Bearer"},
)


@dataclass(frozen=True)
class CurrentUser:
    id: str
    role: str
    exchange_name: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value


async def get_current_user(token: str = Depends(oauth2_scheme)) -> CurrentUser:
    """Verify the Bearer token and return the caller's identity.

    Raises HTTP 401 if the token is missing, invalid, or expired.
    """
    try:
        payload = decode_token(token)
    except InvalidCredentialsError:
        raise _CREDENTIALS_EXCEPTION from None
    return CurrentUser(
        id=str(payload["sub"]),
        role=str(payload["role"]),
        exchange_name=payload.get("exchange_name"),
    )


async def require_admin(
    current_user: CurrentUser = Depends(get_current_user),
) -> CurrentUser:
    """Raises HTTP 403 (PermissionDeniedError) unless the caller is an admin."""
    if not current_user.is_admin:
        raise PermissionDeniedError()
    return current_user


def ensure_exchange_access(current_user: CurrentUser, exchange_id: str) -> None:
    """Admins see every exchange; an exchange user only sees itself."""
    if not current_user.is_admin and current_user.id != exchange_id:
        raise PermissionDeniedError("Exchange users may only access their own banks")
