"""Bearer token verification.

Tokens are issued by the external login service; this process only verifies
them and reads the identity claims. HS256 with the shared JWT_SECRET.

Expected claims:
  sub           user id
  role          "admin" | "exchange"
  exchange_name optional display name for exchange users
  type          must be "access"
"""

from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt

from config.settings import settings
from src.mt_common.enums import UserRole
from src.mt_common.errors import InvalidCredentialsError

_ALGORITHM = settings.JWT_ALGORITHM  # "HS256"


def decode_token(token: str) -> dict[str, Any]:
    """Decode and validate an access token.

    Raises:
        InvalidCredentialsError: signature invalid, token expired, wrong
            token type or unknown role.
    """
    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[_ALGORITHM],  # Explicit list prevents algorithm confusion
        )
    except JWTError:
        raise InvalidCredentialsError() from None

    if payload.get("type") != "access" or not payload.get("sub"):
        raise InvalidCredentialsError()
    if payload.get("role") not in {r.value for r in UserRole}:
        raise InvalidCredentialsError()
    return payload


def create_access_token(
    user_id: str,
    role: str,
    exchange_name: str | None = None,
    expires_in: timedelta = timedelta(minutes=30),
) -> str:
    """Issue a token in the login service's format (local tooling and tests)."""
    now = datetime.now(UTC)
    payload = {
        "sub": user_id,
        "role": role,
        "exchange_name": exchange_name,
        "type": "access",
        "iat": now,
        "exp": now + expires_in,
    }
    return str(jwt.encode(payload, settings.JWT_SECRET, algorithm=_ALGORITHM))
