"""Security utilities: bearer token validation.

Tokens are issued by the identity provider; this API only checks their
signature and reads the user id from the ``sub`` claim.
"""

import structlog
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from fintrack.config import settings

logger = structlog.get_logger()


def decode_access_token(token: str) -> dict:
    """Decode and validate an access token."""
    try:
        return jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
            options={"verify_aud": False},
        )
    except JWTError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        ) from e


# ── Auth Dependencies ─────────────────────────────
security_scheme = HTTPBearer()


async def get_current_user_id(
    credentials: HTTPAuthorizationCredentials = Depends(security_scheme),
) -> str:
    """FastAPI dependency: validate the bearer token and return the user id."""
    payload = decode_access_token(credentials.credentials)

    user_id = payload.get("sub")
    if not user_id:
        logger.warning("Token without subject rejected")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token missing subject",
        )
    return str(user_id)
