"""Identity verification for owner-scoped endpoints.

Authentication itself belongs to an external identity provider. The provider
issues a signed JWT whose ``sub`` claim is the owner id; this module only
verifies the signature and hands the owner id to the route handlers.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from loguru import logger

from shortlinks.core.config import settings

bearer_scheme = HTTPBearer(auto_error=False)


def create_access_token(owner_id: str, expires_delta: Optional[timedelta] = None) -> str:
    """Issue a token for ``owner_id``. Used by tooling and tests."""
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode: Dict[str, Any] = {"sub": owner_id, "exp": expire}
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_owner_id(token: str) -> Optional[str]:
    """Return the owner id carried by ``token``, or None if it is not valid."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as e:
        logger.debug("Rejected bearer token", error=str(e))
        return None

    owner_id = payload.get("sub")
    if not isinstance(owner_id, str) or not owner_id:
        return None
    return owner_id


async def get_current_owner(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> str:
    """FastAPI dependency resolving the authenticated owner id.

    Raises:
        HTTPException: 401 when the token is missing or invalid
    """
    owner_id = decode_owner_id(credentials.credentials) if credentials else None
    if owner_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized: please sign in",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return owner_id
