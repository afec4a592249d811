# backend/messenger/auth/deps.py
from typing import Optional

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer

from backend.messenger.utils.security import decode_access_token

# missing or bad tokens are not rejected here; the core reports them
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def principal_from_token(token: Optional[str]) -> Optional[str]:
    if not token:
        return None
    payload = decode_access_token(token)
    if payload is None or not payload.get("sub"):
        return None
    return str(payload["sub"])


def get_current_principal(
    token: Optional[str] = Depends(oauth2_scheme),
) -> Optional[str]:
    """
    Username the request is authenticated as, or None.
    """
    return principal_from_token(token)
