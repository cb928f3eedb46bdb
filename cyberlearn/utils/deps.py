import logging
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError

from cyberlearn.core.database import get_db  # noqa: F401
from cyberlearn.core.security import decode_access_token
from cyberlearn.schemas.identity import Identity

logger = logging.getLogger(__name__)

# auto_error=False: anonymous visitors reach the endpoints and get "sign in required" notices
http_bearer = HTTPBearer(auto_error=False)

def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(http_bearer)
) -> Optional[Identity]:
    """Resolve the caller from the auth provider's bearer token, or None when signed out."""
    if credentials is None:
        return None

    try:
        payload = decode_access_token(credentials.credentials)
    except JWTError as e:
        logger.info(f"Ignoring invalid bearer token: {e}")
        return None

    user_id = payload.get("sub")
    if not user_id:
        return None
    return Identity(user_id=str(user_id))
