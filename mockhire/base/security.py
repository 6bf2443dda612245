import logging
from typing import Optional

import jwt
from fastapi import Header, HTTPException, Security, status
from fastapi.security import APIKeyHeader

from mockhire.base.config import settings

logger = logging.getLogger("security")

# --- API key header config ---
api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


def verify_api_key(key: str = Security(api_key_header)):
    if settings.ENABLE_API_KEY_SECURITY and key != settings.API_KEY:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid or missing API key")


def decode_bearer_token(token: str) -> dict:
    """
    Signature is verified only when JWT_SECRET is configured; otherwise the
    payload is read as-is, matching tokens issued by the external auth provider.
    """
    if settings.JWT_SECRET:
        return jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            options={"verify_aud": False},
        )
    return jwt.decode(token, options={"verify_signature": False})


def get_current_user_id(authorization: Optional[str] = Header(None)) -> str:
    if not authorization or not authorization.startswith("Bearer "):
        logger.warning("[Auth] Missing or invalid authorization header")
        raise HTTPException(status_code=401, detail="Missing or invalid authorization header")

    token = authorization[len("Bearer "):].strip()
    if not token:
        raise HTTPException(status_code=401, detail="Empty JWT token")

    try:
        payload = decode_bearer_token(token)
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired")
    except jwt.InvalidTokenError as e:
        logger.warning(f"[Auth] Invalid token: {e}")
        raise HTTPException(status_code=401, detail="Could not extract user_id from token")

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(status_code=401, detail="Could not extract user_id from token")
    return user_id
