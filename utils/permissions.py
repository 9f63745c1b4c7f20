from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel
from typing import Optional
import jwt
import logging

from utils.security import decode_token

logger = logging.getLogger(__name__)

# auto_error is off so a missing header is answered with our own 401
security = HTTPBearer(auto_error=False)


class TokenClaims(BaseModel):
    id: int
    admin: bool = False


def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> str:
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Access denied"
        )
    return credentials.credentials


async def get_current_user(token: str = Depends(get_bearer_token)) -> TokenClaims:
    """
    Get the caller's claims from the bearer token.
    Stateless: the worker is not looked up, so a token outlives a deleted worker
    until it expires.
    """
    try:
        payload = decode_token(token)
        return TokenClaims(id=payload["id"], admin=payload.get("admin", False))
    except jwt.ExpiredSignatureError:
        logger.info("Rejected expired token")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid token"
        )
    except (jwt.InvalidTokenError, KeyError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid token"
        )


async def require_admin(user: TokenClaims = Depends(get_current_user)) -> TokenClaims:
    if not user.admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin privileges required"
        )
    return user
