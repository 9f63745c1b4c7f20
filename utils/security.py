"""
Password hashing (bcrypt) and session token signing (PyJWT, HS256).
"""

import bcrypt
import jwt
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from config import settings

# bcrypt rejects (or silently truncates, depending on version) longer input
MAX_PASSWORD_BYTES = 72


def hash_password(password: str, rounds: Optional[int] = None) -> str:
    """Hash a password with a freshly generated salt"""
    salt = bcrypt.gensalt(rounds=rounds or settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash or a password bcrypt refuses to process
        return False


def sign_token(worker_id: int, admin: bool, expires_in: Optional[timedelta] = None) -> str:
    """Issue a session token carrying the worker id, the admin claim and an expiry"""
    if expires_in is None:
        expires_in = timedelta(hours=settings.TOKEN_EXPIRE_HOURS)
    payload = {
        "id": worker_id,
        "admin": bool(admin),
        "exp": datetime.now(timezone.utc) + expires_in
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str) -> Dict[str, Any]:
    """
    Verify signature and expiry and return the claims.

    Raises:
        jwt.InvalidTokenError: malformed, expired, wrongly signed token or one
            without the exp or id claim
    """
    return jwt.decode(
        token,
        settings.SECRET_KEY,
        algorithms=[settings.ALGORITHM],
        options={"require": ["exp", "id"]}
    )


def is_token_valid(token: str) -> bool:
    try:
        decode_token(token)
        return True
    except jwt.InvalidTokenError:
        return False
