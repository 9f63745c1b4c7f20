from .permissions import TokenClaims, get_current_user, require_admin
from .security import hash_password, verify_password, sign_token, decode_token, is_token_valid

__all__ = [
    "TokenClaims", "get_current_user", "require_admin",
    "hash_password", "verify_password", "sign_token", "decode_token", "is_token_valid"
]
