from .auth import verify_password, get_password_hash, create_access_token, decode_access_token
from .dependencies import get_current_user

__all__ = [
    "verify_password",
    "get_password_hash",
    "create_access_token",
    "decode_access_token",
    "get_current_user",
]
