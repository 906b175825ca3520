import bcrypt
from jose import JWTError, jwt
from datetime import datetime, timedelta, timezone
from typing import Optional
import hashlib
import base64
import logging
from posturepal.core.config import settings

logger = logging.getLogger(__name__)


def _prepare_password(password: str) -> bytes:
    """
    Prepare password for hashing by converting to SHA256 first.
    This allows passwords longer than 72 bytes to work with bcrypt.
    """
    sha256_hash = hashlib.sha256(password.encode('utf-8')).digest()
    return base64.b64encode(sha256_hash)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plain password against a stored bcrypt hash.
    """
    prepared_password = _prepare_password(plain_password)
    try:
        return bcrypt.checkpw(prepared_password, hashed_password.encode('utf-8'))
    except ValueError:
        # Stored value is not a bcrypt hash
        logger.warning("Password verification against malformed hash")
        return False


def get_password_hash(password: str) -> str:
    """
    Hash a password for storing.
    Uses SHA256 pre-hashing + salted bcrypt.
    """
    prepared_password = _prepare_password(password)
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(prepared_password, salt)
    return hashed.decode('utf-8')


def create_access_token(user_id: int, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a signed JWT for an account.

    Args:
        user_id: Account identifier stored in the "sub" claim
        expires_delta: Optional lifetime, defaults to ACCESS_TOKEN_EXPIRE_MINUTES (30 days)

    Returns:
        Encoded JWT token string
    """
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    now = datetime.now(timezone.utc)
    to_encode = {
        "sub": str(user_id),
        "iat": now,
        "exp": now + expires_delta,
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> Optional[dict]:
    """
    Decode and verify a JWT access token.

    Returns:
        Decoded token payload or None if invalid or expired
    """
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError as e:
        logger.debug(f"Rejected access token: {e}")
        return None
