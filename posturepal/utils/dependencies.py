from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from posturepal.core.database import get_db
from posturepal.models import User
from posturepal.schemas import TokenData
from posturepal.utils.auth import decode_access_token

security = HTTPBearer(auto_error=False)


def _credentials_exception(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    """
    Dependency resolving the bearer token to the calling account.
    """
    if credentials is None or not credentials.credentials:
        raise _credentials_exception("Not authorized, no token")

    payload = decode_access_token(credentials.credentials)
    if payload is None:
        raise _credentials_exception("Not authorized, token failed")

    try:
        token_data = TokenData(user_id=int(payload.get("sub")))
    except (TypeError, ValueError):
        raise _credentials_exception("Not authorized, token failed")

    user = db.query(User).filter(User.id == token_data.user_id).first()
    if user is None:
        raise _credentials_exception("Not authorized, user not found")

    return user
