import logging
from datetime import datetime, timezone
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from posturepal.core.database import get_db
from posturepal.models import User, UserProfile
from posturepal.schemas import (
    RegisterRequest,
    LoginRequest,
    AuthResponse,
    MeResponse,
    UserSummary,
    ProfileResponse,
    SettingsResponse,
)
from posturepal.utils import verify_password, get_password_hash, create_access_token, get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Authentication"])

PROFILE_FIELDS = ("age", "gender", "height", "weight", "fitness_goal")


def email_taken(db: Session, email: str) -> bool:
    return db.query(User.id).filter(User.email == email).first() is not None


def _user_exists() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail="User already exists"
    )


def build_user_summary(user: User) -> UserSummary:
    """
    Account view returned by register, login and /me. Never includes the password hash.
    """
    return UserSummary(
        id=user.id,
        name=user.name,
        email=user.email,
        profile=ProfileResponse.model_validate(user.profile) if user.profile else None,
        settings=SettingsResponse.model_validate(user.settings) if user.settings else SettingsResponse(),
        created_at=user.created_at,
        last_active=user.last_active,
    )


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(user_data: RegisterRequest, db: Session = Depends(get_db)):
    """
    Register a new account, optionally with its onboarding profile.
    """
    if email_taken(db, user_data.email):
        raise _user_exists()

    new_user = User(
        name=user_data.name,
        email=user_data.email,
        hashed_password=get_password_hash(user_data.password),
    )

    profile_data = user_data.model_dump(mode="json", include=set(PROFILE_FIELDS), exclude_none=True)
    if profile_data:
        new_user.profile = UserProfile(name=user_data.name, **profile_data)

    db.add(new_user)
    try:
        db.commit()
    except IntegrityError:
        # A concurrent registration took the email after the check above
        db.rollback()
        raise _user_exists()
    db.refresh(new_user)

    logger.info(f"Registered user {new_user.id}")

    return AuthResponse(
        token=create_access_token(new_user.id),
        user=build_user_summary(new_user),
    )


@router.post("/login", response_model=AuthResponse)
async def login(login_data: LoginRequest, db: Session = Depends(get_db)):
    """
    Login with email and password.
    Returns a 30-day JWT and the account summary.
    """
    user = db.query(User).filter(User.email == login_data.email).first()

    if not user or not verify_password(login_data.password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials"
        )

    user.last_active = datetime.now(timezone.utc)
    db.commit()
    db.refresh(user)

    return AuthResponse(
        token=create_access_token(user.id),
        user=build_user_summary(user),
    )


@router.get("/me", response_model=MeResponse)
async def get_me(current_user: User = Depends(get_current_user)):
    """
    Get the calling account.
    """
    return MeResponse(user=build_user_summary(current_user))
