from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from posturepal.core.database import get_db
from posturepal.models import User, UserProfile
from posturepal.schemas import ProfileUpdate, ProfileEnvelope, ProfileResponse
from posturepal.utils import get_current_user

router = APIRouter(prefix="/api/profile", tags=["Profile"])


@router.get("", response_model=ProfileEnvelope)
async def get_profile(current_user: User = Depends(get_current_user)):
    """
    Get the caller's profile. `profile` is null until onboarding is done.
    """
    if current_user.profile is None:
        return ProfileEnvelope(profile=None)
    return ProfileEnvelope(profile=ProfileResponse.model_validate(current_user.profile))


@router.put("", response_model=ProfileEnvelope)
async def update_profile(
    profile_update: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Create or partially update the caller's profile.
    Only fields present in the body are written.
    """
    update_data = profile_update.model_dump(mode="json", exclude_unset=True, exclude_none=True)

    profile = current_user.profile
    if profile is None:
        profile = UserProfile(user_id=current_user.id, name=current_user.name)
        db.add(profile)

    for key, value in update_data.items():
        setattr(profile, key, value)

    # Keep the account name in step with the profile name
    if "name" in update_data:
        current_user.name = update_data["name"]

    db.commit()
    db.refresh(profile)

    return ProfileEnvelope(profile=ProfileResponse.model_validate(profile))
