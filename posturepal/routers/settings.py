from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from posturepal.core.database import get_db
from posturepal.models import User, UserSettings, DEFAULT_SETTINGS
from posturepal.schemas import SettingsUpdate, SettingsEnvelope, SettingsResponse
from posturepal.utils import get_current_user

router = APIRouter(prefix="/api/settings", tags=["Settings"])


@router.get("", response_model=SettingsEnvelope)
async def get_settings(current_user: User = Depends(get_current_user)):
    """
    Get the caller's settings, falling back to defaults when none were saved.
    """
    if current_user.settings is None:
        return SettingsEnvelope(settings=SettingsResponse(**DEFAULT_SETTINGS))
    return SettingsEnvelope(settings=SettingsResponse.model_validate(current_user.settings))


@router.put("", response_model=SettingsEnvelope)
async def update_settings(
    settings_update: SettingsUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Merge the provided fields into the caller's settings.
    """
    update_data = settings_update.model_dump(exclude_unset=True, exclude_none=True)

    user_settings = current_user.settings
    if user_settings is None:
        user_settings = UserSettings(user_id=current_user.id, **DEFAULT_SETTINGS)
        db.add(user_settings)

    for key, value in update_data.items():
        setattr(user_settings, key, value)

    db.commit()
    db.refresh(user_settings)

    return SettingsEnvelope(settings=SettingsResponse.model_validate(user_settings))
