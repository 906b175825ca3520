"""
Pydantic schemas for the onboarding profile and tracking settings
"""
from enum import Enum
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class FitnessGoal(str, Enum):
    STRENGTH = "strength"
    FLEXIBILITY = "flexibility"
    POSTURE_CORRECTION = "posture_correction"
    ENDURANCE = "endurance"


# Profile Schemas
class ProfileFields(BaseModel):
    age: Optional[int] = Field(None, ge=1, le=150)
    gender: Optional[Gender] = None
    height: Optional[float] = Field(None, ge=0)  # cm
    weight: Optional[float] = Field(None, ge=0)  # kg
    fitness_goal: Optional[FitnessGoal] = None


class ProfileUpdate(ProfileFields):
    name: Optional[str] = Field(None, min_length=1, max_length=255)


class ProfileResponse(BaseModel):
    name: Optional[str] = None
    age: Optional[int] = None
    gender: Optional[Gender] = None
    height: Optional[float] = None
    weight: Optional[float] = None
    fitness_goal: FitnessGoal = FitnessGoal.POSTURE_CORRECTION
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ProfileEnvelope(BaseModel):
    success: bool = True
    profile: Optional[ProfileResponse] = None


# Settings Schemas
class SettingsUpdate(BaseModel):
    reminder_interval: Optional[int] = Field(None, gt=0)  # minutes
    sensitivity: Optional[float] = Field(None, ge=0.1, le=1.0)
    enable_reminders: Optional[bool] = None
    enable_camera: Optional[bool] = None


class SettingsResponse(BaseModel):
    reminder_interval: int = 15
    sensitivity: float = 0.7
    enable_reminders: bool = True
    enable_camera: bool = True

    class Config:
        from_attributes = True


class SettingsEnvelope(BaseModel):
    success: bool = True
    settings: SettingsResponse
