"""
Pydantic schemas for posture sessions and aggregate statistics
"""
from enum import Enum
from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, List
from datetime import datetime, timezone


class IssueType(str, Enum):
    FORWARD_HEAD = "forward_head"
    ROUNDED_SHOULDERS = "rounded_shoulders"
    LEANING = "leaning"
    SLOUCHING = "slouching"


class Severity(str, Enum):
    MILD = "mild"
    MODERATE = "moderate"
    SEVERE = "severe"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Aware UTC datetime; naive values are taken to be UTC already."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# Issue / Score Schemas
class PostureIssueSchema(BaseModel):
    type: IssueType
    severity: Severity
    message: str = Field(..., min_length=1, max_length=255)
    timestamp: datetime = Field(default_factory=_utcnow)

    class Config:
        from_attributes = True


class ScoreSampleSchema(BaseModel):
    score: float = Field(..., ge=0, le=100)
    timestamp: datetime = Field(default_factory=_utcnow)

    class Config:
        from_attributes = True


# Session Schemas
class SessionCreate(BaseModel):
    start_time: datetime
    end_time: Optional[datetime] = None
    total_time: int = Field(0, ge=0)  # seconds
    good_posture_time: int = Field(0, ge=0)  # seconds
    average_score: Optional[float] = Field(None, ge=0, le=100)
    issues: List[PostureIssueSchema] = []
    scores: List[ScoreSampleSchema] = []

    @field_validator("start_time", "end_time")
    @classmethod
    def normalize_timezone(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_utc(value)

    @model_validator(mode="after")
    def check_times(self):
        if self.end_time is not None:
            if self.end_time < self.start_time:
                raise ValueError("end_time must not be before start_time")
            if self.total_time == 0:
                self.total_time = int((self.end_time - self.start_time).total_seconds())
        if self.good_posture_time > self.total_time:
            raise ValueError("good_posture_time cannot exceed total_time")
        return self


class SessionResponse(BaseModel):
    id: int
    start_time: datetime
    end_time: Optional[datetime] = None
    total_time: int
    good_posture_time: int
    average_score: float
    issues: List[PostureIssueSchema] = []
    scores: List[ScoreSampleSchema] = []
    user_agent: Optional[str] = None
    platform: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SessionEnvelope(BaseModel):
    success: bool = True
    session: SessionResponse


class Pagination(BaseModel):
    total: int
    page: int
    limit: int
    pages: int


class SessionListResponse(BaseModel):
    success: bool = True
    sessions: List[SessionResponse]
    pagination: Pagination


class SessionRangeResponse(BaseModel):
    success: bool = True
    sessions: List[SessionResponse]


# Statistics Schemas
class StatsSummary(BaseModel):
    total_sessions: int = 0
    total_time: int = 0
    total_good_posture_time: int = 0
    average_score: int = 0
    best_score: float = 0
    worst_score: float = 0
    posture_percentage: int = 0


class StatsResponse(BaseModel):
    success: bool = True
    stats: StatsSummary


class MessageResponse(BaseModel):
    success: bool = True
    message: str
