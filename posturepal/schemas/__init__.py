from .auth import (
    TokenData,
    RegisterRequest,
    LoginRequest,
    UserSummary,
    AuthResponse,
    MeResponse,
)
from .profile import (
    Gender,
    FitnessGoal,
    ProfileUpdate,
    ProfileResponse,
    ProfileEnvelope,
    SettingsUpdate,
    SettingsResponse,
    SettingsEnvelope,
)
from .posture import (
    IssueType,
    Severity,
    PostureIssueSchema,
    ScoreSampleSchema,
    SessionCreate,
    SessionResponse,
    SessionEnvelope,
    Pagination,
    SessionListResponse,
    SessionRangeResponse,
    StatsSummary,
    StatsResponse,
    MessageResponse,
)

__all__ = [
    "TokenData",
    "RegisterRequest",
    "LoginRequest",
    "UserSummary",
    "AuthResponse",
    "MeResponse",
    "Gender",
    "FitnessGoal",
    "ProfileUpdate",
    "ProfileResponse",
    "ProfileEnvelope",
    "SettingsUpdate",
    "SettingsResponse",
    "SettingsEnvelope",
    "IssueType",
    "Severity",
    "PostureIssueSchema",
    "ScoreSampleSchema",
    "SessionCreate",
    "SessionResponse",
    "SessionEnvelope",
    "Pagination",
    "SessionListResponse",
    "SessionRangeResponse",
    "StatsSummary",
    "StatsResponse",
    "MessageResponse",
]
