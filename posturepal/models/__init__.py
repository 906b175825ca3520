from .user import User, UserProfile, UserSettings, DEFAULT_SETTINGS
from .posture import PostureSession, PostureIssue, ScoreSample

__all__ = [
    "User",
    "UserProfile",
    "UserSettings",
    "DEFAULT_SETTINGS",
    "PostureSession",
    "PostureIssue",
    "ScoreSample",
]
