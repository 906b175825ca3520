"""Service module initialization"""
from posturepal.services.posture_analyzer import PostureDetector, MockPostureAnalyzer, PostureSample, DetectedIssue
from posturepal.services.session_tracker import SessionTracker, TrackedSession, SessionAlreadyActiveError
from posturepal.services.stats_calculator import StatsCalculator, format_duration

__all__ = [
    'PostureDetector',
    'MockPostureAnalyzer',
    'PostureSample',
    'DetectedIssue',
    'SessionTracker',
    'TrackedSession',
    'SessionAlreadyActiveError',
    'StatsCalculator',
    'format_duration',
]
