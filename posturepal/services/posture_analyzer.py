"""
Posture Analysis Service
Produces posture samples for the session tracker. The mock analyzer stands
in for a camera-based detector behind the PostureDetector interface.
"""
import random
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional, Dict, Any

from posturepal.schemas.posture import IssueType, Severity


# Score thresholds
GOOD_SCORE = 70
FAIR_SCORE = 50
SEVERE_SCORE = 30

ISSUE_MESSAGES = {
    IssueType.FORWARD_HEAD: "Head is tilted forward",
    IssueType.ROUNDED_SHOULDERS: "Shoulders are rounded",
    IssueType.SLOUCHING: "Slouching detected",
    IssueType.LEANING: "Leaning to one side",
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class DetectedIssue:
    type: IssueType
    severity: Severity
    message: str
    timestamp: datetime = field(default_factory=_utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "severity": self.severity.value,
            "message": self.message,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DetectedIssue":
        return cls(
            type=IssueType(data["type"]),
            severity=Severity(data["severity"]),
            message=data["message"],
            timestamp=datetime.fromisoformat(data["timestamp"]),
        )


@dataclass
class PostureSample:
    """One reading from a detector."""
    is_good: bool
    score: int
    confidence: float = 1.0
    timestamp: datetime = field(default_factory=_utcnow)
    issues: List[DetectedIssue] = field(default_factory=list)


def calculate_severity(score: float) -> Severity:
    if score >= FAIR_SCORE:
        return Severity.MILD
    elif score >= SEVERE_SCORE:
        return Severity.MODERATE
    return Severity.SEVERE


class PostureDetector(ABC):
    """
    Capability interface for anything that can produce posture samples.
    """

    @abstractmethod
    def analyze_frame(self) -> PostureSample:
        """Return the posture reading for the current moment."""

    def set_sensitivity(self, sensitivity: float) -> None:
        pass


class MockPostureAnalyzer(PostureDetector):
    """
    Generates random but plausible posture readings.

    Scores are drawn around 60-100 with +/-10 jitter, so most readings are
    good and a minority raise one or two issues.
    """

    def __init__(self, sensitivity: float = 0.7, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()
        self.sensitivity = 0.7
        self.set_sensitivity(sensitivity)
        self.baseline_posture: Optional[PostureSample] = None

    def analyze_frame(self) -> PostureSample:
        score = self.generate_mock_score()
        issues = self.detect_issues(score)

        return PostureSample(
            is_good=score >= GOOD_SCORE,
            confidence=0.7 + self.rng.random() * 0.3,
            score=int(round(score)),
            timestamp=_utcnow(),
            issues=issues,
        )

    def generate_mock_score(self) -> float:
        base_score = 60 + self.rng.random() * 40
        variation = (self.rng.random() - 0.5) * 20
        return max(0.0, min(100.0, base_score + variation))

    def detect_issues(self, score: float) -> List[DetectedIssue]:
        """
        Raise one issue below GOOD_SCORE and two below FAIR_SCORE.
        """
        if score >= GOOD_SCORE:
            return []

        issue_count = 2 if score < FAIR_SCORE else 1
        issue_types = list(IssueType)
        return [
            self.create_issue(self.rng.choice(issue_types), score)
            for _ in range(issue_count)
        ]

    def create_issue(self, issue_type: IssueType, score: float) -> DetectedIssue:
        return DetectedIssue(
            type=issue_type,
            severity=calculate_severity(score),
            message=ISSUE_MESSAGES.get(issue_type, "Posture issue detected"),
        )

    def set_sensitivity(self, sensitivity: float) -> None:
        self.sensitivity = max(0.1, min(1.0, sensitivity))

    def set_baseline(self, sample: PostureSample) -> None:
        self.baseline_posture = sample
