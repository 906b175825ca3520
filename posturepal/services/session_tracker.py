"""
Session Tracker
Folds posture samples into the running totals of one active session.
"""
import copy
import logging
import math
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Any, Sequence

from posturepal.services.posture_analyzer import DetectedIssue, PostureSample

logger = logging.getLogger(__name__)

# Seconds between two detector samples
TICK_INTERVAL_SECONDS = 2


class SessionAlreadyActiveError(RuntimeError):
    """Raised when start() is called while a session is still running."""


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def derive_average_score(scores: Sequence[float], good_posture_time: float, total_time: float) -> int:
    """
    Average score of a session.

    Mean of the score samples when any were recorded, otherwise the share
    of good-posture time. Always within [0, 100].
    """
    if scores:
        average = sum(scores) / len(scores)
    elif total_time > 0:
        average = good_posture_time / total_time * 100
    else:
        average = 0
    return max(0, min(100, round_half_up(average)))


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ScoreRecord:
    score: float
    timestamp: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {"score": self.score, "timestamp": self.timestamp.isoformat()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScoreRecord":
        return cls(score=data["score"], timestamp=datetime.fromisoformat(data["timestamp"]))


@dataclass
class TrackedSession:
    id: str
    start_time: datetime
    end_time: Optional[datetime] = None
    total_time: int = 0  # seconds
    good_posture_time: int = 0  # seconds
    average_score: int = 0
    issues: List[DetectedIssue] = field(default_factory=list)
    scores: List[ScoreRecord] = field(default_factory=list)

    @property
    def is_finished(self) -> bool:
        return self.end_time is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat() if self.end_time else None,
            "total_time": self.total_time,
            "good_posture_time": self.good_posture_time,
            "average_score": self.average_score,
            "issues": [issue.to_dict() for issue in self.issues],
            "scores": [record.to_dict() for record in self.scores],
        }

    def to_api_payload(self) -> Dict[str, Any]:
        """Body for POST /api/sessions (the server assigns its own id)."""
        payload = self.to_dict()
        payload.pop("id")
        return payload

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TrackedSession":
        end_time = data.get("end_time")
        return cls(
            id=str(data["id"]),
            start_time=datetime.fromisoformat(data["start_time"]),
            end_time=datetime.fromisoformat(end_time) if end_time else None,
            total_time=int(data.get("total_time", 0)),
            good_posture_time=int(data.get("good_posture_time", 0)),
            average_score=data.get("average_score", 0),
            issues=[DetectedIssue.from_dict(item) for item in data.get("issues", [])],
            scores=[ScoreRecord.from_dict(item) for item in data.get("scores", [])],
        )


class SessionTracker:
    """
    Owns at most one active session and the list of finished ones.

    Args:
        tick_interval: Seconds credited as good posture per good sample
        clock: Callable returning the current aware datetime
    """

    def __init__(
        self,
        tick_interval: int = TICK_INTERVAL_SECONDS,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.tick_interval = tick_interval
        self.clock = clock
        self.current_session: Optional[TrackedSession] = None
        self.history: List[TrackedSession] = []
        self._score_sum = 0.0

    @property
    def is_active(self) -> bool:
        return self.current_session is not None

    @property
    def current(self) -> Optional[TrackedSession]:
        return self.current_session

    def start(self) -> TrackedSession:
        if self.current_session is not None:
            raise SessionAlreadyActiveError(
                f"Session {self.current_session.id} is still active, stop it first"
            )

        self.current_session = TrackedSession(id=uuid.uuid4().hex, start_time=self.clock())
        self._score_sum = 0.0
        logger.info(f"Started session {self.current_session.id}")
        return self.current_session

    def tick(self, sample: PostureSample) -> Optional[TrackedSession]:
        session = self.current_session
        if session is None:
            return None

        now = self.clock()
        session.total_time = max(0, int((now - session.start_time).total_seconds()))

        if sample.is_good:
            session.good_posture_time += self.tick_interval
        # Ticks can arrive faster than the wall clock advances
        session.good_posture_time = min(session.good_posture_time, session.total_time)

        if sample.issues:
            session.issues.extend(sample.issues)

        session.scores.append(ScoreRecord(score=sample.score, timestamp=now))
        self._score_sum += sample.score
        session.average_score = max(0, min(100, round_half_up(self._score_sum / len(session.scores))))

        return session

    def stop(self) -> Optional[TrackedSession]:
        session = self.current_session
        if session is None:
            return None

        session.end_time = self.clock()
        # Must equal end_time - start_time, which is what the server derives
        session.total_time = max(0, int((session.end_time - session.start_time).total_seconds()))
        session.good_posture_time = min(session.good_posture_time, session.total_time)
        if not session.scores:
            session.average_score = derive_average_score([], session.good_posture_time, session.total_time)

        self.history.append(copy.deepcopy(session))
        self.current_session = None
        logger.info(
            f"Finished session {session.id}: {session.total_time}s total, "
            f"{session.good_posture_time}s good, score {session.average_score}"
        )
        return session

    def clear_history(self) -> None:
        self.history = []
