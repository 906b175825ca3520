"""
Statistics Service
Reduces finished posture sessions into summary metrics
"""
import numpy as np
from typing import Iterable, Dict, Optional, Any
from datetime import datetime, timedelta, timezone

from posturepal.services.session_tracker import round_half_up

WEEK = timedelta(days=7)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class StatsCalculator:
    """
    Aggregates per-session totals. Works on anything exposing
    total_time, good_posture_time, average_score and start_time.
    """

    @staticmethod
    def empty_stats() -> Dict[str, Any]:
        return {
            "total_sessions": 0,
            "total_time": 0,
            "total_good_posture_time": 0,
            "average_score": 0,
            "best_score": 0,
            "worst_score": 0,
            "posture_percentage": 0,
        }

    @staticmethod
    def summarize_totals(
        total_sessions: int,
        total_time: Optional[float],
        total_good_posture_time: Optional[float],
        mean_score: Optional[float],
        best_score: Optional[float],
        worst_score: Optional[float],
    ) -> Dict[str, Any]:
        """
        Shape already-reduced totals into the summary dictionary.
        Shared by the in-memory reduction and the SQL aggregate query.
        """
        if not total_sessions:
            return StatsCalculator.empty_stats()

        total_time = int(total_time or 0)
        total_good = int(total_good_posture_time or 0)
        posture_percentage = (total_good / total_time) * 100 if total_time > 0 else 0

        return {
            "total_sessions": int(total_sessions),
            "total_time": total_time,
            "total_good_posture_time": total_good,
            "average_score": round_half_up(float(mean_score or 0)),
            "best_score": float(best_score or 0),
            "worst_score": float(worst_score or 0),
            "posture_percentage": round_half_up(posture_percentage),
        }

    @classmethod
    def calculate_overall_stats(cls, sessions: Iterable[Any]) -> Dict[str, Any]:
        sessions = list(sessions or [])
        if not sessions:
            return cls.empty_stats()

        scores = np.array([s.average_score for s in sessions], dtype=float)

        return cls.summarize_totals(
            total_sessions=len(sessions),
            total_time=sum(s.total_time for s in sessions),
            total_good_posture_time=sum(s.good_posture_time for s in sessions),
            mean_score=float(np.mean(scores)),
            best_score=float(np.max(scores)),
            worst_score=float(np.min(scores)),
        )

    @classmethod
    def weekly_stats(cls, sessions: Iterable[Any], now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Same reduction restricted to sessions started within the last 7 days.
        """
        now = _as_utc(now or datetime.now(timezone.utc))
        cutoff = now - WEEK
        recent = [s for s in (sessions or []) if _as_utc(s.start_time) >= cutoff]
        return cls.calculate_overall_stats(recent)


def format_duration(seconds: int) -> str:
    """
    Human readable duration: "1h 5m", "3m 20s" or "45s".
    """
    seconds = int(seconds)
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    secs = seconds % 60

    if hours > 0:
        return f"{hours}h {minutes}m"
    if minutes > 0:
        return f"{minutes}m {secs}s"
    return f"{secs}s"
