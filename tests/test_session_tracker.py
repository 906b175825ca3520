"""
Unit tests for the session accumulator.
"""
from datetime import datetime, timedelta, timezone

import pytest

from posturepal.schemas.posture import IssueType, Severity
from posturepal.services.posture_analyzer import DetectedIssue, PostureSample
from posturepal.services.session_tracker import (
    SessionAlreadyActiveError,
    SessionTracker,
    TrackedSession,
    derive_average_score,
    round_half_up,
)


class FakeClock:
    def __init__(self, start=None):
        self.now = start or datetime(2024, 3, 4, 9, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def tracker(clock):
    return SessionTracker(tick_interval=2, clock=clock)


def good(score=85):
    return PostureSample(is_good=True, score=score)


def poor(score=55):
    issue = DetectedIssue(type=IssueType.SLOUCHING, severity=Severity.MILD, message="Slouching detected")
    return PostureSample(is_good=False, score=score, issues=[issue])


class TestAverageRule:

    def test_mean_of_scores_rounds_half_up(self):
        assert derive_average_score([70, 71], 0, 0) == 71
        assert derive_average_score([80, 60, 100], 0, 0) == 80

    def test_falls_back_to_good_time_share(self):
        assert derive_average_score([], 45, 60) == 75

    def test_zero_without_scores_or_time(self):
        assert derive_average_score([], 0, 0) == 0

    def test_round_half_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(2.49) == 2


class TestTracking:

    def test_start_creates_empty_session(self, tracker, clock):
        session = tracker.start()

        assert tracker.is_active
        assert session.start_time == clock.now
        assert session.total_time == 0
        assert session.good_posture_time == 0
        assert session.average_score == 0
        assert session.end_time is None

    def test_start_twice_raises(self, tracker):
        tracker.start()
        with pytest.raises(SessionAlreadyActiveError):
            tracker.start()

    def test_tick_without_session_is_ignored(self, tracker):
        assert tracker.tick(good()) is None
        assert tracker.history == []

    def test_stop_without_session_returns_none(self, tracker):
        assert tracker.stop() is None

    def test_ticks_accumulate(self, tracker, clock):
        tracker.start()
        for sample in (good(80), poor(60), good(100)):
            clock.advance(2)
            session = tracker.tick(sample)

        assert session.total_time == 6
        assert session.good_posture_time == 4
        assert session.average_score == 80
        assert [record.score for record in session.scores] == [80, 60, 100]
        assert len(session.issues) == 1
        assert session.issues[0].type == IssueType.SLOUCHING

    def test_good_time_never_exceeds_total(self, tracker, clock):
        tracker.start()
        clock.advance(1)
        session = tracker.tick(good())
        assert session.good_posture_time == 1

        session = tracker.tick(good())
        assert session.good_posture_time <= session.total_time

    def test_stop_archives_copy(self, tracker, clock):
        tracker.start()
        clock.advance(2)
        tracker.tick(good(90))
        clock.advance(1)

        finished = tracker.stop()

        assert not tracker.is_active
        assert finished.end_time == clock.now
        assert finished.end_time >= finished.start_time
        assert len(tracker.history) == 1
        assert tracker.history[0] is not finished
        assert tracker.history[0].average_score == 90

    def test_stop_without_ticks_uses_time_share(self, tracker, clock):
        tracker.start()
        clock.advance(30)

        finished = tracker.stop()

        assert finished.scores == []
        assert finished.average_score == 0

    def test_stop_refreshes_total_time(self, tracker, clock):
        tracker.start()
        clock.advance(4)
        tracker.tick(good())
        clock.advance(26)

        finished = tracker.stop()

        assert finished.total_time == 30
        assert finished.total_time == int((finished.end_time - finished.start_time).total_seconds())
        assert finished.good_posture_time <= finished.total_time
        assert finished.to_api_payload()["total_time"] == 30

    def test_restart_after_stop(self, tracker, clock):
        first = tracker.start()
        tracker.stop()
        second = tracker.start()

        assert second.id != first.id
        assert second.scores == []

    def test_clear_history(self, tracker):
        tracker.start()
        tracker.stop()
        tracker.clear_history()
        assert tracker.history == []


class TestTrackedSessionSerialization:

    def test_dict_round_trip(self, tracker, clock):
        tracker.start()
        clock.advance(2)
        tracker.tick(poor(40))
        session = tracker.stop()

        restored = TrackedSession.from_dict(session.to_dict())

        assert restored == session

    def test_api_payload_has_no_client_id(self, tracker):
        tracker.start()
        payload = tracker.stop().to_api_payload()

        assert "id" not in payload
        assert payload["end_time"] is not None
