"""
Unit tests for the mock posture detector.
"""
import random

import pytest

from posturepal.schemas.posture import Severity
from posturepal.services.posture_analyzer import (
    GOOD_SCORE,
    MockPostureAnalyzer,
    calculate_severity,
)


@pytest.fixture
def analyzer():
    return MockPostureAnalyzer(rng=random.Random(42))


class TestMockPostureAnalyzer:

    def test_samples_are_consistent(self, analyzer):
        for _ in range(200):
            sample = analyzer.analyze_frame()

            assert 0 <= sample.score <= 100
            assert 0.7 <= sample.confidence <= 1.0
            if sample.is_good:
                assert sample.issues == []
            else:
                assert len(sample.issues) in (1, 2)

    def test_good_scores_raise_no_issues(self, analyzer):
        assert analyzer.detect_issues(GOOD_SCORE) == []
        assert analyzer.detect_issues(95) == []

    def test_issue_count_by_score(self, analyzer):
        assert len(analyzer.detect_issues(65)) == 1
        assert len(analyzer.detect_issues(45)) == 2

    def test_issue_messages_are_filled(self, analyzer):
        for issue in analyzer.detect_issues(20):
            assert issue.message
            assert issue.severity == Severity.SEVERE

    def test_sensitivity_is_clamped(self, analyzer):
        analyzer.set_sensitivity(5)
        assert analyzer.sensitivity == 1.0
        analyzer.set_sensitivity(0)
        assert analyzer.sensitivity == 0.1

    def test_seeded_analyzers_agree(self):
        first = MockPostureAnalyzer(rng=random.Random(7))
        second = MockPostureAnalyzer(rng=random.Random(7))

        assert [first.analyze_frame().score for _ in range(5)] == [second.analyze_frame().score for _ in range(5)]


@pytest.mark.parametrize("score, severity", [
    (65, Severity.MILD),
    (50, Severity.MILD),
    (49, Severity.MODERATE),
    (30, Severity.MODERATE),
    (29, Severity.SEVERE),
])
def test_calculate_severity(score, severity):
    assert calculate_severity(score) == severity
