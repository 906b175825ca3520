"""
Tests for the session, statistics and data-wipe endpoints.
"""
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

from sqlalchemy.exc import OperationalError

from main import app
from posturepal.core.database import get_db
from posturepal.models import PostureIssue, PostureSession, ScoreSample
from posturepal.utils.auth import create_access_token
from tests.conftest import register, session_payload

START = datetime(2024, 3, 4, 9, 0, tzinfo=timezone.utc)


def create(client, headers, **kwargs):
    response = client.post("/api/sessions", json=session_payload(**kwargs), headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["session"]


class TestCreateSession:

    def test_create(self, client, auth_headers):
        issue = {
            "type": "forward_head",
            "severity": "moderate",
            "message": "Head is tilted forward",
            "timestamp": START.isoformat(),
        }
        response = client.post(
            "/api/sessions",
            json=session_payload(issues=[issue]),
            headers={**auth_headers, "User-Agent": "posturepal-test", "sec-ch-ua-platform": '"Linux"'},
        )

        assert response.status_code == 201
        session = response.json()["session"]
        assert session["id"] > 0
        assert session["total_time"] == 600
        assert session["good_posture_time"] == 360
        assert session["average_score"] == 80
        assert [s["score"] for s in session["scores"]] == [80, 60, 100]
        assert session["issues"][0]["type"] == "forward_head"
        assert session["user_agent"] == "posturepal-test"
        assert session["platform"] == "Linux"

    def test_average_recomputed_from_scores(self, client, auth_headers):
        payload = session_payload(scores=(70, 71))
        payload["average_score"] = 12

        response = client.post("/api/sessions", json=payload, headers=auth_headers)

        assert response.json()["session"]["average_score"] == 71

    def test_average_kept_without_scores(self, client, auth_headers):
        payload = session_payload(scores=())
        payload["average_score"] = 64

        response = client.post("/api/sessions", json=payload, headers=auth_headers)

        assert response.json()["session"]["average_score"] == 64

    def test_average_from_good_time_share(self, client, auth_headers):
        session = create(client, auth_headers, minutes=10, good_minutes=6, scores=())
        assert session["average_score"] == 60

    def test_total_time_derived_from_bounds(self, client, auth_headers):
        payload = session_payload(scores=())
        payload["total_time"] = 0
        payload["good_posture_time"] = 0

        response = client.post("/api/sessions", json=payload, headers=auth_headers)

        assert response.json()["session"]["total_time"] == 600

    def test_good_time_above_total_rejected(self, client, auth_headers):
        payload = session_payload(minutes=5, good_minutes=6)

        response = client.post("/api/sessions", json=payload, headers=auth_headers)

        assert response.status_code == 422
        assert response.json()["error"] == "Validation failed"

    def test_end_before_start_rejected(self, client, auth_headers):
        payload = session_payload()
        payload["end_time"] = (START - timedelta(minutes=1)).isoformat()

        response = client.post("/api/sessions", json=payload, headers=auth_headers)

        assert response.status_code == 422

    def test_naive_end_time_is_read_as_utc(self, client, auth_headers):
        payload = session_payload(scores=())
        payload["total_time"] = 0
        payload["good_posture_time"] = 0
        payload["end_time"] = "2024-03-04T09:10:00"

        response = client.post("/api/sessions", json=payload, headers=auth_headers)

        assert response.status_code == 201
        assert response.json()["session"]["total_time"] == 600

    def test_naive_end_before_aware_start_rejected(self, client, auth_headers):
        payload = session_payload()
        payload["end_time"] = "2024-03-04T08:00:00"

        response = client.post("/api/sessions", json=payload, headers=auth_headers)

        assert response.status_code == 422
        assert response.json()["success"] is False

    def test_score_out_of_range_rejected(self, client, auth_headers):
        response = client.post("/api/sessions", json=session_payload(scores=(101,)), headers=auth_headers)
        assert response.status_code == 422


class TestListSessions:

    def test_pagination_newest_first(self, client, auth_headers):
        for hours in range(5):
            create(client, auth_headers, start=START + timedelta(hours=hours))

        response = client.get("/api/sessions", params={"page": 2, "limit": 2}, headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["pagination"] == {"total": 5, "page": 2, "limit": 2, "pages": 3}
        starts = [s["start_time"] for s in data["sessions"]]
        assert len(starts) == 2
        assert starts == sorted(starts, reverse=True)
        assert starts[0].startswith("2024-03-04T11:00")

    def test_empty_list(self, client, auth_headers):
        data = client.get("/api/sessions", headers=auth_headers).json()

        assert data["sessions"] == []
        assert data["pagination"]["total"] == 0
        assert data["pagination"]["pages"] == 0

    def test_invalid_page(self, client, auth_headers):
        response = client.get("/api/sessions", params={"page": 0}, headers=auth_headers)
        assert response.status_code == 422

    def test_sessions_are_per_user(self, client, auth_headers):
        create(client, auth_headers)
        other = register(client, email="grace@example.com", name="Grace")
        other_headers = {"Authorization": f"Bearer {other['token']}"}

        assert client.get("/api/sessions", headers=other_headers).json()["sessions"] == []

    def test_range(self, client, auth_headers):
        for hours in range(3):
            create(client, auth_headers, start=START + timedelta(hours=hours))

        start = (START + timedelta(minutes=30)).isoformat()
        end = (START + timedelta(hours=2, minutes=30)).isoformat()
        response = client.get(f"/api/sessions/range/{start}/{end}", headers=auth_headers)

        assert response.status_code == 200
        assert len(response.json()["sessions"]) == 2

    def test_range_mixing_naive_and_aware_bounds(self, client, auth_headers):
        create(client, auth_headers)

        response = client.get(
            "/api/sessions/range/2024-03-04T09:00:00/2024-03-05T09:00:00Z", headers=auth_headers
        )
        reversed_response = client.get(
            "/api/sessions/range/2024-03-05T09:00:00/2024-03-04T09:00:00Z", headers=auth_headers
        )

        assert response.status_code == 200
        assert len(response.json()["sessions"]) == 1
        assert reversed_response.status_code == 400
        assert reversed_response.json()["success"] is False

    def test_range_end_before_start(self, client, auth_headers):
        start = START.isoformat()
        end = (START - timedelta(days=1)).isoformat()

        response = client.get(f"/api/sessions/range/{start}/{end}", headers=auth_headers)

        assert response.status_code == 400


class TestSingleSession:

    def test_get(self, client, auth_headers):
        created = create(client, auth_headers)

        response = client.get(f"/api/sessions/{created['id']}", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["session"]["id"] == created["id"]

    def test_get_missing(self, client, auth_headers):
        response = client.get("/api/sessions/9999", headers=auth_headers)

        assert response.status_code == 404
        assert response.json() == {"success": False, "error": "Session not found"}

    def test_other_users_session_is_not_found(self, client, auth_headers):
        created = create(client, auth_headers)
        other = register(client, email="grace@example.com", name="Grace")

        response = client.get(
            f"/api/sessions/{created['id']}",
            headers={"Authorization": f"Bearer {other['token']}"},
        )

        assert response.status_code == 404

    def test_delete_twice(self, client, auth_headers):
        created = create(client, auth_headers)

        first = client.delete(f"/api/sessions/{created['id']}", headers=auth_headers)
        second = client.delete(f"/api/sessions/{created['id']}", headers=auth_headers)

        assert first.status_code == 200
        assert first.json() == {"success": True, "message": "Session deleted"}
        assert second.status_code == 404


class TestStats:

    def test_empty_stats(self, client, auth_headers):
        stats = client.get("/api/stats", headers=auth_headers).json()["stats"]

        assert stats == {
            "total_sessions": 0,
            "total_time": 0,
            "total_good_posture_time": 0,
            "average_score": 0,
            "best_score": 0,
            "worst_score": 0,
            "posture_percentage": 0,
        }

    def test_stats(self, client, auth_headers):
        create(client, auth_headers, minutes=1, good_minutes=1, scores=(80,))
        create(client, auth_headers, minutes=2, good_minutes=1, scores=(60,), start=START + timedelta(hours=1))
        create(client, auth_headers, minutes=3, good_minutes=1, scores=(100,), start=START + timedelta(hours=2))

        stats = client.get("/api/stats", headers=auth_headers).json()["stats"]

        assert stats["total_sessions"] == 3
        assert stats["total_time"] == 360
        assert stats["total_good_posture_time"] == 180
        assert stats["average_score"] == 80
        assert stats["best_score"] == 100
        assert stats["worst_score"] == 60
        assert stats["posture_percentage"] == 50

    def test_weekly_stats(self, client, auth_headers):
        now = datetime.now(timezone.utc)
        create(client, auth_headers, start=now - timedelta(days=1))
        create(client, auth_headers, start=now - timedelta(days=30))

        weekly = client.get("/api/stats/weekly", headers=auth_headers).json()["stats"]
        overall = client.get("/api/stats", headers=auth_headers).json()["stats"]

        assert weekly["total_sessions"] == 1
        assert overall["total_sessions"] == 2


class TestDeleteAllData:

    def test_wipe(self, client, auth_headers):
        create(client, auth_headers)
        create(client, auth_headers, start=START + timedelta(hours=1))

        response = client.delete("/api/data", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["message"] == "All data deleted"
        assert client.get("/api/sessions", headers=auth_headers).json()["pagination"]["total"] == 0
        assert client.get("/api/stats", headers=auth_headers).json()["stats"]["total_sessions"] == 0

    def test_wipe_keeps_account(self, client, auth_headers):
        client.delete("/api/data", headers=auth_headers)
        assert client.get("/api/auth/me", headers=auth_headers).status_code == 200

    def test_wipe_removes_issues_and_scores(self, client, auth_headers, db_session):
        issue = {"type": "leaning", "severity": "mild", "message": "Leaning to one side"}
        create(client, auth_headers, issues=[issue])
        other = register(client, email="grace@example.com", name="Grace")
        other_headers = {"Authorization": f"Bearer {other['token']}"}
        create(client, other_headers, scores=(90,))

        client.delete("/api/data", headers=auth_headers)

        assert db_session.query(PostureSession).count() == 1
        assert db_session.query(PostureIssue).count() == 0
        assert db_session.query(ScoreSample).count() == 1
        assert client.get("/api/stats", headers=other_headers).json()["stats"]["total_sessions"] == 1


class TestStorageFailure:

    def test_database_error_returns_503(self, client):
        broken_db = MagicMock()
        broken_db.query.side_effect = OperationalError("SELECT", {}, Exception("database is locked"))

        def override_get_db():
            yield broken_db

        app.dependency_overrides[get_db] = override_get_db
        token = create_access_token(1)

        response = client.get("/api/sessions", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 503
        assert response.json() == {"success": False, "error": "Storage unavailable"}
