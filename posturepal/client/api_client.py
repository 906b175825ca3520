"""
HTTP client for the PosturePal API.
All backend communication from the tracking client goes through here.
"""
import logging
from datetime import datetime
from typing import Any, Dict, Optional

import requests

from posturepal.services.session_tracker import TrackedSession

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Request failed. status_code is None when the server was unreachable."""

    def __init__(self, status_code: Optional[int], message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message

    def __str__(self):
        if self.status_code is None:
            return self.message
        return f"[{self.status_code}] {self.message}"


class PosturePalClient:
    """
    Thin wrapper over the REST API. Stores the bearer token after
    register/login and sends it on every call.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        token: Optional[str] = None,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.http = session or requests.Session()

    def _request(self, method: str, endpoint: str, **kwargs) -> Dict[str, Any]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        url = f"{self.base_url}/api{endpoint}"
        try:
            response = self.http.request(method, url, headers=headers, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.error(f"API Error [{endpoint}]: {e}")
            raise ApiError(None, f"Cannot reach {self.base_url}: {e}") from e

        try:
            data = response.json()
        except ValueError:
            data = {}

        if not response.ok:
            message = data.get("error") or data.get("detail") or "API request failed"
            logger.error(f"API Error [{endpoint}]: {response.status_code} {message}")
            raise ApiError(response.status_code, str(message))

        return data

    # Authentication
    def register(self, name: str, email: str, password: str, **profile: Any) -> Dict[str, Any]:
        data = self._request("POST", "/auth/register", json={
            "name": name, "email": email, "password": password, **profile
        })
        self.token = data["token"]
        return data["user"]

    def login(self, email: str, password: str) -> Dict[str, Any]:
        data = self._request("POST", "/auth/login", json={"email": email, "password": password})
        self.token = data["token"]
        return data["user"]

    def logout(self) -> None:
        self.token = None

    def me(self) -> Dict[str, Any]:
        return self._request("GET", "/auth/me")["user"]

    # Profile
    def get_profile(self) -> Optional[Dict[str, Any]]:
        return self._request("GET", "/profile")["profile"]

    def update_profile(self, **fields: Any) -> Dict[str, Any]:
        return self._request("PUT", "/profile", json=fields)["profile"]

    # Settings
    def get_settings(self) -> Dict[str, Any]:
        return self._request("GET", "/settings")["settings"]

    def update_settings(self, **fields: Any) -> Dict[str, Any]:
        return self._request("PUT", "/settings", json=fields)["settings"]

    # Sessions
    def create_session(self, session: TrackedSession) -> Dict[str, Any]:
        return self._request("POST", "/sessions", json=session.to_api_payload())["session"]

    def list_sessions(self, page: int = 1, limit: int = 50) -> Dict[str, Any]:
        return self._request("GET", "/sessions", params={"page": page, "limit": limit})

    def get_sessions_in_range(self, start: datetime, end: datetime) -> list:
        endpoint = f"/sessions/range/{start.isoformat()}/{end.isoformat()}"
        return self._request("GET", endpoint)["sessions"]

    def get_session(self, session_id: int) -> Dict[str, Any]:
        return self._request("GET", f"/sessions/{session_id}")["session"]

    def delete_session(self, session_id: int) -> bool:
        """
        Returns False when the server reports the session as not found.
        """
        try:
            self._request("DELETE", f"/sessions/{session_id}")
        except ApiError as e:
            if e.status_code == 404:
                return False
            raise
        return True

    # Statistics / data
    def get_stats(self) -> Dict[str, Any]:
        return self._request("GET", "/stats")["stats"]

    def get_weekly_stats(self) -> Dict[str, Any]:
        return self._request("GET", "/stats/weekly")["stats"]

    def delete_all_data(self) -> None:
        self._request("DELETE", "/data")
