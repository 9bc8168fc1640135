"""Sync client - HTTP client for the planner API."""

import logging

import requests

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10


class SyncError(Exception):
    """Raised when a sync request fails."""

    pass


class PlannerAPIClient:
    """
    HTTP client for the planner backend.

    Every request is scoped by the X-User-ID header. No business logic -
    just I/O.
    """

    def __init__(
        self,
        base_url: str,
        user_id: str,
        session: requests.Session | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.base_url = base_url.rstrip("/")
        self.user_id = user_id
        self.timeout = timeout
        self._session = session or requests.Session()

    def _request(self, method: str, endpoint: str, **kwargs) -> requests.Response:
        """Make a user-scoped request, raising SyncError on any failure."""
        headers = {"Content-Type": "application/json", "X-User-ID": self.user_id}
        url = f"{self.base_url}{endpoint}"
        logger.debug(f"{method} {url}")
        try:
            resp = self._session.request(method, url, headers=headers, timeout=self.timeout, **kwargs)
            resp.raise_for_status()
        except requests.RequestException as e:
            raise SyncError(f"{method} {endpoint} failed: {e}") from e
        return resp

    def _json(self, resp: requests.Response):
        try:
            return resp.json()
        except ValueError as e:
            raise SyncError(f"Invalid JSON from {resp.url}: {e}") from e

    def fetch_items(self, data_type: str) -> list:
        """GET /api/<data_type>."""
        data = self._json(self._request("GET", f"/api/{data_type}"))
        if not isinstance(data, list):
            raise SyncError(f"Expected a list of {data_type}, got {type(data).__name__}")
        return data

    def push_items(self, data_type: str, items: list) -> dict:
        """POST /api/<data_type> with the whole collection."""
        return self._json(self._request("POST", f"/api/{data_type}", json=items))

    def export_backup(self) -> dict:
        return self._json(self._request("GET", "/api/backup"))

    def health(self) -> dict:
        return self._json(self._request("GET", "/api/health"))
