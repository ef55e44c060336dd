"""
frontend/api_client.py

HTTP client used by the Streamlit UI to call the SheetLoader API.
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from app.config import FrontendSettings

logger = logging.getLogger(__name__)


class ApiClientError(RuntimeError):
    """
    Raised when the API is unreachable or answers with an error status.
    """

    def __init__(self, message: str, *, status_code: int | None = None, error: str | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.error = error


class SheetLoaderClient:
    """
    Thin wrapper over the validate / insert / upload endpoints.
    """

    def __init__(
        self,
        *,
        settings: FrontendSettings,
        session: requests.Session | None = None,
    ) -> None:
        self._base_url = settings.api_base_url.rstrip("/")
        self._timeout_seconds = settings.timeout_seconds
        self._session = session or requests.Session()

    def validate(self, *, file_name: str, content: bytes, content_type: str | None = None) -> dict[str, Any]:
        return self._post_file("/api/validate", file_name=file_name, content=content, content_type=content_type)

    def insert(self, *, session_id: str) -> dict[str, Any]:
        return self._request("POST", "/api/insert", json={"sessionId": session_id})

    def upload(self, *, file_name: str, content: bytes, content_type: str | None = None) -> dict[str, Any]:
        return self._post_file("/api/upload", file_name=file_name, content=content, content_type=content_type)

    def _post_file(
        self,
        path: str,
        *,
        file_name: str,
        content: bytes,
        content_type: str | None,
    ) -> dict[str, Any]:
        files = {"file": (file_name, content, content_type or "application/octet-stream")}
        return self._request("POST", path, files=files)

    def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        url = f"{self._base_url}{path}"
        try:
            response = self._session.request(method, url, timeout=self._timeout_seconds, **kwargs)
        except requests.RequestException as exc:
            logger.warning("API request %s %s failed: %s", method, url, exc)
            raise ApiClientError(f"Could not reach the API at {self._base_url}.") from exc

        try:
            body = response.json()
        except ValueError:
            body = None

        if response.status_code >= 400:
            message, error = _error_details(body, fallback=response.reason or "Request failed")
            raise ApiClientError(message, status_code=response.status_code, error=error)
        if not isinstance(body, dict):
            raise ApiClientError("API returned a non-object JSON payload.", status_code=response.status_code)
        return body


def _error_details(body: Any, *, fallback: str) -> tuple[str, str | None]:
    detail = body.get("detail") if isinstance(body, dict) else None
    if isinstance(detail, dict):
        return str(detail.get("message") or fallback), detail.get("error")
    if isinstance(detail, str):
        return detail, None
    return fallback, None
