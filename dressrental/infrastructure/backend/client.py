from __future__ import annotations

import logging
from typing import Any

import httpx

from dressrental.application.exceptions import BackendUpstreamError
from dressrental.core.config import settings


class BackendClient:
    """Thin JSON client for the back-office REST API."""

    def __init__(
        self,
        base_url: str | None = None,
        api_token: str | None = None,
        timeout: float | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self._base_url = (base_url or settings.BACKEND_BASE_URL or "").rstrip("/")
        self._api_token = api_token if api_token is not None else settings.BACKEND_API_TOKEN
        self._client = client or httpx.Client(timeout=timeout or settings.BACKEND_TIMEOUT_SECONDS)
        self._logger = logging.getLogger(__name__)

        if not self._base_url:
            raise ValueError("BACKEND_BASE_URL is required for the back-office API")

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._api_token:
            headers["Authorization"] = f"Bearer {self._api_token}"
        return headers

    def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
        error_cls: type[BackendUpstreamError] = BackendUpstreamError,
        not_found_ok: bool = False,
    ) -> httpx.Response | None:
        """Send a request. Transport failures and error statuses are raised as error_cls.
        With not_found_ok, a 404 returns None instead."""
        url = f"{self._base_url}{path}"
        try:
            resp = self._client.request(method, url, params=params, json=json, headers=self._headers())
        except httpx.HTTPError as e:
            self._logger.error("Backend unreachable", extra={"error": str(e), "reason": path})
            raise error_cls(f"{method} {path} failed: {e}") from e

        if resp.status_code == 404 and not_found_ok:
            return None
        if resp.status_code >= 400:
            try:
                body = resp.json()
                message = body.get("message") or body.get("error") if isinstance(body, dict) else None
            except ValueError:
                message = None
            self._logger.error(
                "Backend request failed",
                extra={
                    "status": resp.status_code,
                    "reason": path,
                    "error": message or resp.text[:200],
                },
            )
            raise error_cls(f"{method} {path} returned {resp.status_code}: {message or resp.text[:200]}")
        return resp

    def get_json(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        error_cls: type[BackendUpstreamError] = BackendUpstreamError,
        not_found_ok: bool = False,
    ) -> Any:
        resp = self.request("GET", path, params=params, error_cls=error_cls, not_found_ok=not_found_ok)
        if resp is None:
            return None
        return _decode(resp, path, error_cls)

    def post_json(
        self,
        path: str,
        payload: dict[str, Any],
        error_cls: type[BackendUpstreamError] = BackendUpstreamError,
    ) -> Any:
        resp = self.request("POST", path, json=payload, error_cls=error_cls)
        return _decode(resp, path, error_cls)


def _decode(resp: httpx.Response, path: str, error_cls: type[BackendUpstreamError]) -> Any:
    if not resp.content:
        return None
    try:
        return resp.json()
    except ValueError as e:
        raise error_cls(f"{path} returned a non-JSON body") from e


def extract_array(body: Any) -> list[Any]:
    """Accept a bare list, or a list wrapped in `data` or `items`."""
    if isinstance(body, list):
        return body
    if isinstance(body, dict):
        for key in ("data", "items"):
            value = body.get(key)
            if isinstance(value, list):
                return value
    return []


def extract_object(body: Any) -> dict[str, Any] | None:
    if isinstance(body, dict):
        inner = body.get("data")
        if isinstance(inner, dict):
            return inner
        return body
    return None
