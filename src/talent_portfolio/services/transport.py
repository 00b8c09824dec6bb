"""HTTP boundary between the sync engine and the portfolio API.

``PortfolioTransport`` is the seam the sync engine depends on. The shipped
implementation talks to the API with ``httpx``; tests can pass any object
with the same two methods, or an ``httpx.Client`` that routes to the app in
process (FastAPI's ``TestClient`` is one).
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Protocol

import httpx

from talent_portfolio.constants.portfolio_constants import GENERIC_SYNC_FAILURE

logger = logging.getLogger(__name__)

__all__ = [
    "HttpPortfolioTransport",
    "PortfolioTransport",
    "PortfolioTransportError",
    "SyncPayload",
    "create_http_transport",
    "get_api_base_url",
]

DEFAULT_API_URL = "http://localhost:8000"
LIST_PATH = "/api/profile/{profile_id}/portfolio"
SYNC_PATH = "/api/profile/sync-portfolio"


class PortfolioTransportError(Exception):
    """Raised when the API rejects a request or cannot be reached.

    Attributes:
        message: Human readable summary from the server, or a generic one.
        errors: Field path to messages, when the server sent them.
        status_code: HTTP status, or None for network failures.
    """

    def __init__(
        self,
        message: str,
        errors: dict[str, list[str]] | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.errors = errors
        self.status_code = status_code


@dataclass(slots=True)
class SyncPayload:
    """Multipart body of one bulk sync request.

    Attributes:
        profile_id: Profile the portfolio belongs to.
        fields: Plain form fields, keyed like ``portfolio[0][priority]``.
        files: File parts as ``(filename, bytes, content_type)``.
    """

    profile_id: int
    fields: dict[str, str] = field(default_factory=dict)
    files: dict[str, tuple[str, bytes, str]] = field(default_factory=dict)


class PortfolioTransport(Protocol):
    def fetch_portfolio(self, profile_id: int) -> list[dict[str, Any]]: ...

    def submit_sync(self, payload: SyncPayload) -> str: ...


def get_api_base_url() -> str:
    """Return the API base URL, allowing overrides via environment variable."""
    return os.getenv("PORTFOLIO_API_URL") or DEFAULT_API_URL


class HttpPortfolioTransport:
    """``PortfolioTransport`` backed by an ``httpx.Client``."""

    def __init__(self, client: httpx.Client) -> None:
        self._client = client

    def close(self) -> None:
        self._client.close()

    def fetch_portfolio(self, profile_id: int) -> list[dict[str, Any]]:
        """Return the raw item list for ``profile_id``, in server order."""
        response = self._send(
            "GET",
            LIST_PATH.format(profile_id=profile_id),
            headers={"X-Profile-Id": str(profile_id)},
        )
        body = _json_or_empty(response)
        data = body.get("data") if isinstance(body, dict) else None
        return list(data or [])

    def submit_sync(self, payload: SyncPayload) -> str:
        """Send one bulk sync request and return the server's message.

        The body is multipart even when no file is attached; plain fields
        go out as parts without a filename.
        """
        response = self._send(
            "POST",
            SYNC_PATH,
            files=_multipart_parts(payload),
            headers={"X-Profile-Id": str(payload.profile_id)},
        )
        body = _json_or_empty(response)
        return str(body.get("message") or "") if isinstance(body, dict) else ""

    def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            response = self._client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("Portfolio request %s %s failed: %s", method, url, exc)
            raise PortfolioTransportError(GENERIC_SYNC_FAILURE) from exc

        if response.is_error:
            raise _error_from_response(response)
        return response


def create_http_transport(
    base_url: str | None = None,
    token: str | None = None,
    timeout: float = 30.0,
) -> HttpPortfolioTransport:
    """Build a transport from explicit arguments or the environment.

    Args:
        base_url: API root; defaults to ``PORTFOLIO_API_URL``.
        token: Bearer token; defaults to ``PORTFOLIO_API_TOKEN``.
        timeout: Request timeout in seconds.
    """
    headers: dict[str, str] = {"Accept": "application/json"}
    auth_token = token or os.getenv("PORTFOLIO_API_TOKEN")
    if auth_token:
        headers["Authorization"] = f"Bearer {auth_token}"
    client = httpx.Client(base_url=base_url or get_api_base_url(), headers=headers, timeout=timeout)
    return HttpPortfolioTransport(client)


def _multipart_parts(payload: SyncPayload) -> list[tuple[str, tuple[Any, ...]]]:
    parts: list[tuple[str, tuple[Any, ...]]] = [
        (name, (None, value)) for name, value in payload.fields.items()
    ]
    parts.extend((name, file_part) for name, file_part in payload.files.items())
    return parts


def _json_or_empty(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return {}


def _error_from_response(response: httpx.Response) -> PortfolioTransportError:
    """Turn an error response into a transport error.

    The API answers ``{"message", "errors"}``; framework errors use
    ``{"detail"}`` and proxies sometimes ``{"error"}``.
    """
    body = _json_or_empty(response)
    message = GENERIC_SYNC_FAILURE
    errors: dict[str, list[str]] | None = None
    if isinstance(body, dict):
        for key in ("message", "error", "detail"):
            value = body.get(key)
            if isinstance(value, str) and value:
                message = value
                break
        raw_errors = body.get("errors")
        if isinstance(raw_errors, dict):
            errors = {
                str(field_name): [str(msg) for msg in messages]
                if isinstance(messages, list)
                else [str(messages)]
                for field_name, messages in raw_errors.items()
            }
    return PortfolioTransportError(message, errors=errors or None, status_code=response.status_code)
