"""Shared HTTP plumbing for the upstream clients."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
import structlog

from conanreadme.errors import ConanReadmeError, ErrorCode

if TYPE_CHECKING:
    from conanreadme.config import GitHubSettings, HttpSettings

log = structlog.get_logger()


def build_http_client(
    http_settings: HttpSettings,
    github_settings: GitHubSettings | None = None,
) -> httpx.AsyncClient:
    """Create the single AsyncClient shared by every upstream client."""
    headers = {"User-Agent": http_settings.user_agent}
    if github_settings is not None and github_settings.token:
        headers["Authorization"] = f"Bearer {github_settings.token}"
    return httpx.AsyncClient(
        headers=headers,
        timeout=httpx.Timeout(http_settings.timeout_seconds),
        follow_redirects=True,
    )


def is_rate_limited(response: httpx.Response) -> bool:
    if response.status_code == 429:
        return True
    return response.status_code == 403 and response.headers.get("x-ratelimit-remaining") == "0"


async def fetch(
    client: httpx.AsyncClient,
    url: str,
    *,
    not_found_message: str,
    headers: dict[str, str] | None = None,
) -> httpx.Response:
    """GET ``url`` and map failures onto ``ConanReadmeError``.

    404 -> PACKAGE_NOT_FOUND, exhausted rate limit -> RATE_LIMITED,
    anything else non-2xx or a transport error -> UPSTREAM_FETCH_FAILED.
    """
    try:
        response = await client.get(url, headers=headers)
    except httpx.HTTPError as exc:
        log.warning("upstream_request_error", url=url, error=str(exc))
        raise ConanReadmeError(
            ErrorCode.UPSTREAM_FETCH_FAILED,
            f"Request to {url} failed: {exc}",
            recoverable=True,
        ) from exc

    if response.status_code == 404:
        raise ConanReadmeError(ErrorCode.PACKAGE_NOT_FOUND, not_found_message)
    if is_rate_limited(response):
        log.warning("upstream_rate_limited", url=url, status_code=response.status_code)
        raise ConanReadmeError(
            ErrorCode.RATE_LIMITED,
            "GitHub API rate limit exceeded; set github.token to raise the limit",
            recoverable=True,
        )
    if not response.is_success:
        log.warning("upstream_http_error", url=url, status_code=response.status_code)
        raise ConanReadmeError(
            ErrorCode.UPSTREAM_FETCH_FAILED,
            f"HTTP {response.status_code} from {url}",
            recoverable=True,
        )
    return response
