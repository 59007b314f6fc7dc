"""GitHub client: README text and repository existence.

Both operations answer "absent" (``None`` / ``False``) instead of raising.
A missing README is an ordinary outcome for a package and the caller falls
back to a generated one.
"""

from __future__ import annotations

import base64
import binascii
import re
from typing import TYPE_CHECKING

import httpx
import structlog

if TYPE_CHECKING:
    from conanreadme.config import GitHubSettings

log = structlog.get_logger()

_GITHUB_URL_RE = re.compile(
    r"^https://(?:www\.)?github\.com/(?P<owner>[A-Za-z0-9_.-]+)/(?P<repo>[A-Za-z0-9_.-]+?)"
    r"(?:\.git)?/?(?:[/#?].*)?$"
)

_API_HEADERS = {"Accept": "application/vnd.github+json"}


def parse_github_url(url: str) -> tuple[str, str] | None:
    """Return ``(owner, repo)`` for an https GitHub repository URL, else ``None``."""
    m = _GITHUB_URL_RE.match(url.strip())
    if m is None:
        return None
    return m.group("owner"), m.group("repo")


class GitHubClient:
    def __init__(self, client: httpx.AsyncClient, settings: GitHubSettings) -> None:
        self._client = client
        self._api_url = settings.api_url.rstrip("/")

    async def get_readme_content(self, repo_url: str) -> str | None:
        """Fetch and decode the repository README, or ``None`` if unavailable."""
        parsed = parse_github_url(repo_url)
        if parsed is None:
            log.debug("readme_skipped_non_github", url=repo_url)
            return None
        owner, repo = parsed
        url = f"{self._api_url}/repos/{owner}/{repo}/readme"

        try:
            response = await self._client.get(url, headers=_API_HEADERS)
        except httpx.HTTPError as exc:
            log.warning("readme_fetch_failed", url=url, error=str(exc))
            return None
        if response.status_code == 404:
            log.info("readme_not_found", repository=f"{owner}/{repo}")
            return None
        if not response.is_success:
            log.warning("readme_fetch_failed", url=url, status_code=response.status_code)
            return None

        try:
            payload = response.json()
        except ValueError:
            log.warning("readme_invalid_payload", url=url)
            return None
        if not isinstance(payload, dict) or payload.get("encoding") != "base64":
            log.warning("readme_unsupported_encoding", url=url)
            return None

        try:
            return base64.b64decode(payload.get("content", "")).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError):
            log.warning("readme_decode_failed", url=url)
            return None

    async def check_repository_exists(self, repo_url: str) -> bool:
        parsed = parse_github_url(repo_url)
        if parsed is None:
            return False
        owner, repo = parsed
        url = f"{self._api_url}/repos/{owner}/{repo}"
        try:
            response = await self._client.head(url, headers=_API_HEADERS)
        except httpx.HTTPError as exc:
            log.warning("repository_check_failed", url=url, error=str(exc))
            return False
        return response.is_success
