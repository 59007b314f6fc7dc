"""Process-wide application state, built once by the server lifespan."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import httpx

    from conanreadme.cache import TtlCache
    from conanreadme.conan_center import ConanCenterClient
    from conanreadme.config import Settings
    from conanreadme.github import GitHubClient


@dataclass
class AppState:
    """Everything a tool handler needs, passed in explicitly.

    Tests build their own instance with an isolated cache and mocked HTTP.
    """

    settings: Settings
    cache: TtlCache
    conan: ConanCenterClient
    github: GitHubClient
    http_client: httpx.AsyncClient | None = None
