"""Unit-specific fixtures: in-memory stand-ins for the upstream clients."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from conanreadme.errors import ConanReadmeError, ErrorCode
from conanreadme.models.conan import (
    RecipeDetails,
    RecipeInfo,
    SearchResponse,
    SearchResult,
)
from conanreadme.state import AppState

if TYPE_CHECKING:
    from conanreadme.cache import TtlCache
    from conanreadme.config import Settings


class FakeConan:
    """Recipe registry backed by a dict, counting upstream calls."""

    def __init__(self) -> None:
        self.recipes: dict[str, RecipeInfo] = {}
        self.details: dict[tuple[str, str], RecipeDetails] = {}
        self.calls: list[str] = []
        self.error: ConanReadmeError | None = None

    async def search_packages(self, query: str, limit: int = 20) -> SearchResponse:
        self.calls.append(f"search:{query}:{limit}")
        if self.error is not None:
            raise self.error
        matches = [n for n in sorted(self.recipes) if query.lower() in n]
        return SearchResponse(
            results=[
                SearchResult(name=n, description=f"Conan package for {n}", url=f"https://x/{n}")
                for n in matches[:limit]
            ],
            total_count=len(matches),
        )

    async def get_recipe_info(self, name: str) -> RecipeInfo:
        self.calls.append(f"info:{name}")
        if self.error is not None:
            raise self.error
        if name not in self.recipes:
            raise ConanReadmeError(ErrorCode.PACKAGE_NOT_FOUND, f"Package '{name}' not found")
        return self.recipes[name]

    async def get_recipe_details(
        self, name: str, version: str, *, info: RecipeInfo | None = None
    ) -> RecipeDetails | None:
        self.calls.append(f"details:{name}:{version}")
        return self.details.get((name, version))


class FakeGitHub:
    def __init__(self) -> None:
        self.readmes: dict[str, str] = {}
        self.existing: set[str] = set()
        self.calls: list[str] = []

    async def get_readme_content(self, repo_url: str) -> str | None:
        self.calls.append(f"readme:{repo_url}")
        return self.readmes.get(repo_url)

    async def check_repository_exists(self, repo_url: str) -> bool:
        self.calls.append(f"exists:{repo_url}")
        return repo_url in self.existing or repo_url in self.readmes


@pytest.fixture()
def fake_conan() -> FakeConan:
    return FakeConan()


@pytest.fixture()
def fake_github() -> FakeGitHub:
    return FakeGitHub()


@pytest.fixture()
def app_state(
    settings: Settings, cache: TtlCache, fake_conan: FakeConan, fake_github: FakeGitHub
) -> AppState:
    return AppState(
        settings=settings,
        cache=cache,
        conan=fake_conan,  # type: ignore[arg-type]
        github=fake_github,  # type: ignore[arg-type]
    )
