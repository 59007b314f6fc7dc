from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class RecipeVersion(BaseModel):
    """One entry of a recipe's ``config.yml`` ``versions`` mapping."""

    folder: str = "all"  # Recipe folder inside recipes/<name>/


class RecipeInfo(BaseModel):
    """Recipe-level metadata for a Conan Center package."""

    name: str
    latest_version: str
    versions: dict[str, RecipeVersion]
    description: str = ""
    license: str = ""
    author: str = ""
    homepage: str = ""
    topics: list[str] = []


class RecipeDetails(BaseModel):
    """Metadata for a single version, parsed from its conanfile.py."""

    name: str
    version: str
    description: str = ""
    license: str = ""
    author: str = ""
    homepage: str = ""
    topics: list[str] = []
    requires: list[str] | None = None
    options: dict[str, list[Any]] | None = None
    settings: list[str] | None = None
    generators: list[str] | None = None


class SearchResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    url: str


class SearchResponse(BaseModel):
    results: list[SearchResult]
    total_count: int
