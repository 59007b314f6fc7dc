from __future__ import annotations

from conanreadme.models.cache import CacheEntry
from conanreadme.models.conan import (
    RecipeDetails,
    RecipeInfo,
    RecipeVersion,
    SearchResponse,
    SearchResult,
)
from conanreadme.models.tools import (
    BasicInfo,
    GetPackageInfoInput,
    GetPackageInfoOutput,
    GetPackageReadmeInput,
    GetPackageReadmeOutput,
    InstallationInfo,
    RepositoryInfo,
    SearchPackagesInput,
    SearchPackagesOutput,
    UsageExample,
)

__all__ = [
    # cache
    "CacheEntry",
    # conan
    "RecipeVersion",
    "RecipeInfo",
    "RecipeDetails",
    "SearchResult",
    "SearchResponse",
    # tools
    "UsageExample",
    "InstallationInfo",
    "BasicInfo",
    "RepositoryInfo",
    "SearchPackagesInput",
    "SearchPackagesOutput",
    "GetPackageInfoInput",
    "GetPackageInfoOutput",
    "GetPackageReadmeInput",
    "GetPackageReadmeOutput",
]
