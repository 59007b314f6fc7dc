from __future__ import annotations

import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from conanreadme.models.conan import SearchResult

_PACKAGE_NAME_RE = re.compile(r"^[a-z0-9][a-z0-9_.+-]*$")
_VERSION_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.+-]*$")


def _validate_package_name(v: str) -> str:
    v = v.strip().lower()
    if not v:
        raise ValueError("package_name must not be empty")
    if len(v) > 100:
        raise ValueError("package_name must not exceed 100 characters")
    if not _PACKAGE_NAME_RE.match(v):
        raise ValueError(f"Invalid package name: {v!r}")
    return v


# ---------------------------------------------------------------------------
# Shared output pieces
# ---------------------------------------------------------------------------


class UsageExample(BaseModel):
    """A fenced code block lifted from a README."""

    model_config = ConfigDict(frozen=True)

    language: str
    title: str
    code: str
    description: str = ""


class InstallationInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    conan: str  # conan install command
    cmake: str  # find_package / target_link_libraries snippet


class BasicInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    version: str
    description: str
    license: str
    author: str
    homepage: str
    topics: tuple[str, ...] = ()


class RepositoryInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: str = "git"
    url: str


# ---------------------------------------------------------------------------
# search_packages_from_conan
# ---------------------------------------------------------------------------


class SearchPackagesInput(BaseModel):
    query: str = Field(max_length=200)
    limit: int = Field(default=20, ge=1, le=100)

    @field_validator("query")
    @classmethod
    def validate_query(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("query must not be empty")
        return v


class SearchPackagesOutput(BaseModel):
    model_config = ConfigDict(frozen=True)

    query: str
    results: tuple[SearchResult, ...]
    total_count: int
    cached: bool = False


# ---------------------------------------------------------------------------
# get_package_info_from_conan
# ---------------------------------------------------------------------------


class GetPackageInfoInput(BaseModel):
    package_name: str
    include_dependencies: bool = True
    include_options: bool = False

    @field_validator("package_name")
    @classmethod
    def validate_package_name(cls, v: str) -> str:
        return _validate_package_name(v)


class GetPackageInfoOutput(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    exists: bool
    latest_version: str | None = None
    description: str = ""
    license: str = ""
    author: str = ""
    homepage: str = ""
    topics: tuple[str, ...] = ()
    versions: tuple[str, ...] = ()
    dependencies: tuple[str, ...] | None = None
    options: dict[str, tuple[Any, ...]] | None = None


# ---------------------------------------------------------------------------
# get_readme_from_conan
# ---------------------------------------------------------------------------


class GetPackageReadmeInput(BaseModel):
    package_name: str
    version: str = "latest"
    include_examples: bool = True

    @field_validator("package_name")
    @classmethod
    def validate_package_name(cls, v: str) -> str:
        return _validate_package_name(v)

    @field_validator("version")
    @classmethod
    def validate_version(cls, v: str) -> str:
        v = v.strip()
        if not v or v.lower() == "latest":
            return "latest"
        if len(v) > 100 or not _VERSION_RE.match(v):
            raise ValueError(f"Invalid version: {v!r}")
        return v


class GetPackageReadmeOutput(BaseModel):
    model_config = ConfigDict(frozen=True)

    package_name: str
    version: str
    exists: bool
    description: str = ""
    readme_content: str = ""
    usage_examples: tuple[UsageExample, ...] = ()
    installation: InstallationInfo | None = None
    basic_info: BasicInfo | None = None
    repository: RepositoryInfo | None = None
