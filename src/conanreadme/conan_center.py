"""Conan Center registry client.

Conan Center recipes live in the ``conan-center-index`` GitHub repository:

    recipes/<name>/config.yml            versions -> recipe folder
    recipes/<name>/<folder>/conanfile.py  description, license, requires, ...

The recipe listing comes from the GitHub contents API; config.yml and
conanfile.py are read from the raw content host. Conanfiles are parsed with
``ast`` and never executed.
"""

from __future__ import annotations

import ast
import re
from typing import TYPE_CHECKING, Any

import structlog
import yaml

from conanreadme.errors import ConanReadmeError, ErrorCode
from conanreadme.fetcher import fetch
from conanreadme.models.conan import (
    RecipeDetails,
    RecipeInfo,
    RecipeVersion,
    SearchResponse,
    SearchResult,
)

if TYPE_CHECKING:
    import httpx

    from conanreadme.config import ConanSettings, GitHubSettings

log = structlog.get_logger()

_VERSION_SPLIT_RE = re.compile(r"[.\-+_]")
_METADATA_FIELDS = ("description", "license", "author", "homepage", "topics")


def version_sort_key(version: str) -> tuple[tuple[int, int, str], ...]:
    """Natural ordering: numeric components compare as numbers and outrank words."""
    key: list[tuple[int, int, str]] = []
    for part in _VERSION_SPLIT_RE.split(version):
        if part.isdigit():
            key.append((1, int(part), ""))
        else:
            key.append((0, 0, part))
    return tuple(key)


# ---------------------------------------------------------------------------
# conanfile.py parsing
# ---------------------------------------------------------------------------


def _is_conanfile_class(node: ast.ClassDef) -> bool:
    for base in node.bases:
        if isinstance(base, ast.Name) and base.id == "ConanFile":
            return True
        if isinstance(base, ast.Attribute) and base.attr == "ConanFile":
            return True
    return False


def _as_str_list(value: Any) -> list[str]:
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple, set)):
        return [v for v in value if isinstance(v, str)]
    return []


def _requires_calls(cls: ast.ClassDef) -> list[str]:
    """Collect string literals passed to ``self.requires(...)`` anywhere in the class."""
    found: list[str] = []
    for node in ast.walk(cls):
        if not (isinstance(node, ast.Call) and isinstance(node.func, ast.Attribute)):
            continue
        func = node.func
        if func.attr != "requires" or not (
            isinstance(func.value, ast.Name) and func.value.id == "self"
        ):
            continue
        if node.args and isinstance(node.args[0], ast.Constant):
            if isinstance(node.args[0].value, str):
                found.append(node.args[0].value)
    return found


def parse_conanfile(source: str) -> dict[str, Any]:
    """Pull literal class attributes out of a conanfile.py.

    Returns a dict with any of: description, license, author, homepage,
    topics, requires, options, settings, generators. Non-literal values and
    unparseable files are skipped rather than reported.
    """
    try:
        module = ast.parse(source)
    except SyntaxError:
        log.debug("conanfile_syntax_error")
        return {}

    cls = next(
        (n for n in module.body if isinstance(n, ast.ClassDef) and _is_conanfile_class(n)),
        None,
    )
    if cls is None:
        return {}

    attrs: dict[str, Any] = {}
    for stmt in cls.body:
        if not isinstance(stmt, ast.Assign):
            continue
        try:
            value = ast.literal_eval(stmt.value)
        except (ValueError, TypeError, SyntaxError):
            continue
        for target in stmt.targets:
            if isinstance(target, ast.Name):
                attrs[target.id] = value

    result: dict[str, Any] = {}
    for field in ("description", "author", "homepage"):
        if isinstance(attrs.get(field), str):
            result[field] = attrs[field].strip()
    if "license" in attrs:
        result["license"] = ", ".join(_as_str_list(attrs["license"]))
    if "topics" in attrs:
        result["topics"] = _as_str_list(attrs["topics"])

    requires = _as_str_list(attrs.get("requires")) + _requires_calls(cls)
    if requires:
        result["requires"] = list(dict.fromkeys(requires))
    if isinstance(attrs.get("options"), dict):
        result["options"] = {
            str(k): list(v) if isinstance(v, (list, tuple)) else [v]
            for k, v in attrs["options"].items()
        }
    for field in ("settings", "generators"):
        if field in attrs:
            result[field] = _as_str_list(attrs[field])
    return result


def parse_config_yml(name: str, text: str) -> dict[str, RecipeVersion]:
    """Parse the ``versions`` mapping of a recipe's config.yml."""
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConanReadmeError(
            ErrorCode.UPSTREAM_FETCH_FAILED,
            f"Malformed config.yml for package '{name}'",
            recoverable=True,
        ) from exc
    versions = data.get("versions") if isinstance(data, dict) else None
    if not isinstance(versions, dict):
        raise ConanReadmeError(
            ErrorCode.UPSTREAM_FETCH_FAILED,
            f"Malformed config.yml for package '{name}'",
            recoverable=True,
        )
    return {
        str(version): RecipeVersion(
            folder=str(entry.get("folder", "all")) if isinstance(entry, dict) else "all"
        )
        for version, entry in versions.items()
    }


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


def _search_rank(name: str, needle: str) -> tuple[int, str]:
    """Exact match first, then prefix matches, then other substrings; alphabetical within each."""
    lowered = name.lower()
    if lowered == needle:
        return 0, lowered
    if lowered.startswith(needle):
        return 1, lowered
    return 2, lowered


class ConanCenterClient:
    """Read-only access to Conan Center recipes."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        github_settings: GitHubSettings,
        conan_settings: ConanSettings,
    ) -> None:
        self._client = client
        self._api_url = github_settings.api_url.rstrip("/")
        self._raw_url = github_settings.raw_url.rstrip("/")
        self._repo = conan_settings.index_repository
        self._branch = conan_settings.branch

    def _raw(self, path: str) -> str:
        return f"{self._raw_url}/{self._repo}/{self._branch}/{path}"

    async def search_packages(self, query: str, limit: int = 20) -> SearchResponse:
        # The git trees API lists the whole directory; the contents API stops at 1000.
        url = f"{self._api_url}/repos/{self._repo}/git/trees/{self._branch}:recipes"
        log.debug("conan_search", query=query, limit=limit)
        response = await fetch(
            self._client,
            url,
            not_found_message="Conan Center recipe index not found",
            headers={"Accept": "application/vnd.github+json"},
        )
        listing = response.json()
        if not isinstance(listing, dict) or not isinstance(listing.get("tree"), list):
            raise ConanReadmeError(
                ErrorCode.UPSTREAM_FETCH_FAILED,
                "Unexpected recipe listing format",
                recoverable=True,
            )
        if listing.get("truncated"):
            log.warning("conan_recipe_listing_truncated", entries=len(listing["tree"]))

        needle = query.strip().lower()
        matches = sorted(
            {
                str(item["path"])
                for item in listing["tree"]
                if isinstance(item, dict)
                and item.get("type") == "tree"
                and needle in str(item.get("path", "")).lower()
            },
            key=lambda name: _search_rank(name, needle),
        )
        results = [
            SearchResult(
                name=name,
                description=f"Conan package for {name}",
                url=f"https://github.com/{self._repo}/tree/{self._branch}/recipes/{name}",
            )
            for name in matches[:limit]
        ]
        log.debug("conan_search_complete", query=query, total=len(matches))
        return SearchResponse(results=results, total_count=len(matches))

    async def _fetch_conanfile(self, name: str, folder: str) -> dict[str, Any]:
        try:
            response = await fetch(
                self._client,
                self._raw(f"recipes/{name}/{folder}/conanfile.py"),
                not_found_message=f"conanfile.py not found for package '{name}'",
            )
        except ConanReadmeError as exc:
            if exc.code != ErrorCode.PACKAGE_NOT_FOUND:
                raise
            log.info("conanfile_missing", package=name, folder=folder)
            return {}
        return parse_conanfile(response.text)

    async def get_recipe_info(self, name: str) -> RecipeInfo:
        """Versions and recipe metadata. Raises PACKAGE_NOT_FOUND for unknown packages."""
        response = await fetch(
            self._client,
            self._raw(f"recipes/{name}/config.yml"),
            not_found_message=f"Package '{name}' not found",
        )
        versions = parse_config_yml(name, response.text)
        if not versions:
            raise ConanReadmeError(
                ErrorCode.PACKAGE_NOT_FOUND, f"Package '{name}' has no published versions"
            )

        latest = max(versions, key=version_sort_key)
        conanfile = await self._fetch_conanfile(name, versions[latest].folder)
        metadata = {k: v for k, v in conanfile.items() if k in _METADATA_FIELDS}
        log.debug("conan_recipe_fetched", package=name, versions=len(versions))
        return RecipeInfo(name=name, latest_version=latest, versions=versions, **metadata)

    async def get_recipe_details(
        self, name: str, version: str, *, info: RecipeInfo | None = None
    ) -> RecipeDetails | None:
        """Per-version details, or ``None`` when the version does not exist.

        Pass an already fetched ``info`` to skip re-reading config.yml.
        """
        if info is None:
            info = await self.get_recipe_info(name)
        entry = info.versions.get(version)
        if entry is None:
            return None
        conanfile = await self._fetch_conanfile(name, entry.folder)
        fields = {**info.model_dump(include=set(_METADATA_FIELDS)), **conanfile}
        return RecipeDetails(name=name, version=version, **fields)

    async def get_latest_version(self, name: str) -> str:
        return (await self.get_recipe_info(name)).latest_version

    async def get_available_versions(self, name: str) -> list[str]:
        info = await self.get_recipe_info(name)
        return sorted(info.versions, key=version_sort_key)
