"""get_readme_from_conan: README, usage examples, and install snippets for a package.

Flow: cache lookup -> recipe metadata -> version resolution -> README from the
recipe's GitHub homepage (or a generated one) -> example extraction -> cache.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog

from conanreadme.cache import cache_key
from conanreadme.errors import ConanReadmeError, ErrorCode
from conanreadme.github import parse_github_url
from conanreadme.models.tools import (
    BasicInfo,
    GetPackageReadmeInput,
    GetPackageReadmeOutput,
    InstallationInfo,
    RepositoryInfo,
)
from conanreadme.readme_parser import (
    extract_package_description,
    parse_usage_examples,
)
from conanreadme.tools import minutes_to_ms, parse_input

if TYPE_CHECKING:
    from conanreadme.models.conan import RecipeInfo
    from conanreadme.state import AppState

log = structlog.get_logger()


def build_installation(name: str, version: str) -> InstallationInfo:
    return InstallationInfo(
        conan=f"conan install --requires={name}/{version}",
        cmake=f"find_package({name} REQUIRED)\ntarget_link_libraries(your_target {name}::{name})",
    )


def build_fallback_readme(info: RecipeInfo, version: str) -> str:
    """Minimal README for packages whose homepage offers none."""
    installation = build_installation(info.name, version)
    lines = [f"# {info.name}", ""]
    if info.description:
        lines += [info.description, ""]
    lines += [
        "## Installation",
        "",
        "```bash",
        installation.conan,
        "```",
        "",
        "## CMake Integration",
        "",
        "```cmake",
        installation.cmake,
        "```",
    ]
    if info.homepage:
        lines += ["", "## Links", "", f"- Homepage: {info.homepage}"]
    return "\n".join(lines) + "\n"


async def handle(arguments: dict[str, Any] | None, state: AppState) -> dict[str, Any]:
    params = parse_input(GetPackageReadmeInput, arguments)
    name = params.package_name
    key = cache_key("package_readme", name, params.version, int(params.include_examples))

    cached: GetPackageReadmeOutput | None = state.cache.get(key)
    if cached is not None:
        return cached.model_dump(mode="json")

    try:
        info = await state.conan.get_recipe_info(name)
    except ConanReadmeError as exc:
        if exc.code != ErrorCode.PACKAGE_NOT_FOUND:
            raise
        log.info("package_not_found", package=name)
        return GetPackageReadmeOutput(
            package_name=name, version=params.version, exists=False
        ).model_dump(mode="json")

    if params.version == "latest":
        version = info.latest_version
    elif params.version in info.versions:
        version = params.version
    else:
        raise ConanReadmeError(
            ErrorCode.VERSION_NOT_FOUND,
            f"Version '{params.version}' not found for package '{name}'",
        )

    readme: str | None = None
    repository: RepositoryInfo | None = None
    if info.homepage and parse_github_url(info.homepage) is not None:
        readme = await state.github.get_readme_content(info.homepage)
        if readme is not None or await state.github.check_repository_exists(info.homepage):
            repository = RepositoryInfo(url=info.homepage)
    if readme is None:
        log.info("readme_generated", package=name)
        readme = build_fallback_readme(info, version)

    # extract_package_description falls back to "Conan package" on its own.
    description = info.description or extract_package_description(readme)

    output = GetPackageReadmeOutput(
        package_name=name,
        version=version,
        exists=True,
        description=description,
        readme_content=readme,
        usage_examples=tuple(parse_usage_examples(readme)) if params.include_examples else (),
        installation=build_installation(name, version),
        basic_info=BasicInfo(
            name=info.name,
            version=version,
            description=info.description,
            license=info.license,
            author=info.author,
            homepage=info.homepage,
            topics=tuple(info.topics),
        ),
        repository=repository,
    )
    state.cache.set(key, output, minutes_to_ms(state.settings.cache.readme_ttl_minutes))
    log.info(
        "readme_complete",
        package=name,
        version=version,
        examples=len(output.usage_examples),
    )
    return output.model_dump(mode="json")
