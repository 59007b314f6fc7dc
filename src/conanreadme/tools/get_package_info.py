"""get_package_info_from_conan: recipe metadata, versions, and optionally requirements."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog

from conanreadme.cache import cache_key
from conanreadme.conan_center import version_sort_key
from conanreadme.errors import ConanReadmeError, ErrorCode
from conanreadme.models.tools import GetPackageInfoInput, GetPackageInfoOutput
from conanreadme.tools import minutes_to_ms, parse_input

if TYPE_CHECKING:
    from conanreadme.state import AppState

log = structlog.get_logger()


async def handle(arguments: dict[str, Any] | None, state: AppState) -> dict[str, Any]:
    params = parse_input(GetPackageInfoInput, arguments)
    name = params.package_name
    key = cache_key(
        "package_info", name, int(params.include_dependencies), int(params.include_options)
    )

    cached: GetPackageInfoOutput | None = state.cache.get(key)
    if cached is not None:
        return cached.model_dump(mode="json")

    try:
        info = await state.conan.get_recipe_info(name)
    except ConanReadmeError as exc:
        if exc.code != ErrorCode.PACKAGE_NOT_FOUND:
            raise
        log.info("package_not_found", package=name)
        return GetPackageInfoOutput(name=name, exists=False).model_dump(mode="json")

    dependencies = None
    options = None
    if params.include_dependencies or params.include_options:
        details = await state.conan.get_recipe_details(name, info.latest_version, info=info)
        if details is not None:
            if params.include_dependencies and details.requires is not None:
                dependencies = tuple(details.requires)
            if params.include_options and details.options is not None:
                options = {k: tuple(v) for k, v in details.options.items()}

    output = GetPackageInfoOutput(
        name=info.name,
        exists=True,
        latest_version=info.latest_version,
        description=info.description,
        license=info.license,
        author=info.author,
        homepage=info.homepage,
        topics=tuple(info.topics),
        versions=tuple(sorted(info.versions, key=version_sort_key)),
        dependencies=dependencies,
        options=options,
    )
    state.cache.set(key, output, minutes_to_ms(state.settings.cache.info_ttl_minutes))
    return output.model_dump(mode="json")
