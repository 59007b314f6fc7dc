"""search_packages_from_conan: find recipes whose name contains a query."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog

from conanreadme.cache import cache_key
from conanreadme.models.tools import SearchPackagesInput, SearchPackagesOutput
from conanreadme.tools import minutes_to_ms, parse_input

if TYPE_CHECKING:
    from conanreadme.state import AppState

log = structlog.get_logger()


async def handle(arguments: dict[str, Any] | None, state: AppState) -> dict[str, Any]:
    params = parse_input(SearchPackagesInput, arguments)
    key = cache_key("search", params.query.lower(), params.limit)

    cached: SearchPackagesOutput | None = state.cache.get(key)
    if cached is not None:
        log.debug("search_cache_hit", query=params.query)
        return cached.model_copy(update={"cached": True}).model_dump(mode="json")

    response = await state.conan.search_packages(params.query, params.limit)
    output = SearchPackagesOutput(
        query=params.query,
        results=tuple(response.results),
        total_count=response.total_count,
    )
    state.cache.set(key, output, minutes_to_ms(state.settings.cache.search_ttl_minutes))

    log.info("search_complete", query=params.query, results=len(output.results))
    return output.model_dump(mode="json")
