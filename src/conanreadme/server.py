"""MCP server entry point (stdio transport).

    python -m conanreadme.server

stdout carries MCP traffic, so all logging goes to stderr.
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import sys
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

import mcp.types as types
import structlog
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server
from pydantic import ValidationError

from conanreadme.cache import TtlCache
from conanreadme.conan_center import ConanCenterClient
from conanreadme.config import Settings
from conanreadme.errors import ConanReadmeError, ErrorCode
from conanreadme.fetcher import build_http_client
from conanreadme.github import GitHubClient
from conanreadme.models.tools import (
    GetPackageInfoInput,
    GetPackageReadmeInput,
    SearchPackagesInput,
)
from conanreadme.state import AppState
from conanreadme.tools import get_package_info, get_package_readme, search_packages

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Awaitable, Callable

    from pydantic import BaseModel

    from conanreadme.config import LoggingSettings

    Handler = Callable[[dict[str, Any] | None, AppState], Awaitable[dict[str, Any]]]

log = structlog.get_logger()

SERVER_NAME = "conanreadme"


class ToolCallError(Exception):
    """Raised to the MCP layer; its text is the JSON error envelope."""


# name -> (description, input model, handler)
TOOLS: dict[str, tuple[str, type[BaseModel], Handler]] = {
    "get_readme_from_conan": (
        "Get package README and usage examples from Conan Center",
        GetPackageReadmeInput,
        get_package_readme.handle,
    ),
    "get_package_info_from_conan": (
        "Get package basic information and dependencies from Conan Center",
        GetPackageInfoInput,
        get_package_info.handle,
    ),
    "search_packages_from_conan": (
        "Search for packages in Conan Center by recipe name. Results carry names and "
        "recipe URLs only; use get_package_info_from_conan for descriptions and metadata.",
        SearchPackagesInput,
        search_packages.handle,
    ),
}


def setup_logging(settings: LoggingSettings) -> None:
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if settings.format == "json":
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, settings.level)),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def tool_definitions() -> list[types.Tool]:
    return [
        types.Tool(name=name, description=description, inputSchema=model.model_json_schema())
        for name, (description, model, _) in TOOLS.items()
    ]


async def dispatch(name: str, arguments: dict[str, Any] | None, state: AppState) -> dict[str, Any]:
    """Run a tool by name. Raises ConanReadmeError for unknown tools and bad input."""
    tool = TOOLS.get(name)
    if tool is None:
        raise ConanReadmeError(ErrorCode.INVALID_INPUT, f"Unknown tool: {name}")
    _, _, handler = tool
    return await handler(arguments, state)


async def _sweep_periodically(cache: TtlCache, interval_seconds: float) -> None:
    while True:
        await asyncio.sleep(interval_seconds)
        cache.sweep()


def create_server(settings: Settings) -> Server:
    @asynccontextmanager
    async def lifespan(_server: Server) -> AsyncIterator[AppState]:
        async with build_http_client(settings.http, settings.github) as client:
            state = AppState(
                settings=settings,
                cache=TtlCache(),
                conan=ConanCenterClient(client, settings.github, settings.conan),
                github=GitHubClient(client, settings.github),
                http_client=client,
            )
            sweeper = asyncio.create_task(
                _sweep_periodically(state.cache, settings.cache.cleanup_interval_minutes * 60)
            )
            log.info("server_started", tools=list(TOOLS))
            try:
                yield state
            finally:
                sweeper.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await sweeper
                log.info("server_stopped")

    server: Server = Server(SERVER_NAME, lifespan=lifespan)

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        return tool_definitions()

    # Input models validate arguments so failures come back as the JSON envelope.
    @server.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: dict[str, Any]) -> list[types.TextContent]:
        state: AppState = server.request_context.lifespan_context
        try:
            result = await dispatch(name, arguments, state)
        except ConanReadmeError as exc:
            log.info("tool_call_failed", tool=name, code=exc.code.value, message=exc.message)
            raise ToolCallError(exc.to_json()) from exc
        except Exception:
            log.error("tool_call_crashed", tool=name, exc_info=True)
            raise
        return [types.TextContent(type="text", text=json.dumps(result))]

    return server


async def _run(settings: Settings) -> None:
    server = create_server(settings)
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


def main() -> None:
    try:
        settings = Settings()
    except ValidationError as exc:
        print(f"Invalid configuration:\n{exc}", file=sys.stderr)
        sys.exit(1)

    setup_logging(settings.logging)
    asyncio.run(_run(settings))


if __name__ == "__main__":
    main()
