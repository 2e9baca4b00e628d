"""MCP server for steerdocs.

Exposes steering-document recommendations to AI coding agents via the Model
Context Protocol. The server keeps one recommendation service for its whole
lifetime, so workspace analysis is cached between tool calls and refreshed
when package.json or tsconfig.json changes.

Usage:
    steerdocs serve [--workspace /path/to/project]
    uv run python -m steerdocs.mcp_server [--workspace /path/to/project]

Configure in Claude Code (.mcp.json):
    {
      "mcpServers": {
        "steerdocs": {"command": "steerdocs", "args": ["serve"]}
      }
    }
"""

from __future__ import annotations

import json
import logging
import sys
import time
from pathlib import Path

import mcp.server.stdio
import mcp.types as types
from mcp.server import Server

from steerdocs.activity import context_outcome, log_tool_call, recommendation_outcome
from steerdocs.config import Config
from steerdocs.factory import Recommender, build_recommender
from steerdocs.recommend.errors import RecommendationError
from steerdocs.recommend.models import RecommendationOptions

logger = logging.getLogger(__name__)

# Set by main() when the CLI passes --workspace
_workspace_override: Path | None = None


def _resolve_workspace() -> Path:
    """Find the workspace: explicit override, CLI args, env var, then current directory."""
    if _workspace_override is not None:
        return _workspace_override

    for i, arg in enumerate(sys.argv):
        if arg == "--workspace" and i + 1 < len(sys.argv):
            return Path(sys.argv[i + 1]).resolve()

    config = Config.load()
    if config.workspace:
        return config.workspace.resolve()

    return Path.cwd()


server = Server("steerdocs")

_recommender: Recommender | None = None


def _get_recommender() -> Recommender:
    global _recommender
    if _recommender is None:
        _recommender = build_recommender(Config.load(), _resolve_workspace())
    return _recommender


@server.list_tools()
async def list_tools() -> list[types.Tool]:
    return [
        types.Tool(
            name="recommend_documents",
            description=(
                "Recommend steering documents (coding guidelines for AI agents) that fit "
                "this project. Scores the document catalog against the project's detected "
                "frameworks, dependencies, directory structure, and languages, and explains "
                "each match. Call this at the START of work in an unfamiliar project."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "max_results": {
                        "type": "integer",
                        "description": "Maximum number of documents to return (default 10)",
                    },
                    "min_score": {
                        "type": "integer",
                        "description": "Minimum relevance score (default 10)",
                    },
                    "include_installed": {
                        "type": "boolean",
                        "description": "Include documents already installed in .kiro/steering (default true)",
                    },
                },
            },
        ),
        types.Tool(
            name="analyze_workspace",
            description=(
                "Describe the project's technology profile: languages, frameworks with "
                "detection confidence, dependencies, notable directories, whether tests "
                "exist, and the project type (web app, API server, CLI, library...)."
            ),
            inputSchema={
                "type": "object",
                "properties": {},
            },
        ),
    ]


@server.call_tool()
async def call_tool(name: str, arguments: dict) -> list[types.TextContent]:
    start = time.time()
    arguments = arguments or {}
    result: list[types.TextContent] = []
    outcome: dict | None = None
    error: str | None = None
    try:
        result, outcome = await _dispatch_tool(name, arguments)
        return result
    except RecommendationError as e:
        error = str(e)
        result = [types.TextContent(type="text", text=json.dumps({
            "error": e.code.value,
            "message": e.message,
        }, indent=2))]
        return result
    except Exception as e:
        error = str(e)
        result = [types.TextContent(type="text", text=f"Error: {e}")]
        return result
    finally:
        duration_ms = int((time.time() - start) * 1000)
        workspace = _recommender.workspace_root if _recommender is not None else None
        log_tool_call(name, arguments, workspace, outcome, error, duration_ms)


async def _dispatch_tool(name: str, arguments: dict) -> tuple[list[types.TextContent], dict | None]:
    """Route a tool call to its handler. Returns the content and the activity outcome."""
    if name == "recommend_documents":
        return await _handle_recommend(arguments)
    elif name == "analyze_workspace":
        return await _handle_analyze()
    else:
        return [types.TextContent(type="text", text=f"Unknown tool: {name}")], None


def _int_arg(arguments: dict, key: str, default: int) -> int:
    value = arguments.get(key, default)
    # bool is an int subclass, so check it first
    if isinstance(value, bool) or not isinstance(value, int):
        logger.warning(f"Ignoring non-integer {key}={value!r}, using {default}")
        return default
    return value


def _bool_arg(arguments: dict, key: str, default: bool) -> bool:
    value = arguments.get(key, default)
    if not isinstance(value, bool):
        logger.warning(f"Ignoring non-boolean {key}={value!r}, using {default}")
        return default
    return value


async def _handle_recommend(arguments: dict) -> tuple[list[types.TextContent], dict]:
    defaults = RecommendationOptions()
    options = RecommendationOptions(
        max_results=_int_arg(arguments, "max_results", defaults.max_results),
        include_installed=_bool_arg(arguments, "include_installed", defaults.include_installed),
        min_score=_int_arg(arguments, "min_score", defaults.min_score),
    )
    results = await _get_recommender().service.get_recommendations(options)
    outcome = recommendation_outcome(results)

    if not results:
        return [types.TextContent(
            type="text",
            text="No recommendations found for this workspace.",
        )], outcome

    payload = {
        "count": len(results),
        "recommendations": [
            {
                "name": r.document.name,
                "path": r.document.path,
                "category": r.document.category,
                "description": r.document.description,
                "score": r.score,
                "installed": r.is_installed,
                "reasons": [reason.description for reason in r.reasons],
            }
            for r in results
        ],
    }
    return [types.TextContent(type="text", text=json.dumps(payload, indent=2))], outcome


async def _handle_analyze() -> tuple[list[types.TextContent], dict]:
    context = await _get_recommender().service.analyze_workspace()
    text = json.dumps(context.to_dict(), indent=2)
    return [types.TextContent(type="text", text=text)], context_outcome(context)


async def main(workspace: Path | None = None) -> None:
    """Serve over stdio. ``workspace`` overrides --workspace, env and cwd."""
    global _workspace_override
    if workspace is not None:
        _workspace_override = workspace.resolve()
    try:
        async with mcp.server.stdio.stdio_server() as (read_stream, write_stream):
            await server.run(
                read_stream,
                write_stream,
                server.create_initialization_options(),
            )
    finally:
        if _recommender is not None:
            _recommender.close()


if __name__ == "__main__":
    import asyncio
    asyncio.run(main())
