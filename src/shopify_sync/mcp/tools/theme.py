"""Theme tool handlers for MCP server.

This module defines MCP tools for listing, publishing and creating themes.
"""

import logging
from pathlib import Path
from typing import Any

import mcp.types as types

from ...core.client import ShopifyClient
from ...sync.engine import ShopSync
from .errors import build_error_response
from .registry import ToolSpec

logger = logging.getLogger(__name__)


THEME_TOOLS = [
    types.Tool(
        name="theme_list",
        description="List the store's themes; the main (published) theme is marked.",
        annotations=types.ToolAnnotations(
            readOnlyHint=True,
            destructiveHint=False,
            idempotentHint=True,
            openWorldHint=True,
        ),
        inputSchema={"type": "object", "properties": {}, "required": []},
    ),
    types.Tool(
        name="theme_publish",
        description="Make the named theme the store's main theme. No-op if it already is.",
        annotations=types.ToolAnnotations(
            readOnlyHint=False,
            destructiveHint=False,
            idempotentHint=True,
            openWorldHint=True,
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "name": {"type": "string", "description": "Theme name"},
            },
            "required": ["name"],
        },
    ),
    types.Tool(
        name="theme_init",
        description="Create an unpublished theme unless one with this name exists.",
        annotations=types.ToolAnnotations(
            readOnlyHint=False,
            destructiveHint=False,
            idempotentHint=True,
            openWorldHint=True,
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "name": {"type": "string", "description": "Theme name"},
                "src": {
                    "type": "string",
                    "description": "URL of a theme zip archive to seed from",
                },
            },
            "required": ["name"],
        },
    ),
]


def _shop(client: ShopifyClient) -> ShopSync:
    # Theme operations never touch the local tree.
    return ShopSync(client, Path("."))


def _theme_json(theme) -> dict[str, Any]:
    return {"id": theme.id, "name": theme.name, "role": theme.role}


async def _handle_list(
    client: ShopifyClient, args: dict[str, Any]
) -> types.CallToolResult:
    themes = await _shop(client).list_themes()
    lines = [
        f"{t.name}{' (main)' if t.is_main else ''}" for t in themes
    ] or ["No themes found."]
    return types.CallToolResult(
        content=[types.TextContent(type="text", text="\n".join(lines))],
        structuredContent={"themes": [_theme_json(t) for t in themes]},
    )


async def _handle_publish(
    client: ShopifyClient, args: dict[str, Any]
) -> types.CallToolResult:
    name = args.get("name")
    if not name:
        raise ValueError("name is required")
    theme = await _shop(client).publish_theme(name)
    if theme is None:
        return build_error_response(
            "not_found",
            f"Theme '{name}' not found.",
            "Use theme_list to see available themes.",
        )
    return types.CallToolResult(
        content=[
            types.TextContent(type="text", text=f"Theme '{theme.name}' is main.")
        ],
        structuredContent=_theme_json(theme),
    )


async def _handle_init(
    client: ShopifyClient, args: dict[str, Any]
) -> types.CallToolResult:
    name = args.get("name")
    if not name:
        raise ValueError("name is required")
    theme = await _shop(client).init_theme(name, args.get("src"))
    return types.CallToolResult(
        content=[
            types.TextContent(
                type="text", text=f"Theme '{theme.name}' ({theme.role})"
            )
        ],
        structuredContent=_theme_json(theme),
    )


THEME_SPECS: list[ToolSpec] = [
    ToolSpec(
        tool=THEME_TOOLS[0],
        permissions=frozenset({"read_themes"}),
        handler=_handle_list,
    ),
    ToolSpec(
        tool=THEME_TOOLS[1],
        permissions=frozenset({"write_themes"}),
        handler=_handle_publish,
    ),
    ToolSpec(
        tool=THEME_TOOLS[2],
        permissions=frozenset({"write_themes"}),
        handler=_handle_init,
    ),
]
