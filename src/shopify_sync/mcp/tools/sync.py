"""MCP tool handlers for store sync.

Defines two tools:

- ``shop_pull`` -- mirror the store onto the local tree.
- ``shop_push`` -- mirror the local tree onto the store.

Defaults for every argument come from the ``sync`` section of the config
file.
"""

from __future__ import annotations

import logging
from typing import Any

import mcp.types as types

from ...config_loader import load_hierarchical_config
from ...config_schema import SyncSettings, build_config
from ...core.client import ShopifyClient
from ...file_handler import validate_output_dir
from ...sync.engine import ShopSync, kinds_from_flags
from ...sync.reporter import (
    format_dry_run_preview,
    format_sync_report,
    report_to_json,
)
from ...sync.resources import ResourceKind
from .registry import ToolSpec

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Tool definitions
# ---------------------------------------------------------------------------


def _sync_schema(direction: str) -> dict[str, Any]:
    return {
        "type": "object",
        "properties": {
            "output_dir": {
                "type": "string",
                "description": "Root of the local store tree (default from config)",
            },
            "theme": {
                "type": "string",
                "description": "Theme name (default: the main theme)",
            },
            "kinds": {
                "type": "array",
                "items": {
                    "type": "string",
                    "enum": [k.value for k in ResourceKind],
                },
                "description": f"Resource kinds to {direction} (default: all enabled in config)",
            },
            "theme_check": {
                "type": "boolean",
                "description": "Only sync redirects, script tags, pages and blogs against the main theme",
            },
            "blog": {
                "type": "string",
                "description": "Limit blog articles to one blog (id or handle)",
            },
            "force": {
                "type": "boolean",
                "default": False,
                "description": "Transfer items even when they look unchanged",
            },
            "dry_run": {
                "type": "boolean",
                "default": False,
                "description": "Preview changes without applying them",
            },
        },
        "required": [],
    }


SYNC_TOOLS: list[types.Tool] = [
    types.Tool(
        name="shop_pull",
        description=(
            "Pull theme assets, pages, blog articles, redirects and script "
            "tags from the Shopify store into a local directory. Local "
            "files with no remote counterpart are deleted."
        ),
        annotations=types.ToolAnnotations(
            readOnlyHint=False,
            destructiveHint=True,
            idempotentHint=True,
            openWorldHint=True,
        ),
        inputSchema=_sync_schema("pull"),
    ),
    types.Tool(
        name="shop_push",
        description=(
            "Push a local directory to the Shopify store: create, update "
            "and delete remote items so the store matches the local files."
        ),
        annotations=types.ToolAnnotations(
            readOnlyHint=False,
            destructiveHint=True,
            idempotentHint=True,
            openWorldHint=True,
        ),
        inputSchema=_sync_schema("push"),
    ),
]


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


def _load_sync_settings() -> SyncSettings:
    return build_config(load_hierarchical_config()).sync


async def _run_sync(
    operation: str, client: ShopifyClient, args: dict[str, Any]
) -> types.CallToolResult:
    settings = _load_sync_settings()
    output_dir = validate_output_dir(args.get("output_dir") or settings.output_dir)

    if "kinds" in args:
        kinds = [ResourceKind(k) for k in args["kinds"]]
    else:
        kinds = kinds_from_flags(
            assets=settings.assets,
            redirects=settings.redirects,
            script_tags=settings.script_tags,
            pages=settings.pages,
            blogs=settings.blogs,
        )
    dry_run = bool(args.get("dry_run", False))

    shop = ShopSync(
        client,
        output_dir,
        dry_run=dry_run,
        force=bool(args.get("force", settings.force)),
        clock_skew_seconds=settings.clock_skew_seconds,
        page_size=client.config.page_size,
    )
    run = shop.pull if operation == "pull" else shop.push
    report = await run(
        kinds=kinds,
        theme=args.get("theme") or settings.theme,
        theme_check=bool(args.get("theme_check", settings.theme_check)),
        blog=args.get("blog"),
    )

    text = format_dry_run_preview(report) if dry_run else format_sync_report(report)
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=text)],
        structuredContent=report_to_json(report),
        isError=bool(report.errors),
    )


async def _handle_pull(
    client: ShopifyClient, args: dict[str, Any]
) -> types.CallToolResult:
    return await _run_sync("pull", client, args)


async def _handle_push(
    client: ShopifyClient, args: dict[str, Any]
) -> types.CallToolResult:
    return await _run_sync("push", client, args)


SYNC_SPECS: list[ToolSpec] = [
    ToolSpec(
        tool=SYNC_TOOLS[0],
        permissions=frozenset({"read_themes", "read_content"}),
        handler=_handle_pull,
    ),
    ToolSpec(
        tool=SYNC_TOOLS[1],
        permissions=frozenset({"write_themes", "write_content"}),
        handler=_handle_push,
    ),
]
