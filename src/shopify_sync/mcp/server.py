"""MCP server exposing Shopify store sync over stdio.

Agents can list and publish themes and pull or push a store's content
through the tools registered here.

Transport: stdio
Protocol: JSON-RPC 2.0 over MCP
"""

import argparse
import asyncio
import logging
import sys

import mcp.server.stdio
import mcp.types as types
from mcp.server import NotificationOptions, Server
from mcp.server.models import InitializationOptions

from .. import __version__
from ..core.async_utils import run_sync
from ..core.client import ShopifyClient
from ..logger import DEFAULT_MCP_LOG_FILE, setup_logging
from .lifespan import server_lifespan
from .tools import (
    ALL_SPECS,
    ToolRegistry,
    build_error_response,
    load_permissions_file,
)
from .tools.registry import ToolSpec

logger = logging.getLogger(__name__)

server = Server("shopify-sync-mcp")

# Initialized in main()
_client: ShopifyClient | None = None
_registry: ToolRegistry | None = None


# ---------------------------------------------------------------------------
# Ping tool (always available, no access scope required)
# ---------------------------------------------------------------------------


async def _handle_ping(
    client: ShopifyClient, args: dict
) -> types.CallToolResult:
    """Handle ping tool -- test store connectivity."""
    try:
        shop_name = await run_sync(client.validate_connection)
        return types.CallToolResult(
            content=[
                types.TextContent(
                    type="text",
                    text=f"Connected to shop '{shop_name}' "
                    f"(Admin API {client.config.api_version}).",
                )
            ]
        )
    except Exception as e:
        return types.CallToolResult(
            content=[
                types.TextContent(
                    type="text",
                    text=f"Shopify connection failed: {e}. "
                    "Check SHOPIFY_STORE and SHOPIFY_ACCESS_TOKEN.",
                )
            ],
            isError=True,
        )


PING_SPEC = ToolSpec(
    tool=types.Tool(
        name="ping",
        description="Test Shopify connectivity and return the shop name",
        inputSchema={
            "type": "object",
            "properties": {},
            "required": [],
        },
    ),
    permissions=frozenset(),
    handler=_handle_ping,
)


# ---------------------------------------------------------------------------
# Global accessors
# ---------------------------------------------------------------------------


def get_client() -> ShopifyClient:
    """Get the global ShopifyClient.

    Raises:
        RuntimeError: If the server lifespan has not started.
    """
    if _client is None:
        raise RuntimeError(
            "ShopifyClient not initialized. Server lifespan not started."
        )
    return _client


def set_client(client: ShopifyClient | None) -> None:
    global _client
    _client = client


def get_registry() -> ToolRegistry:
    """Get the global ToolRegistry.

    Raises:
        RuntimeError: If the registry is not initialized.
    """
    if _registry is None:
        raise RuntimeError("ToolRegistry not initialized.")
    return _registry


def set_registry(registry: ToolRegistry | None) -> None:
    global _registry
    _registry = registry


# ---------------------------------------------------------------------------
# MCP protocol handlers
# ---------------------------------------------------------------------------


@server.list_tools()
async def handle_list_tools() -> list[types.Tool]:
    """List the registered (and permitted) tools."""
    return get_registry().list_tools()


@server.call_tool()
async def handle_call_tool(
    name: str, arguments: dict | None
) -> types.CallToolResult:
    """Dispatch a tool call through the registry."""
    client = get_client()
    try:
        return await get_registry().call_tool(name, arguments, client)
    except ValueError as e:
        # Unknown or filtered-out tool name
        return build_error_response(
            "unknown_tool",
            str(e),
            "Use list_tools to see available tools.",
        )


# ---------------------------------------------------------------------------
# Server lifecycle
# ---------------------------------------------------------------------------


def build_registry(permissions_file: str | None = None) -> ToolRegistry:
    """Build the tool registry, filtered by a permissions file if given."""
    allowed = None
    if permissions_file:
        allowed = load_permissions_file(permissions_file)
        logger.info("Loaded %d scopes from %s", len(allowed), permissions_file)

    all_specs = [PING_SPEC] + ALL_SPECS
    registry = ToolRegistry(all_specs, allowed)
    logger.info(
        "Registered %d tools (of %d total)",
        registry.tool_count(),
        len(all_specs),
    )
    if permissions_file:
        print(
            f"Permissions file: {permissions_file} "
            f"({registry.tool_count()} of {len(all_specs)} tools enabled)",
            file=sys.stderr,
        )
    return registry


async def main(config_overrides: dict | None = None):
    """Run the MCP server with stdio transport.

    Logging goes to a file only; stdout carries the protocol.

    Args:
        config_overrides: Optional CLI values (store, access_token,
            insecure, log_file, permissions_file).
    """
    overrides = config_overrides or {}

    # Must run before stdio_server so nothing reaches stdout
    setup_logging(mode="mcp", log_file=overrides.get("log_file"))

    set_registry(build_registry(overrides.get("permissions_file")))

    # set_client() is called here, not in the lifespan: under
    # ``python -m`` this module is __main__ and a relative import from
    # lifespan.py would patch a second copy.
    async with server_lifespan(config_overrides=overrides) as ctx:
        set_client(ctx["client"])
        try:
            async with mcp.server.stdio.stdio_server() as (
                read_stream,
                write_stream,
            ):
                init_options = InitializationOptions(
                    server_name="shopify-sync-mcp",
                    server_version=__version__,
                    capabilities=server.get_capabilities(
                        notification_options=NotificationOptions(),
                        experimental_capabilities={},
                    ),
                )
                await server.run(read_stream, write_stream, init_options)
        finally:
            set_client(None)
            set_registry(None)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="shopify-sync-mcp",
        description="Expose Shopify theme and content sync to MCP agents over stdio",
        epilog=(
            "Configuration comes from CLI flags, then SHOPIFY_* variables or "
            ".env, then .shopify_sync/config.yml. stdout carries JSON-RPC; "
            "messages go to stderr."
        ),
    )
    parser.add_argument("--store", help="Store domain (overrides SHOPIFY_STORE)")
    parser.add_argument(
        "--access-token",
        help="Admin API access token (shows in the process list; prefer "
        "SHOPIFY_ACCESS_TOKEN)",
    )
    parser.add_argument(
        "--insecure",
        action="store_true",
        help="Skip SSL certificate verification (development only)",
    )
    parser.add_argument(
        "--log-file",
        default=DEFAULT_MCP_LOG_FILE,
        help=f"Log file path (default: {DEFAULT_MCP_LOG_FILE})",
    )
    parser.add_argument(
        "--permissions-file",
        help="Access scopes to allow, one per line (e.g. read_themes); "
        "without it every tool is exposed",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"shopify-sync-mcp version {__version__}",
    )
    return parser


def _overrides(args: argparse.Namespace) -> dict:
    """CLI values that were actually given, keyed for server_lifespan."""
    given = {
        "store": args.store,
        "access_token": args.access_token,
        "insecure": args.insecure or None,
        "log_file": args.log_file,
        "permissions_file": args.permissions_file,
    }
    return {key: value for key, value in given.items() if value}


def run(argv: list[str] | None = None) -> None:
    """Console entry point: parse flags, run the server, map exits."""
    overrides = _overrides(build_parser().parse_args(argv))

    shown = sorted(k for k in overrides if k != "access_token")
    if shown:
        print(f"CLI overrides: {', '.join(shown)}", file=sys.stderr)

    try:
        asyncio.run(main(config_overrides=overrides or None))
    except RuntimeError:
        # server_lifespan has already explained the failure on stderr
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nStopped.", file=sys.stderr)
        sys.exit(0)


if __name__ == "__main__":
    run()
