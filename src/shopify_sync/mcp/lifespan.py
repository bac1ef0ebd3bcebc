"""Lifespan management for MCP server startup and shutdown."""

import logging
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from ..config_loader import resolve_runtime_config
from ..core.async_utils import init_semaphore, run_sync
from ..core.client import ShopifyClient

logger = logging.getLogger(__name__)


def _stderr_print(msg: str) -> None:
    """Print message to stderr for user feedback (safe in MCP mode)."""
    print(msg, file=sys.stderr, flush=True)


@asynccontextmanager
async def server_lifespan(
    config_overrides: dict[str, Any] | None = None,
) -> AsyncIterator[dict[str, Any]]:
    """
    Manage server startup and shutdown lifecycle.

    On startup the config is resolved (CLI > env vars > .env > YAML >
    defaults), a ShopifyClient is created and the connection validated.
    The server fails fast if the store is unreachable or the token is
    rejected.

    Args:
        config_overrides: Optional dict with config values from CLI
            (store, access_token, insecure)

    Yields:
        Dict with 'client' key containing the initialized ShopifyClient

    Raises:
        RuntimeError: If configuration is invalid or the connection fails.
    """
    logger.info("MCP server starting...")
    _stderr_print("Shopify Sync MCP Server starting...")

    try:
        config, _ = resolve_runtime_config(config_overrides)
        logger.info("Shopify store: %s", config.store)
        _stderr_print(f"  Shopify store: {config.store}")
    except ValueError as e:
        logger.error("Configuration error: %s", e)
        _stderr_print(f"ERROR: Configuration error: {e}")
        _stderr_print("  Ensure SHOPIFY_STORE and SHOPIFY_ACCESS_TOKEN are set.")
        raise RuntimeError(
            f"Configuration error: {e}. Ensure SHOPIFY_STORE and "
            "SHOPIFY_ACCESS_TOKEN are set."
        ) from e

    logger.info("Validating Shopify connection...")
    _stderr_print("  Validating Shopify connection...")
    try:
        client = ShopifyClient(config)
        shop_name = await run_sync(client.validate_connection)
        logger.info("Connected to shop %s", shop_name)
        _stderr_print(f"  Connected to shop: {shop_name}")
        init_semaphore(config.max_parallel_requests)
        _stderr_print(f"  Parallel requests: {config.max_parallel_requests}")
        _stderr_print("Server ready. Waiting for MCP client connection...")
    except Exception as e:
        logger.error("Failed to connect to Shopify: %s", e)
        _stderr_print("ERROR: Shopify connection failed.")
        _stderr_print(f"  {e}")
        _stderr_print("  Check SHOPIFY_STORE and SHOPIFY_ACCESS_TOKEN.")
        raise RuntimeError(
            f"Shopify connection failed: {e}. Check SHOPIFY_STORE and "
            "SHOPIFY_ACCESS_TOKEN."
        ) from e

    yield {"client": client}

    logger.info("MCP server shutting down")
    _stderr_print("Shopify Sync MCP Server shutting down.")
