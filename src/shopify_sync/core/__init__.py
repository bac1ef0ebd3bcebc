"""Shopify transport shared between the CLI and the MCP server."""

from .async_utils import run_sync
from .client import ShopifyClient

__all__ = ["ShopifyClient", "run_sync"]
