"""MCP tool handlers for Shopify store operations.

Each module exposes a ``*_SPECS`` list of ``ToolSpec`` entries wrapping the
``ShopSync`` engine with async handlers and structured error responses.
"""

from .errors import build_error_response, translate_http_error
from .registry import ToolRegistry, ToolSpec, load_permissions_file
from .sync import SYNC_SPECS, SYNC_TOOLS
from .theme import THEME_SPECS, THEME_TOOLS

ALL_SPECS: list[ToolSpec] = THEME_SPECS + SYNC_SPECS

__all__ = [
    "build_error_response",
    "translate_http_error",
    "ToolSpec",
    "ToolRegistry",
    "load_permissions_file",
    "ALL_SPECS",
    "SYNC_SPECS",
    "SYNC_TOOLS",
    "THEME_SPECS",
    "THEME_TOOLS",
]
