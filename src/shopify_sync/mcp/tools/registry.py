"""ToolSpec and ToolRegistry for scope-based tool filtering.

Operators can restrict which tools are exposed to an agent by listing the
Shopify access scopes they are willing to grant.

- ToolSpec: Immutable link between a Tool definition, the access scopes it
  needs, and an async handler ``(client, args) -> CallToolResult``.
- ToolRegistry: Drops specs whose scopes are not allowed, then dispatches
  calls and turns exceptions into structured error results.
- load_permissions_file: Reads a text file of access scope names.
"""

import logging
import re
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path

import mcp.types as types
import requests

from ...core.client import ShopifyClient

logger = logging.getLogger(__name__)

_SCOPE_PATTERN = re.compile(r"^(?:unauthenticated_)?(?:read|write)_[a-z_]+$")


@dataclass(frozen=True, slots=True)
class ToolSpec:
    """Immutable specification for a single MCP tool.

    Attributes:
        tool: The MCP Tool definition (name, description, inputSchema).
        permissions: Shopify access scopes required to use this tool.
            Empty frozenset means the tool is always available.
        handler: Async handler with signature (client, args) -> CallToolResult.
    """

    tool: types.Tool
    permissions: frozenset[str]
    handler: Callable[[ShopifyClient, dict], Awaitable[types.CallToolResult]]


class ToolRegistry:
    """Registry of ToolSpecs, optionally filtered by allowed scopes.

    With ``allowed_permissions=None`` every spec is registered.  Otherwise
    a spec is kept when it needs no scope or all of its scopes are allowed.
    """

    def __init__(
        self,
        specs: list[ToolSpec],
        allowed_permissions: frozenset[str] | None = None,
    ):
        self._specs: dict[str, ToolSpec] = {
            spec.tool.name: spec
            for spec in specs
            if allowed_permissions is None
            or spec.permissions <= allowed_permissions
        }

    def list_tools(self) -> list[types.Tool]:
        return [spec.tool for spec in self._specs.values()]

    def tool_count(self) -> int:
        return len(self._specs)

    async def call_tool(
        self,
        name: str,
        arguments: dict | None,
        client: ShopifyClient,
    ) -> types.CallToolResult:
        """Dispatch a call to the registered handler.

        HTTP errors, validation errors and unexpected exceptions become
        structured error results with corrective actions.

        Raises:
            ValueError: If the tool is unknown or filtered out.
        """
        from .errors import build_error_response, translate_http_error

        spec = self._specs.get(name)
        if spec is None:
            raise ValueError(f"Unknown tool: {name}")
        try:
            return await spec.handler(client, arguments or {})
        except requests.HTTPError as e:
            logger.warning("Shopify API error in %s: %s", name, e)
            return translate_http_error(e)
        except ValueError as e:
            return build_error_response(
                "validation_error",
                str(e),
                "Check parameter values and retry.",
            )
        except Exception as e:
            logger.exception("Unexpected error in tool %s", name)
            return build_error_response(
                "server_error",
                str(e),
                "Check the server log and retry.",
            )


def load_permissions_file(path: str | Path) -> frozenset[str]:
    """Load allowed access scopes from a text file.

    Format: one scope per line, ``#`` for comments, blank lines ignored.

    Example file::

        # Read-only
        read_themes
        read_content

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If a line is not a scope name or the file is empty.
    """
    path = Path(path)
    scopes: set[str] = set()
    for line_num, line in enumerate(path.read_text().splitlines(), 1):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        if not _SCOPE_PATTERN.match(stripped):
            raise ValueError(
                f"Invalid scope '{stripped}' at line {line_num} in {path}. "
                "Expected an access scope such as read_themes."
            )
        scopes.add(stripped)
    if not scopes:
        raise ValueError(
            f"No scopes found in {path}. File must contain at least one scope."
        )
    return frozenset(scopes)
