"""Structured error responses for MCP tool handlers.

Errors carry a corrective action so an agent can recover without human
intervention.
"""

import mcp.types as types
import requests


def build_error_response(
    error_type: str, message: str, corrective_action: str
) -> types.CallToolResult:
    """Build a structured error response with corrective action.

    Args:
        error_type: Error category (not_found, permission_denied,
            rate_limited, validation_error, server_error)
        message: Human-readable error description
        corrective_action: Specific action the agent can take to resolve the error

    Returns:
        CallToolResult with isError=True

    Examples:
        >>> build_error_response("not_found", "Theme 'Dawn' not found", "Use theme_list to see themes.")
        CallToolResult(content=[TextContent(...)], isError=True)
    """
    error_text = f"Error ({error_type}): {message}\n\nAction: {corrective_action}"

    return types.CallToolResult(
        content=[types.TextContent(type="text", text=error_text)],
        isError=True,
    )


def translate_http_error(error: requests.HTTPError) -> types.CallToolResult:
    """Map a Shopify HTTP error onto a structured tool error."""
    response = error.response
    status = response.status_code if response is not None else None
    message = str(error)

    match status:
        case 404:
            return build_error_response(
                "not_found",
                message,
                "Use theme_list to check the theme name, or verify the store domain.",
            )
        case 401 | 403:
            return build_error_response(
                "permission_denied",
                message,
                "Check SHOPIFY_ACCESS_TOKEN and that the app has the required access scopes.",
            )
        case 429:
            return build_error_response(
                "rate_limited",
                message,
                "Wait a few seconds and retry, or lower SHOPIFY_MAX_PARALLEL_REQUESTS.",
            )
        case _:
            return build_error_response(
                "server_error",
                message,
                "Retry later; check Shopify status if the error persists.",
            )
