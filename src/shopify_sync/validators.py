"""
Input validation for identifiers that become local paths.

Asset keys and page/article handles come from the remote and are joined
onto the output directory, so they are checked before anything is
written or uploaded.
"""


def format_validation_error(field_name: str, reason: str) -> str:
    """
    Generate consistent error message for validation failures.

    Args:
        field_name: Human-readable field name (e.g., "Asset key")
        reason: Description of validation failure (e.g., "cannot be empty")
    """
    return f"{field_name} {reason}"


def validate_asset_key(key: str) -> tuple[bool, str]:
    """
    Validate a theme asset key such as ``assets/theme.css``.

    Returns:
        Tuple of (is_valid, error_message).
        Returns (True, "") if valid, (False, reason) if invalid.

    Validation rules:
        - Cannot be empty or whitespace-only
        - Must be relative (no leading '/') with a directory part
        - Cannot contain '..' segments or backslashes
        - Cannot have empty path segments (e.g., 'assets//a.css')
    """
    if not key or not key.strip():
        return (False, format_validation_error("Asset key", "cannot be empty"))

    if key.startswith("/"):
        return (
            False,
            format_validation_error("Asset key", "must be relative"),
        )

    if "\\" in key:
        return (
            False,
            format_validation_error("Asset key", "cannot contain '\\'"),
        )

    segments = key.split("/")
    if ".." in segments:
        return (
            False,
            format_validation_error("Asset key", "cannot contain '..'"),
        )

    if "" in segments:
        return (
            False,
            format_validation_error(
                "Asset key", "cannot have empty path segments"
            ),
        )

    if len(segments) < 2:
        return (
            False,
            format_validation_error(
                "Asset key", "must include a directory (e.g. 'assets/')"
            ),
        )

    return (True, "")


def validate_handle(handle: str) -> tuple[bool, str]:
    """
    Validate a page, blog or article handle.

    Handles name a single file, so they cannot contain '/' or '..'.
    """
    if not handle or not handle.strip():
        return (False, format_validation_error("Handle", "cannot be empty"))

    if "/" in handle or "\\" in handle:
        return (
            False,
            format_validation_error("Handle", "cannot contain path separators"),
        )

    if handle in (".", "..") or ".." in handle:
        return (False, format_validation_error("Handle", "cannot contain '..'"))

    return (True, "")
