"""File handler module: output-dir validation, encoding-aware reads, idempotent writes.

Drivers never touch the filesystem directly; they go through these helpers
so that parent directories are created on demand and unchanged content is
never rewritten (a second pull with no remote changes writes nothing).
"""

from pathlib import Path

from charset_normalizer import from_bytes

# =============================================================================
# Path Validation
# =============================================================================


def validate_output_dir(path_str: str) -> Path:
    """Resolve the sync root directory.

    The directory need not exist yet; it is created by the first write.

    Raises:
        ValueError: If the path exists and is not a directory.
    """
    resolved = Path(path_str).expanduser().resolve()
    if resolved.exists() and not resolved.is_dir():
        raise ValueError(f"Output path is not a directory: {path_str}")
    return resolved


def resolve_within(base_dir: Path, relative_path: str) -> Path:
    """Join *relative_path* onto *base_dir*, refusing to escape it.

    Raises:
        ValueError: If the result is outside base_dir.
    """
    base = base_dir.resolve()
    target = (base / relative_path).resolve()
    if not target.is_relative_to(base):
        raise ValueError(
            f"Path is outside output directory: {relative_path}"
        )
    return target


# =============================================================================
# File Read/Write
# =============================================================================


def read_text(path: Path) -> str:
    """Read a text file, falling back to encoding detection.

    Valid UTF-8 (everything this tool writes) is decoded as such; other
    bytes go through charset-normalizer.  Undetectable content is decoded
    as UTF-8 with replacement characters.
    """
    raw = path.read_bytes()
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        pass
    result = from_bytes(raw).best()
    if result is None:
        return raw.decode("utf-8", errors="replace")
    return str(result)


def write_file(path: Path, content: str | bytes) -> int:
    """Write content to a file, creating parent directories as needed.

    Returns:
        Number of bytes written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    data = content.encode("utf-8") if isinstance(content, str) else content
    path.write_bytes(data)
    return len(data)


def write_if_changed(path: Path, content: str | bytes) -> bool:
    """Write *content* unless the file already holds exactly those bytes.

    Returns:
        True if the file was written.
    """
    data = content.encode("utf-8") if isinstance(content, str) else content
    if path.is_file() and path.read_bytes() == data:
        return False
    write_file(path, data)
    return True


def remove_file(path: Path) -> bool:
    """Delete a file; returns False if it was already gone."""
    try:
        path.unlink()
    except FileNotFoundError:
        return False
    return True

