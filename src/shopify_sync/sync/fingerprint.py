"""Cheap local-vs-remote equality for theme assets.

Shopify reports an MD5 ``checksum`` for most assets, plus ``size`` and
``updated_at``.  A local file is considered current when its MD5 matches
the checksum, or failing that when its logical size matches and it is not
older than the remote copy (allowing for clock skew).  A false positive
only delays a refresh until the next forced pull.
"""

from __future__ import annotations

import hashlib
import json
import logging
from datetime import datetime, timezone
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_CLOCK_SKEW_SECONDS = 300

_CHUNK_SIZE = 64 * 1024


def md5_file(path: Path) -> str:
    digest = hashlib.md5()
    with open(path, "rb") as handle:
        for chunk in iter(lambda: handle.read(_CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.hexdigest()


def logical_size(path: Path) -> int:
    """Size of *path* as the remote would report it.

    JSON files are stored re-formatted locally, while Shopify measures
    its own compact rendering (which escapes ``/`` as ``\\/``).  Other
    files, and JSON that fails to parse, use the raw byte size.
    """
    if path.suffix.lower() == ".json":
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (ValueError, UnicodeDecodeError):
            return path.stat().st_size
        compact = json.dumps(data, ensure_ascii=False, separators=(",", ":"))
        return len(compact.replace("/", "\\/").encode("utf-8"))
    return path.stat().st_size


def parse_timestamp(value: str) -> datetime:
    """Parse a Shopify ISO-8601 timestamp; naive values are taken as UTC."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def is_asset_same(
    path: Path,
    checksum: str | None = None,
    updated_at: str | None = None,
    size: int | None = None,
    skew_seconds: int = DEFAULT_CLOCK_SKEW_SECONDS,
) -> bool:
    """Decide whether the local file at *path* matches a remote asset.

    Args:
        path: Local file location.
        checksum: Remote MD5 hex digest, if reported.
        updated_at: Remote modification timestamp (ISO-8601).
        size: Remote size in bytes.
        skew_seconds: Tolerance added to the local mtime.

    Returns:
        True if the local copy can be kept as-is.
    """
    if not path.is_file():
        return False

    if checksum and md5_file(path) == checksum.lower():
        return True

    if size is None or not updated_at:
        return False
    if logical_size(path) != size:
        return False

    try:
        remote_time = parse_timestamp(updated_at).timestamp()
    except ValueError:
        logger.debug("Unparseable updated_at %r for %s", updated_at, path)
        return False
    return path.stat().st_mtime + skew_seconds >= remote_time
