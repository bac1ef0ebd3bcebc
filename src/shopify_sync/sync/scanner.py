"""Local tree scanner."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from .ignore import IgnoreCache


def list_files(
    base_dir: Path,
    sub_dirs: Iterable[str],
    ignore: IgnoreCache | None = None,
) -> set[str]:
    """Collect files below *sub_dirs* of *base_dir*.

    Missing sub-directories are skipped.  Paths matching the ignore rules
    of *base_dir* are left out.

    Returns:
        Relative POSIX paths (``"assets/theme.css"``).
    """
    base_dir = Path(base_dir)
    found: set[str] = set()
    for sub_dir in sub_dirs:
        root = base_dir / sub_dir
        if not root.is_dir():
            continue
        for path in sorted(root.rglob("*")):
            if not path.is_file():
                continue
            rel = path.relative_to(base_dir).as_posix()
            if ignore is not None and ignore.matches(base_dir, rel):
                continue
            found.add(rel)
    return found
