"""Ignore rules for the local tree.

A ``.shopifyignore`` file at the root of the output directory lists one
glob per line.  Blank lines and ``#`` comments are skipped.  Each glob
compiles to an anchored, case-insensitive regex that matches the path
itself or anything beneath it.

Supported glob syntax:

* ``*``  any run of characters except ``/``
* ``**`` any run of characters, ``/`` included
* ``?``  one character except ``/``
* ``{a,b}`` alternation
* a leading ``/`` anchors the pattern at the root; a pattern with no
  other ``/`` matches at any depth (``*.json`` matches ``dir/a.json``)
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

logger = logging.getLogger(__name__)

IGNORE_FILE_NAME = ".shopifyignore"

_SPECIAL = re.compile(r"([/$^+.()=!|\[\]\\])")
_BRACES = re.compile(r"\{([^}]+)\}")
_STARS = re.compile(r"\*+")


def glob_to_regex(glob: str) -> re.Pattern[str] | None:
    """Compile a single ignore glob.

    Returns:
        A compiled pattern, or None for an empty glob.
    """
    glob = glob.strip()
    anchored = glob.startswith("/")
    glob = glob.strip("/")
    if not glob:
        return None

    floating = not anchored and "/" not in glob

    pattern = _SPECIAL.sub(r"\\\1", glob)
    pattern = pattern.replace("?", "[^/]")
    pattern = _BRACES.sub(
        lambda m: "(?:" + m.group(1).replace(",", "|") + ")", pattern
    )
    pattern = _STARS.sub(
        lambda m: ".*" if len(m.group(0)) > 1 else "[^/]*", pattern
    )
    pattern = pattern.replace(",", r"\,")

    prefix = "^(?:.*/)?" if floating else "^"
    return re.compile(prefix + pattern + "(?:$|/)", re.IGNORECASE)


class IgnoreRules:
    """Compiled ignore globs for one base directory."""

    def __init__(self, patterns: list[re.Pattern[str]] | None = None) -> None:
        self.patterns = patterns or []

    @classmethod
    def from_text(cls, text: str) -> IgnoreRules:
        patterns = []
        for line in text.splitlines():
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            compiled = glob_to_regex(line)
            if compiled is not None:
                patterns.append(compiled)
        return cls(patterns)

    @classmethod
    def load(cls, base_dir: Path) -> IgnoreRules:
        """Read ``.shopifyignore`` under *base_dir*; no file means no rules."""
        path = base_dir / IGNORE_FILE_NAME
        if not path.is_file():
            return cls()
        rules = cls.from_text(path.read_text(encoding="utf-8"))
        logger.debug(
            "Loaded %d ignore pattern(s) from %s", len(rules.patterns), path
        )
        return rules

    def matches(self, relative_path: str) -> bool:
        return any(p.search(relative_path) for p in self.patterns)


class IgnoreCache:
    """Per-run memo of ``IgnoreRules`` keyed by base directory.

    Rules are loaded on first use and never reloaded while the cache
    lives, so one sync pass sees a consistent rule set.
    """

    def __init__(self) -> None:
        self._rules: dict[Path, IgnoreRules] = {}

    def rules_for(self, base_dir: Path) -> IgnoreRules:
        key = Path(base_dir).resolve()
        rules = self._rules.get(key)
        if rules is None:
            rules = IgnoreRules.load(key)
            self._rules[key] = rules
        return rules

    def matches(self, base_dir: Path, relative_path: str) -> bool:
        """Return True if *relative_path* (POSIX) is ignored under *base_dir*."""
        return self.rules_for(base_dir).matches(relative_path)
