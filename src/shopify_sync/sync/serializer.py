"""Canonical, length-bounded JSON serializer.

Produces deterministic text for tree-structured documents.  The same
routine serves two purposes:

* **Stable files** -- JSON assets and page/article metadata are written
  in a diff-friendly layout: short nodes stay on one line, long nodes are
  exploded one child per line, and runs of scalars are packed onto shared
  lines up to ``max_length``.
* **Equality** -- ``is_same()`` compares canonical forms, so two
  documents that differ only in key order or incidental whitespace are
  equal.

Rendering is a recursive descent over a typed node tree
(``ScalarNode`` / ``SequenceNode`` / ``MappingNode``) built by
``to_node()``.  Mapping keys are always ordered through
``SerializeOptions.key_order``; pass ``key_order=None`` to keep insertion
order (and enable the compact fast path).
"""

from __future__ import annotations

import json
import math
import re
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Union

# ---------------------------------------------------------------------------
# Document nodes
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ScalarNode:
    """A string, number, boolean or null leaf."""

    value: str | int | float | bool | None


@dataclass(frozen=True, slots=True)
class SequenceNode:
    """An ordered list of child nodes."""

    items: tuple[Node, ...]


@dataclass(frozen=True, slots=True)
class MappingNode:
    """String-keyed children, kept in source order until rendered."""

    entries: tuple[tuple[str, Node], ...]


Node = Union[ScalarNode, SequenceNode, MappingNode]


def to_node(value: Any) -> Node:
    """Convert plain Python data (or a pydantic model) into a node tree.

    Raises:
        TypeError: If a value has no JSON representation.
    """
    if hasattr(value, "model_dump"):
        value = value.model_dump(exclude_unset=True)
    if value is None or isinstance(value, (str, bool, int, float)):
        return ScalarNode(value)
    if isinstance(value, Mapping):
        return MappingNode(
            tuple((str(k), to_node(v)) for k, v in value.items())
        )
    if isinstance(value, (list, tuple)):
        return SequenceNode(tuple(to_node(v) for v in value))
    raise TypeError(
        f"Object of type {type(value).__name__} is not serializable"
    )


# ---------------------------------------------------------------------------
# Options
# ---------------------------------------------------------------------------


def lexicographic(key: str) -> str:
    """Default mapping key order."""
    return key


def force_key_priority(
    keys: Iterable[str] = ("name", "value", "errors"),
) -> Callable[[str], tuple]:
    """Build a key order that puts *keys* first, in the given order.

    All remaining keys follow in lexicographic order.
    """
    priority = {key: index for index, key in enumerate(keys)}

    def _order(key: str) -> tuple:
        if key in priority:
            return (0, priority[key], key)
        return (1, 0, key)

    return _order


@dataclass(frozen=True, slots=True)
class SerializeOptions:
    """Layout options for ``serialize()``.

    Attributes:
        margins: Pad brackets with a space (``[ 1, 2 ]``).
        indent: Spaces per nesting level.  ``0`` disables line limits.
        max_length: Target maximum line length.
        wrap_scalars: Pack consecutive scalar children onto shared lines.
        key_order: Sort key for mapping keys; ``None`` keeps source order.
    """

    margins: bool = False
    indent: int = 2
    max_length: int = 80
    wrap_scalars: bool = True
    key_order: Callable[[str], Any] | None = lexicographic


DEFAULT_OPTIONS = SerializeOptions()


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------

# Quoted strings are matched whole so punctuation inside them is untouched.
_STRING_OR_PUNCT = re.compile(r'("(?:[^\\"]|\\.)*")|[:,\][}{]')


def _literal(value: str | int | float | bool | None) -> str:
    if isinstance(value, float) and not math.isfinite(value):
        return "null"
    return json.dumps(value, ensure_ascii=False)


def _compact(node: Node) -> str:
    match node:
        case ScalarNode(value=value):
            return _literal(value)
        case SequenceNode(items=items):
            return "[" + ",".join(_compact(child) for child in items) + "]"
        case MappingNode(entries=entries):
            return (
                "{"
                + ",".join(
                    f"{_literal(key)}:{_compact(child)}"
                    for key, child in entries
                )
                + "}"
            )
    raise TypeError(f"Unknown node: {node!r}")


def _pretty_margins(text: str, margins: bool) -> str:
    m = " " if margins else ""
    tokens = {
        "{": "{" + m,
        "[": "[" + m,
        "}": m + "}",
        "]": m + "]",
        ",": ", ",
        ":": ": ",
    }

    def _replace(match: re.Match) -> str:
        if match.group(1):
            return match.group(0)
        return tokens[match.group(0)]

    return _STRING_OR_PUNCT.sub(_replace, text)


def _is_wrappable(node: Node) -> bool:
    return isinstance(node, ScalarNode) and node.value is not None


class _Renderer:
    def __init__(self, options: SerializeOptions) -> None:
        self.options = options
        self.unit = " " * options.indent
        self.max_length: float = (
            options.max_length if options.indent > 0 else math.inf
        )
        self.margin = " " if options.margins else ""

    def render(self, node: Node, indent: str, reserved: int) -> str:
        compact = _compact(node)
        available = self.max_length - len(indent) - reserved

        if self.options.key_order is None and len(compact) <= available:
            pretty = _pretty_margins(compact, self.options.margins)
            if len(pretty) <= available:
                return pretty

        if isinstance(node, ScalarNode):
            return compact

        child_indent = indent + self.unit
        if isinstance(node, SequenceNode):
            last = len(node.items) - 1
            items = [
                self.render(child, child_indent, 0 if i == last else 1)
                for i, child in enumerate(node.items)
            ]
            wrappable = all(_is_wrappable(c) for c in node.items)
            opening, closing = "[", "]"
        else:
            entries = list(node.entries)
            if self.options.key_order is not None:
                order = self.options.key_order
                entries.sort(key=lambda entry: order(entry[0]))
            last = len(entries) - 1
            items = []
            for i, (key, child) in enumerate(entries):
                prefix = _literal(key) + ": "
                reserve = len(prefix) + (0 if i == last else 1)
                items.append(
                    prefix + self.render(child, child_indent, reserve)
                )
            wrappable = all(_is_wrappable(c) for _, c in entries)
            opening, closing = "{", "}"

        if self.options.wrap_scalars and wrappable:
            items = self._pack(items, child_indent)

        if not items:
            return compact

        single = ", ".join(items)
        margin = self.margin
        if len(single) + len(indent) + 2 + 2 * len(margin) < self.max_length:
            return opening + margin + single + margin + closing

        return (
            opening
            + "\n"
            + child_indent
            + (",\n" + child_indent).join(items)
            + "\n"
            + indent
            + closing
        )

    def _pack(self, items: list[str], indent: str) -> list[str]:
        packed: list[str] = []
        for item in items:
            if packed and (
                len(indent) + len(packed[-1]) + len(item) < self.max_length
            ):
                packed[-1] = packed[-1] + ", " + item
            else:
                packed.append(item)
        return packed


def serialize(doc: Any, options: SerializeOptions | None = None) -> str:
    """Render *doc* as canonical JSON text.

    Args:
        doc: Plain data (dict/list/scalars) or a pydantic model.
        options: Layout options; defaults to ``DEFAULT_OPTIONS``.

    Returns:
        JSON text that ``json.loads`` parses back to an equal document.
    """
    renderer = _Renderer(options or DEFAULT_OPTIONS)
    return renderer.render(to_node(doc), "", 0)


def canonical(doc: Any) -> str:
    """Return the canonical form used for equality checks."""
    return serialize(doc, DEFAULT_OPTIONS)


# ---------------------------------------------------------------------------
# Equality
# ---------------------------------------------------------------------------


def without_fields(doc: Any, fields: Iterable[str]) -> dict[str, Any]:
    """Return a top-level copy of *doc* minus *fields*.

    Neither the input document nor nested values are modified.
    """
    excluded = set(fields)
    if hasattr(doc, "model_dump"):
        return doc.model_dump(exclude=excluded, exclude_unset=True)
    return {k: v for k, v in doc.items() if k not in excluded}


def is_same(a: Any, b: Any, ignore_fields: Iterable[str] = ()) -> bool:
    """Compare two documents by canonical form, ignoring *ignore_fields*."""
    ignored = tuple(ignore_fields)
    return canonical(without_fields(a, ignored)) == canonical(
        without_fields(b, ignored)
    )
