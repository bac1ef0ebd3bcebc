"""Plan local/remote reconciliation for one resource kind.

There is no sync-state archive: the remote collection and the local tree
are compared directly on every pass, so each function here is a pure
mapping from (remote items, local keys) to a ``SyncPlan``.  Callers
supply the filesystem-backed pieces (``same`` and ``read_local``).

Pull (local mirrors remote):
    remote-only or changed items are materialized, unchanged items are
    skipped, and local keys no remote item claims are deleted.

Push (remote mirrors local):
    local-only items are created, differing items are updated with the
    local document plus the remote ``id``, and remote-only items are
    deleted.  A key whose local document cannot be read is reported as
    an error and left untouched on both sides.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Any

from .models import SyncPlan
from .resources import RemoteItem
from .serializer import is_same

logger = logging.getLogger(__name__)


def plan_pull(
    remote: Iterable[RemoteItem],
    local_keys: Iterable[str],
    same: Callable[[RemoteItem], bool],
    force: bool = False,
) -> SyncPlan:
    """Plan a pull of *remote* onto the local view *local_keys*.

    Args:
        remote: Remote items, keyed by their local identity.
        local_keys: Keys currently present locally (ignored files excluded).
        same: Cheap equality predicate for one remote item.
        force: Materialize every remote item regardless of ``same``.

    Returns:
        Plan whose ``create``/``update`` hold remote payloads and whose
        ``delete`` holds local-only keys.
    """
    leftover = set(local_keys)
    create: dict[str, dict[str, Any]] = {}
    update: dict[str, dict[str, Any]] = {}
    skip: list[str] = []

    for item in remote:
        present = item.key in leftover
        leftover.discard(item.key)
        if not force and same(item):
            skip.append(item.key)
        elif present:
            update[item.key] = item.payload
        else:
            create[item.key] = item.payload

    delete: dict[str, dict[str, Any]] = {key: {} for key in sorted(leftover)}
    return SyncPlan(create=create, update=update, delete=delete, skip=skip)


def plan_push(
    remote: Iterable[RemoteItem],
    local_keys: Iterable[str],
    read_local: Callable[[str], dict[str, Any] | None],
    ignore_fields: Iterable[str] = (),
    same: Callable[[RemoteItem, dict[str, Any]], bool] | None = None,
) -> SyncPlan:
    """Plan a push of the local documents onto *remote*.

    Args:
        remote: Remote items keyed by identity.
        local_keys: Identity keys found locally.
        read_local: Loads the local document for a key.  Returns None when
            the item is incomplete locally; raises ``ValueError`` when the
            document is malformed.
        ignore_fields: Top-level fields excluded from comparison.
        same: Optional equality override; defaults to canonical comparison
            with *ignore_fields* removed.

    Returns:
        Plan whose ``create``/``update`` hold outgoing documents and whose
        ``delete`` holds remote payloads.
    """
    ignored = tuple(ignore_fields)
    remote_by_key = {item.key: item for item in remote}
    create: dict[str, dict[str, Any]] = {}
    update: dict[str, dict[str, Any]] = {}
    skip: list[str] = []
    errors: dict[str, str] = {}

    for key in sorted(set(local_keys)):
        item = remote_by_key.pop(key, None)
        try:
            local = read_local(key)
        except ValueError as exc:
            logger.warning("Cannot read local %s: %s", key, exc)
            errors[key] = str(exc)
            continue
        if local is None:
            if item is not None:
                # Incomplete locally counts as absent.
                remote_by_key[key] = item
            continue
        if item is None:
            create[key] = local
            continue
        unchanged = (
            same(item, local)
            if same is not None
            else is_same(item.payload, local, ignored)
        )
        if unchanged:
            skip.append(key)
        elif item.id is not None:
            update[key] = {**local, "id": item.id}
        else:
            update[key] = local

    delete = {key: item.payload for key, item in remote_by_key.items()}
    return SyncPlan(
        create=create, update=update, delete=delete, skip=skip, errors=errors
    )
