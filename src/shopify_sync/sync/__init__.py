"""Local/remote reconciliation for Shopify store content.

Mirrors theme assets, pages, blog articles, redirects and script tags
between a Shopify store and a local directory, in either direction.

Architecture
------------
There is no sync-state archive.  Every pass compares the remote
collection with the local tree directly and applies the minimal set of
create/update/delete operations to the side being mirrored onto.
Equality of structured documents is decided on their canonical
serialization, so key order and whitespace never count as changes.

Modules:

- ``engine``      -- ``ShopSync``: themes plus pull/push across kinds.
- ``driver``      -- ``SyncContext`` and plan execution.
- ``assets``, ``tables``, ``content`` -- per-kind drivers.
- ``reconciler``  -- ``plan_pull`` / ``plan_push``.
- ``serializer``  -- canonical JSON rendering and ``is_same``.
- ``fingerprint`` -- cheap asset equality (checksum, size, mtime).
- ``ignore``      -- ``.shopifyignore`` rules.
- ``scanner``     -- local file listing.
- ``mapper``      -- sidecar paths for pages/articles.
- ``resources``   -- typed resources and per-kind field policies.
- ``models``      -- ``SyncPlan``, ``SyncResult``, ``SyncReport``.
- ``reporter``    -- human-readable and JSON report formatting.

Usage example
-------------
::

    from pathlib import Path
    from shopify_sync.config import load_config
    from shopify_sync.core.client import ShopifyClient
    from shopify_sync.sync import ShopSync, format_sync_report

    client = ShopifyClient(load_config())
    shop = ShopSync(client, Path("./store"), dry_run=True)

    # Preview the pull
    print(format_sync_report(await shop.pull()))
"""

from .engine import ShopSync
from .models import SyncAction, SyncPlan, SyncReport, SyncResult
from .reporter import (
    format_dry_run_preview,
    format_sync_report,
    report_to_json,
)
from .resources import ResourceKind
from .serializer import canonical, is_same, serialize

__all__ = [
    "ResourceKind",
    "ShopSync",
    "SyncAction",
    "SyncPlan",
    "SyncReport",
    "SyncResult",
    "canonical",
    "format_dry_run_preview",
    "format_sync_report",
    "is_same",
    "report_to_json",
    "serialize",
]
