"""Theme asset driver.

Assets map one-to-one onto files under the theme directories
(``assets/``, ``layout/``, ``sections/``, ``templates/``, ``config/``,
``locales/``, ``snippets/``).  When the remote holds both ``K`` and
``K.liquid``, ``K`` is a compiled artifact and is dropped.

Pull: an asset with a ``public_url`` is downloaded from the CDN; any other
asset is fetched individually and stored from its ``value`` (JSON is
re-serialized canonically) or its base64 ``attachment``.

Push: text assets are uploaded as ``value``, everything else as a base64
``attachment``.
"""

from __future__ import annotations

import base64
import json
import logging
from pathlib import PurePosixPath
from typing import Any

from ..core.async_utils import run_sync
from ..file_handler import read_text
from ..validators import validate_asset_key
from .driver import ResourceDriver, SyncContext
from .fingerprint import is_asset_same
from .models import SyncResult
from .reconciler import plan_pull, plan_push
from .resources import Asset, RemoteItem, ResourceKind, Theme, remote_item
from .scanner import list_files
from .serializer import serialize

logger = logging.getLogger(__name__)

KNOWN_ASSET_DIRS = (
    "assets",
    "layout",
    "sections",
    "templates",
    "config",
    "locales",
    "snippets",
)

TEXT_SUFFIXES = frozenset(
    {
        ".liquid",
        ".json",
        ".js",
        ".css",
        ".scss",
        ".svg",
        ".html",
        ".txt",
        ".map",
    }
)


def dedupe_liquid(assets: list[Asset]) -> list[Asset]:
    """Drop ``K`` wherever ``K.liquid`` also exists."""
    keys = {asset.key for asset in assets}
    return [a for a in assets if f"{a.key}.liquid" not in keys]


def asset_dirs(assets: list[Asset]) -> list[str]:
    """Known theme directories plus any top-level directory the remote uses."""
    dirs = list(KNOWN_ASSET_DIRS)
    for asset in assets:
        top = asset.key.split("/", 1)[0]
        if "/" in asset.key and top not in dirs:
            dirs.append(top)
    return dirs


def is_text_key(key: str) -> bool:
    return PurePosixPath(key).suffix.lower() in TEXT_SUFFIXES


class AssetDriver(ResourceDriver):
    """Pull and push the assets of one theme."""

    kind = ResourceKind.ASSET

    def __init__(self, context: SyncContext, theme: Theme) -> None:
        super().__init__(context)
        self.theme = theme

    async def fetch(self) -> list[Asset]:
        raw = await self.call(self.client.get_assets, self.theme.id)
        assets = dedupe_liquid([Asset.model_validate(a) for a in raw])
        valid = []
        for asset in assets:
            ok, message = validate_asset_key(asset.key)
            if ok:
                valid.append(asset)
            else:
                logger.warning("Skipping remote asset %r: %s", asset.key, message)
        return valid

    def _same(self, item: RemoteItem) -> bool:
        return is_asset_same(
            self.local_path(item.key),
            checksum=item.checksum,
            updated_at=item.updated_at,
            size=item.size,
            skew_seconds=self.context.clock_skew_seconds,
        )

    async def _scan(self, assets: list[Asset]) -> set[str]:
        return await run_sync(
            list_files, self.output_dir, asset_dirs(assets), self.context.ignore
        )

    # ------------------------------------------------------------------
    # Pull
    # ------------------------------------------------------------------

    async def pull(self) -> list[SyncResult]:
        assets = await self.fetch()
        local = await self._scan(assets)
        items = [remote_item(a, self.kind) for a in assets]
        plan = await run_sync(
            plan_pull, items, local, self._same, self.context.force
        )
        return await self.apply_pull(plan, self._materialize)

    async def _materialize(self, key: str, payload: dict[str, Any]) -> None:
        url = payload.get("public_url")
        if url:
            await self.save(key, await self.call(self.client.download, url))
            return

        detail = await self.call(self.client.get_asset, self.theme.id, key)
        if detail.get("value") is not None:
            value = detail["value"]
            if key.endswith(".json"):
                try:
                    value = serialize(json.loads(value))
                except ValueError:
                    # Generated JSON can carry a /* comment */ header
                    logger.debug("Keeping %s as sent: not plain JSON", key)
            await self.save(key, value)
        elif detail.get("attachment") is not None:
            await self.save(key, base64.b64decode(detail["attachment"]))
        else:
            logger.warning("Asset %s has no content", key)

    # ------------------------------------------------------------------
    # Push
    # ------------------------------------------------------------------

    async def push(self) -> list[SyncResult]:
        assets = await self.fetch()
        local = await self._scan(assets)
        items = [remote_item(a, self.kind) for a in assets]
        force = self.context.force
        plan = await run_sync(
            plan_push,
            items,
            local,
            lambda key: {"key": key},
            same=lambda item, _doc: not force and self._same(item),
        )
        return await self.apply_push(
            plan, self._upload, self._upload, self._delete
        )

    async def _upload(self, key: str, payload: dict[str, Any]) -> None:
        path = self.local_path(key)
        if is_text_key(key):
            value = await run_sync(read_text, path)
            await self.call(
                self.client.update_asset, self.theme.id, key, value=value
            )
        else:
            data = await run_sync(path.read_bytes)
            await self.call(
                self.client.update_asset,
                self.theme.id,
                key,
                attachment=base64.b64encode(data).decode("ascii"),
            )

    async def _delete(self, key: str, payload: dict[str, Any]) -> None:
        await self.call(self.client.delete_asset, self.theme.id, key)
