"""Redirect and script-tag drivers.

Both kinds are small flat records, so each lives in a single CSV file at
the root of the output directory:

- ``redirects.csv`` -- ``Redirect from,Redirect to``, keyed by path
- ``scripts.csv`` -- ``src,event,scope``, keyed by src

The first row is always a header.  Rows that do not look like a valid
record are skipped.
"""

from __future__ import annotations

import csv
import io
import logging
from typing import Any

from ..core.async_utils import run_sync
from ..core.pagination import fetch_all
from ..file_handler import read_text
from .driver import ResourceDriver
from .models import SyncAction, SyncResult
from .reconciler import plan_pull, plan_push
from .resources import (
    POLICIES,
    Redirect,
    RemoteItem,
    ResourceKind,
    ScriptTag,
    ShopifyResource,
)

logger = logging.getLogger(__name__)


class CsvTableDriver(ResourceDriver):
    """Mirror a paged collection as one CSV file.

    Subclasses set the file name, header, the resource field behind each
    column, and the client calls.
    """

    file_name: str
    header: tuple[str, ...]
    fields: tuple[str, ...]
    schema: type[ShopifyResource]

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------

    def fetch_page(self, since_id: int) -> list[dict[str, Any]]:
        raise NotImplementedError

    def fetch_count(self) -> int:
        raise NotImplementedError

    def accept(self, doc: dict[str, str]) -> bool:
        return True

    # ------------------------------------------------------------------
    # CSV
    # ------------------------------------------------------------------

    @property
    def identity_field(self) -> str:
        return POLICIES[self.kind].identity_field

    def render(self, resources: list[ShopifyResource]) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(self.header)
        for resource in resources:
            writer.writerow([getattr(resource, f) for f in self.fields])
        return buffer.getvalue()

    def parse(self, text: str) -> dict[str, dict[str, str]]:
        """Parse CSV text into documents keyed by identity; header skipped."""
        docs: dict[str, dict[str, str]] = {}
        rows = csv.reader(io.StringIO(text))
        next(rows, None)
        for row in rows:
            cells = [cell.strip() for cell in row]
            cells += [""] * (len(self.fields) - len(cells))
            doc = dict(zip(self.fields, cells))
            if not self.accept(doc):
                if any(cells):
                    logger.debug("Skipping %s row: %s", self.file_name, row)
                continue
            key = doc[self.identity_field]
            if key in docs:
                logger.warning(
                    "Duplicate %s entry for %s; keeping the first",
                    self.file_name,
                    key,
                )
                continue
            docs[key] = doc
        return docs

    def project(self, resource: ShopifyResource) -> dict[str, Any]:
        """The columns of *resource*, plus its id."""
        doc: dict[str, Any] = {f: getattr(resource, f) for f in self.fields}
        doc["id"] = resource.id
        return doc

    # ------------------------------------------------------------------
    # Sync
    # ------------------------------------------------------------------

    async def fetch(self) -> list[ShopifyResource]:
        raw = await self.call(
            fetch_all, self.fetch_page, self.fetch_count, self.context.page_size
        )
        return [self.schema.model_validate(r) for r in raw]

    async def pull(self) -> list[SyncResult]:
        text = self.render(await self.fetch())
        path = self.local_path(self.file_name)
        local = {self.file_name} if path.is_file() else set()

        def _same(item: RemoteItem) -> bool:
            return (
                path.is_file()
                and path.read_bytes() == item.payload["text"].encode("utf-8")
            )

        plan = await run_sync(
            plan_pull,
            [RemoteItem(key=self.file_name, payload={"text": text})],
            local,
            _same,
            self.context.force,
        )
        return await self.apply_pull(plan, self._write)

    async def _write(self, key: str, payload: dict[str, Any]) -> None:
        await self.save(key, payload["text"])

    async def push(self) -> list[SyncResult]:
        path = self.local_path(self.file_name)
        if not path.is_file():
            logger.warning("%s not found; nothing to push", self.file_name)
            return []
        docs = self.parse(await run_sync(read_text, path))
        items = [
            RemoteItem(
                id=r.id,
                key=getattr(r, self.identity_field),
                payload=self.project(r),
            )
            for r in await self.fetch()
        ]
        plan = plan_push(
            items,
            docs.keys(),
            docs.get,
            ignore_fields=POLICIES[self.kind].compare_ignore_fields,
        )
        return await self.apply_push(plan, self.create, self.update, self.delete)

    async def create(self, key: str, payload: dict[str, Any]) -> None:
        raise NotImplementedError

    async def update(self, key: str, payload: dict[str, Any]) -> None:
        raise NotImplementedError

    async def delete(self, key: str, payload: dict[str, Any]) -> None:
        raise NotImplementedError


class RedirectDriver(CsvTableDriver):
    kind = ResourceKind.REDIRECT
    file_name = "redirects.csv"
    header = ("Redirect from", "Redirect to")
    fields = ("path", "target")
    schema = Redirect

    def fetch_page(self, since_id: int) -> list[dict[str, Any]]:
        return self.client.get_redirects(since_id, self.context.page_size)

    def fetch_count(self) -> int:
        return self.client.get_redirects_count()

    def accept(self, doc: dict[str, str]) -> bool:
        return doc["path"].startswith("/") and bool(doc["target"])

    def describe(
        self, action: SyncAction, key: str, payload: dict[str, Any]
    ) -> str:
        if action == SyncAction.DELETE_REMOTE:
            return f"DELETE 302: {key}"
        if action in (SyncAction.CREATE_REMOTE, SyncAction.UPDATE_REMOTE):
            verb = "CREATE" if action == SyncAction.CREATE_REMOTE else "UPDATE"
            return f"{verb} 302: {key} => {payload['target']}"
        return super().describe(action, key, payload)

    async def create(self, key: str, payload: dict[str, Any]) -> None:
        await self.call(
            self.client.create_redirect, payload["path"], payload["target"]
        )

    async def update(self, key: str, payload: dict[str, Any]) -> None:
        await self.call(
            self.client.update_redirect,
            payload["id"],
            payload["path"],
            payload["target"],
        )

    async def delete(self, key: str, payload: dict[str, Any]) -> None:
        await self.call(self.client.delete_redirect, payload["id"])


class ScriptTagDriver(CsvTableDriver):
    kind = ResourceKind.SCRIPT_TAG
    file_name = "scripts.csv"
    header = ("src", "event", "scope")
    fields = ("src", "event", "display_scope")
    schema = ScriptTag

    def fetch_page(self, since_id: int) -> list[dict[str, Any]]:
        return self.client.get_script_tags(since_id, self.context.page_size)

    def fetch_count(self) -> int:
        return self.client.get_script_tags_count()

    def accept(self, doc: dict[str, str]) -> bool:
        if not doc["src"].startswith(("http://", "https://")):
            return False
        doc["event"] = doc["event"] or "onload"
        doc["display_scope"] = doc["display_scope"] or "all"
        return True

    def describe(
        self, action: SyncAction, key: str, payload: dict[str, Any]
    ) -> str:
        if action in (SyncAction.CREATE_REMOTE, SyncAction.UPDATE_REMOTE):
            verb = "CREATE" if action == SyncAction.CREATE_REMOTE else "UPDATE"
            return (
                f"{verb} SCRIPT: {key} "
                f"({payload['event']}, {payload['display_scope']})"
            )
        if action == SyncAction.DELETE_REMOTE:
            return f"DELETE SCRIPT: {key}"
        return super().describe(action, key, payload)

    async def create(self, key: str, payload: dict[str, Any]) -> None:
        await self.call(
            self.client.create_script_tag,
            payload["src"],
            payload["event"],
            payload["display_scope"],
        )

    async def update(self, key: str, payload: dict[str, Any]) -> None:
        await self.call(
            self.client.update_script_tag,
            payload["id"],
            payload["src"],
            payload["event"],
            payload["display_scope"],
        )

    async def delete(self, key: str, payload: dict[str, Any]) -> None:
        await self.call(self.client.delete_script_tag, payload["id"])
