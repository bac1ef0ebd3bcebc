"""Page and blog-article drivers.

Pages and articles are stored as sidecar pairs (see ``mapper``): a
canonical JSON metadata file whose ``body_html`` points at a neighbouring
``.html`` file.  Server-assigned identity fields are never written;
timestamps are written but ignored when deciding whether to push.
"""

from __future__ import annotations

import json
import logging
from pathlib import PurePosixPath
from typing import Any

from ..core.async_utils import run_sync
from ..core.pagination import fetch_all
from ..file_handler import read_text
from ..validators import validate_handle
from .driver import ResourceDriver, SyncContext
from .mapper import SidecarMapper, SidecarSource
from .models import SyncAction, SyncResult
from .reconciler import plan_pull, plan_push
from .resources import (
    POLICIES,
    Blog,
    BlogArticle,
    Page,
    RemoteItem,
    ResourceKind,
)
from .scanner import list_files
from .serializer import serialize

logger = logging.getLogger(__name__)


class SidecarDriver(ResourceDriver):
    """Mirror a paged collection of pages/articles as sidecar pairs."""

    schema: type[Page] = Page

    def __init__(self, context: SyncContext, root: str) -> None:
        super().__init__(context)
        self.mapper = SidecarMapper(root)
        self.policy = POLICIES[self.kind]

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------

    def fetch_page(self, since_id: int) -> list[dict[str, Any]]:
        raise NotImplementedError

    def fetch_count(self) -> int:
        raise NotImplementedError

    async def create(self, key: str, payload: dict[str, Any]) -> None:
        raise NotImplementedError

    async def update(self, key: str, payload: dict[str, Any]) -> None:
        raise NotImplementedError

    async def delete(self, key: str, payload: dict[str, Any]) -> None:
        raise NotImplementedError

    # ------------------------------------------------------------------
    # Shared
    # ------------------------------------------------------------------

    async def fetch(self) -> list[Page]:
        raw = await self.call(
            fetch_all, self.fetch_page, self.fetch_count, self.context.page_size
        )
        items = []
        for data in raw:
            item = self.schema.model_validate(data)
            ok, message = validate_handle(item.handle)
            if ok:
                items.append(item)
            else:
                logger.warning("Skipping %r: %s", item.handle, message)
        return items

    async def _scan(self) -> set[str]:
        return await run_sync(
            list_files, self.output_dir, [self.mapper.root], self.context.ignore
        )

    def describe(
        self, action: SyncAction, key: str, payload: dict[str, Any]
    ) -> str:
        if action in (
            SyncAction.CREATE_REMOTE,
            SyncAction.UPDATE_REMOTE,
            SyncAction.DELETE_REMOTE,
        ):
            key = f"{self.mapper.root}/{key}"
        return super().describe(action, key, payload)

    # ------------------------------------------------------------------
    # Pull
    # ------------------------------------------------------------------

    def metadata(self, item: Page) -> dict[str, Any]:
        """The JSON sidecar document for *item*."""
        doc = item.document(exclude=self.policy.ignore_fields)
        doc["body_html"] = {"file": f"{item.handle}.html"}
        return doc

    def _file_same(self, item: RemoteItem) -> bool:
        path = self.local_path(item.key)
        return path.is_file() and path.read_bytes() == item.payload[
            "text"
        ].encode("utf-8")

    async def pull(self) -> list[SyncResult]:
        remote = []
        for item in await self.fetch():
            published = item.is_published
            remote.append(
                RemoteItem(
                    id=item.id,
                    key=self.mapper.json_path(item.handle, published),
                    payload={"text": serialize(self.metadata(item))},
                )
            )
            remote.append(
                RemoteItem(
                    id=item.id,
                    key=self.mapper.html_path(item.handle, published),
                    payload={"text": item.body_html or ""},
                )
            )
        local = await self._scan()
        plan = await run_sync(
            plan_pull, remote, local, self._file_same, self.context.force
        )
        return await self.apply_pull(plan, self._write)

    async def _write(self, key: str, payload: dict[str, Any]) -> None:
        await self.save(key, payload["text"])

    # ------------------------------------------------------------------
    # Push
    # ------------------------------------------------------------------

    def read_local(self, source: SidecarSource) -> dict[str, Any]:
        """Load the outgoing document for one sidecar pair.

        Raises:
            ValueError: If the metadata is not a JSON object or its body
                file cannot be read.
        """
        doc = json.loads(read_text(self.local_path(source.json_path)))
        if not isinstance(doc, dict):
            raise ValueError(f"{source.json_path}: expected a JSON object")

        body = doc.get("body_html")
        if isinstance(body, dict) and body.get("file"):
            body_rel = (
                PurePosixPath(source.json_path).parent / body["file"]
            ).as_posix()
        elif body is None:
            body_rel = source.html_path
        else:
            body_rel = None
        if body_rel is not None:
            try:
                doc["body_html"] = read_text(self.local_path(body_rel))
            except OSError as exc:
                raise ValueError(f"{body_rel}: {exc}") from exc

        excluded = {"id"}
        if not source.published:
            excluded.add("published_at")
        doc = {k: v for k, v in doc.items() if k not in excluded}
        doc["handle"] = source.handle
        doc["published"] = source.published
        return doc

    async def push(self) -> list[SyncResult]:
        remote = [
            RemoteItem(
                id=item.id,
                key=item.handle,
                payload={
                    **item.document(),
                    # Pull writes a null body as an empty .html file
                    "body_html": item.body_html or "",
                    "published": item.is_published,
                },
            )
            for item in await self.fetch()
        ]
        sources = self.mapper.discover(await self._scan())
        plan = await run_sync(
            plan_push,
            remote,
            sources.keys(),
            lambda handle: self.read_local(sources[handle]),
            self.policy.compare_ignore_fields,
        )
        return await self.apply_push(plan, self.create, self.update, self.delete)


class PageDriver(SidecarDriver):
    kind = ResourceKind.PAGE
    schema = Page

    def __init__(self, context: SyncContext) -> None:
        super().__init__(context, "pages")

    def fetch_page(self, since_id: int) -> list[dict[str, Any]]:
        return self.client.get_pages(since_id, self.context.page_size)

    def fetch_count(self) -> int:
        return self.client.get_pages_count()

    async def create(self, key: str, payload: dict[str, Any]) -> None:
        await self.call(self.client.create_page, payload)

    async def update(self, key: str, payload: dict[str, Any]) -> None:
        await self.call(self.client.update_page, payload["id"], payload)

    async def delete(self, key: str, payload: dict[str, Any]) -> None:
        await self.call(self.client.delete_page, payload["id"])


class BlogArticleDriver(SidecarDriver):
    kind = ResourceKind.BLOG_ARTICLE
    schema = BlogArticle

    def __init__(self, context: SyncContext, blog: Blog) -> None:
        super().__init__(context, f"blogs/{blog.handle}")
        self.blog = blog

    def fetch_page(self, since_id: int) -> list[dict[str, Any]]:
        return self.client.get_blog_articles(
            self.blog.id, since_id, self.context.page_size
        )

    def fetch_count(self) -> int:
        return self.client.get_blog_articles_count(self.blog.id)

    async def create(self, key: str, payload: dict[str, Any]) -> None:
        await self.call(self.client.create_blog_article, self.blog.id, payload)

    async def update(self, key: str, payload: dict[str, Any]) -> None:
        await self.call(
            self.client.update_blog_article,
            self.blog.id,
            payload["id"],
            payload,
        )

    async def delete(self, key: str, payload: dict[str, Any]) -> None:
        await self.call(
            self.client.delete_blog_article, self.blog.id, payload["id"]
        )


def select_blogs(blogs: list[Blog], selector: int | str | None) -> list[Blog]:
    """Filter *blogs* by numeric id or handle; None selects all."""
    if selector is None:
        return list(blogs)
    if isinstance(selector, int) or str(selector).isdigit():
        blog_id = int(selector)
        return [b for b in blogs if b.id == blog_id]
    return [b for b in blogs if b.handle == selector]
