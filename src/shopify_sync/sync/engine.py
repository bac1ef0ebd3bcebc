"""Store-level orchestration of pulls and pushes across resource kinds.

``ShopSync`` owns one ``SyncContext`` (and so one ignore cache) and runs
the per-kind drivers in a fixed order:

1. Theme assets, for the selected theme (``main`` unless named).
2. Redirects, script tags, pages and blog articles.  These are store-wide
   rather than per-theme, so by default they only sync when the selected
   theme is the main theme.  ``theme_check=False`` lifts that guard.

Each pull/push returns a ``SyncReport``.  A missing theme or blog is
logged and yields an empty result; transport errors propagate.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime, timezone
from pathlib import Path

import requests

from ..core.async_utils import run_sync_limited
from ..core.client import ShopifyClient
from ..core.pagination import fetch_all
from ..validators import validate_handle
from .assets import AssetDriver
from .content import BlogArticleDriver, PageDriver, select_blogs
from .driver import ResourceDriver, SyncContext
from .fingerprint import DEFAULT_CLOCK_SKEW_SECONDS
from .models import SyncReport, SyncResult
from .resources import Blog, ResourceKind, Theme
from .tables import RedirectDriver, ScriptTagDriver

logger = logging.getLogger(__name__)

# Store-wide kinds, in execution order.
STORE_KINDS = (
    ResourceKind.REDIRECT,
    ResourceKind.SCRIPT_TAG,
    ResourceKind.PAGE,
    ResourceKind.BLOG_ARTICLE,
)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def kinds_from_flags(
    assets: bool = True,
    redirects: bool = True,
    script_tags: bool = True,
    pages: bool = True,
    blogs: bool = True,
) -> list[ResourceKind]:
    """Translate per-kind on/off switches into a kind list."""
    flags = {
        ResourceKind.ASSET: assets,
        ResourceKind.REDIRECT: redirects,
        ResourceKind.SCRIPT_TAG: script_tags,
        ResourceKind.PAGE: pages,
        ResourceKind.BLOG_ARTICLE: blogs,
    }
    return [kind for kind, enabled in flags.items() if enabled]


class ShopSync:
    """Pull and push one store's content.

    Args:
        client: Shopify transport.
        output_dir: Root of the local tree.
        dry_run: Log and report actions without executing them.
        force: Transfer every item regardless of equality checks.
        clock_skew_seconds: Tolerance for asset mtime comparison.
        page_size: Page size for paged listings.
    """

    def __init__(
        self,
        client: ShopifyClient,
        output_dir: Path,
        *,
        dry_run: bool = False,
        force: bool = False,
        clock_skew_seconds: int = DEFAULT_CLOCK_SKEW_SECONDS,
        page_size: int = 250,
    ) -> None:
        self.client = client
        self.context = SyncContext(
            client=client,
            output_dir=Path(output_dir),
            dry_run=dry_run,
            force=force,
            clock_skew_seconds=clock_skew_seconds,
            page_size=page_size,
        )

    # ------------------------------------------------------------------
    # Themes
    # ------------------------------------------------------------------

    async def list_themes(self) -> list[Theme]:
        raw = await run_sync_limited(self.client.get_themes)
        return [Theme.model_validate(t) for t in raw]

    @staticmethod
    def _match_theme(themes: list[Theme], name: str | None) -> Theme | None:
        for theme in themes:
            if name is None and theme.is_main:
                return theme
            if name is not None and theme.name == name:
                return theme
        return None

    async def find_theme(self, name: str | None = None) -> Theme | None:
        """Find a theme by name, or the main theme when *name* is None."""
        theme = self._match_theme(await self.list_themes(), name)
        if theme is None:
            logger.warning("Theme not found: %s", name or "(main)")
        return theme

    async def publish_theme(self, name: str) -> Theme | None:
        """Make the named theme the main theme.

        Returns:
            The theme, or None if no theme has that name.
        """
        theme = await self.find_theme(name)
        if theme is None:
            return None
        if theme.is_main:
            logger.info("Theme '%s' is already main", name)
            return theme
        logger.info("PUBLISH: %s", name)
        if self.context.dry_run:
            return theme
        updated = await run_sync_limited(
            self.client.update_theme, theme.id, role="main"
        )
        return Theme.model_validate(updated)

    async def init_theme(self, name: str, src: str | None = None) -> Theme:
        """Create an unpublished theme unless one with *name* exists.

        Args:
            name: Theme name.
            src: Optional URL of a zip archive to seed the theme from.
        """
        existing = self._match_theme(await self.list_themes(), name)
        if existing is not None:
            logger.info("Theme '%s' already exists", name)
            return existing
        logger.info("CREATE THEME: %s", name)
        if self.context.dry_run:
            return Theme(name=name)
        created = await run_sync_limited(self.client.create_theme, name, src)
        return Theme.model_validate(created)

    # ------------------------------------------------------------------
    # Blogs
    # ------------------------------------------------------------------

    async def resolve_blogs(self, selector: int | str | None = None) -> list[Blog]:
        """Blogs to sync: one by id or handle, or all when *selector* is None."""
        if selector is not None and str(selector).isdigit():
            try:
                raw = await run_sync_limited(self.client.get_blog, int(selector))
            except requests.HTTPError as exc:
                if exc.response is not None and exc.response.status_code == 404:
                    logger.warning("Blog not found: %s", selector)
                    return []
                raise
            return [Blog.model_validate(raw)]

        page_size = self.context.page_size
        raw_blogs = await run_sync_limited(
            fetch_all,
            lambda since_id: self.client.get_blogs(since_id, page_size),
            self.client.get_blogs_count,
            page_size,
        )
        blogs = select_blogs(
            [Blog.model_validate(b) for b in raw_blogs], selector
        )
        if selector is not None and not blogs:
            logger.warning("Blog not found: %s", selector)
        return blogs

    async def _drivers(
        self, kind: ResourceKind, blog: int | str | None
    ) -> list[ResourceDriver]:
        match kind:
            case ResourceKind.REDIRECT:
                return [RedirectDriver(self.context)]
            case ResourceKind.SCRIPT_TAG:
                return [ScriptTagDriver(self.context)]
            case ResourceKind.PAGE:
                return [PageDriver(self.context)]
            case ResourceKind.BLOG_ARTICLE:
                drivers: list[ResourceDriver] = []
                for b in await self.resolve_blogs(blog):
                    ok, message = validate_handle(b.handle)
                    if not ok:
                        logger.warning("Skipping blog %r: %s", b.handle, message)
                        continue
                    drivers.append(BlogArticleDriver(self.context, b))
                return drivers
        raise ValueError(f"Not a store-wide kind: {kind}")

    # ------------------------------------------------------------------
    # Pull / push
    # ------------------------------------------------------------------

    async def pull(
        self,
        kinds: Iterable[ResourceKind] | None = None,
        theme: str | None = None,
        theme_check: bool = True,
        blog: int | str | None = None,
    ) -> SyncReport:
        """Mirror the remote store onto the local tree."""
        return await self._run("pull", kinds, theme, theme_check, blog)

    async def push(
        self,
        kinds: Iterable[ResourceKind] | None = None,
        theme: str | None = None,
        theme_check: bool = True,
        blog: int | str | None = None,
    ) -> SyncReport:
        """Mirror the local tree onto the remote store."""
        return await self._run("push", kinds, theme, theme_check, blog)

    async def _run(
        self,
        operation: str,
        kinds: Iterable[ResourceKind] | None,
        theme_name: str | None,
        theme_check: bool,
        blog: int | str | None,
    ) -> SyncReport:
        started_at = _now()
        selected = set(kinds) if kinds is not None else set(ResourceKind)
        results: list[SyncResult] = []

        theme = await self.find_theme(theme_name)

        if ResourceKind.ASSET in selected and theme is not None:
            driver = AssetDriver(self.context, theme)
            results.extend(await getattr(driver, operation)())

        store_kinds = [k for k in STORE_KINDS if k in selected]
        if store_kinds and theme_check and (theme is None or not theme.is_main):
            logger.warning(
                "Skipping %s: theme '%s' is not the main theme",
                ", ".join(k.value for k in store_kinds),
                theme.name if theme else theme_name,
            )
            store_kinds = []

        for kind in store_kinds:
            for driver in await self._drivers(kind, blog):
                results.extend(await getattr(driver, operation)())

        report = SyncReport(
            operation=operation,
            theme=theme.name if theme else theme_name,
            dry_run=self.context.dry_run,
            results=results,
            started_at=started_at,
            completed_at=_now(),
        )
        logger.debug("%s", report.summary())
        return report
