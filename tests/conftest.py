"""Shared pytest fixtures for shopify-sync tests."""

import base64
import hashlib
from typing import Any, Dict, List, Optional

import pytest
import requests

from shopify_sync.config import Config
from shopify_sync.core import async_utils
from shopify_sync.sync.driver import SyncContext


def pytest_addoption(parser):
    """Add custom CLI options for test filtering."""
    parser.addoption(
        "--run-live",
        action="store_true",
        default=False,
        help="Run tests that require a live Shopify store",
    )


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "live: mark test as requiring a live Shopify store"
    )


def pytest_collection_modifyitems(config, items):
    """Skip live tests unless --run-live is passed."""
    if config.getoption("--run-live"):
        return
    skip_live = pytest.mark.skip(reason="need --run-live option to run")
    for item in items:
        if "live" in item.keywords:
            item.add_marker(skip_live)


@pytest.fixture(autouse=True)
def _reset_semaphore(monkeypatch):
    """Each test starts without a request semaphore bound to an old loop."""
    monkeypatch.setattr(async_utils, "_semaphore", None)


@pytest.fixture
def mock_config():
    """Create a Config instance for testing."""
    return Config(
        store="test-shop.myshopify.com",
        access_token="shpat_test",
    )


# ---------------------------------------------------------------------------
# In-memory store
# ---------------------------------------------------------------------------


def _md5(data: bytes) -> str:
    return hashlib.md5(data).hexdigest()


class FakeShopifyClient:
    """Minimal ShopifyClient replacement backed by dicts.

    Every mutating call is recorded in ``calls`` as ``(method, *args)``.
    """

    def __init__(self, config: Optional[Config] = None) -> None:
        self.config = config or Config(
            store="test-shop.myshopify.com", access_token="shpat_test"
        )
        self.themes: List[Dict[str, Any]] = [
            {"id": 1, "name": "Live", "role": "main"},
            {"id": 2, "name": "Staging", "role": "unpublished"},
        ]
        self.assets: Dict[int, Dict[str, Dict[str, Any]]] = {1: {}, 2: {}}
        self.downloads: Dict[str, bytes] = {}
        self.redirects: Dict[int, Dict[str, Any]] = {}
        self.script_tags: Dict[int, Dict[str, Any]] = {}
        self.pages: Dict[int, Dict[str, Any]] = {}
        self.blogs: Dict[int, Dict[str, Any]] = {}
        self.articles: Dict[int, Dict[int, Dict[str, Any]]] = {}
        self.calls: List[tuple] = []
        self._next_id = 1000

    # -- seeding -----------------------------------------------------------

    def new_id(self) -> int:
        self._next_id += 1
        return self._next_id

    def add_asset(
        self,
        key: str,
        value: Optional[str] = None,
        attachment: Optional[bytes] = None,
        theme_id: int = 1,
        public_url: Optional[str] = None,
        updated_at: str = "2024-01-01T00:00:00Z",
    ) -> None:
        data = value.encode("utf-8") if value is not None else attachment or b""
        asset: Dict[str, Any] = {
            "key": key,
            "checksum": _md5(data),
            "size": len(data),
            "updated_at": updated_at,
        }
        if value is not None:
            asset["value"] = value
        if attachment is not None:
            asset["attachment"] = base64.b64encode(attachment).decode("ascii")
        if public_url:
            asset["public_url"] = public_url
            self.downloads[public_url] = data
        self.assets.setdefault(theme_id, {})[key] = asset

    def add_redirect(self, path: str, target: str) -> int:
        rid = self.new_id()
        self.redirects[rid] = {"id": rid, "path": path, "target": target}
        return rid

    def add_script_tag(
        self, src: str, event: str = "onload", display_scope: str = "all"
    ) -> int:
        sid = self.new_id()
        self.script_tags[sid] = {
            "id": sid,
            "src": src,
            "event": event,
            "display_scope": display_scope,
        }
        return sid

    def add_page(self, handle: str, **fields: Any) -> int:
        pid = self.new_id()
        self.pages[pid] = {"id": pid, "handle": handle, **fields}
        return pid

    def add_blog(self, handle: str, title: str = "") -> int:
        bid = self.new_id()
        self.blogs[bid] = {"id": bid, "handle": handle, "title": title}
        self.articles[bid] = {}
        return bid

    def add_article(self, blog_id: int, handle: str, **fields: Any) -> int:
        aid = self.new_id()
        self.articles[blog_id][aid] = {
            "id": aid,
            "handle": handle,
            "blog_id": blog_id,
            **fields,
        }
        return aid

    def mutations(self, prefix: str = "") -> List[tuple]:
        return [c for c in self.calls if c[0].startswith(prefix)]

    @staticmethod
    def _page(
        items: Dict[int, Dict[str, Any]], since_id: int, limit: Optional[int]
    ) -> List[Dict[str, Any]]:
        ordered = [items[k] for k in sorted(items) if k > since_id]
        return [dict(item) for item in ordered[: limit or 250]]

    # -- shop & themes -----------------------------------------------------

    def validate_connection(self) -> str:
        return "Test Shop"

    def get_themes(self) -> List[Dict[str, Any]]:
        return [dict(t) for t in self.themes]

    def create_theme(
        self, name: str, src: Optional[str] = None, role: str = "unpublished"
    ) -> Dict[str, Any]:
        self.calls.append(("create_theme", name, src))
        theme = {"id": self.new_id(), "name": name, "role": role}
        self.themes.append(theme)
        return dict(theme)

    def update_theme(self, theme_id: int, **fields: Any) -> Dict[str, Any]:
        self.calls.append(("update_theme", theme_id, fields))
        for theme in self.themes:
            if fields.get("role") == "main" and theme["role"] == "main":
                theme["role"] = "unpublished"
        for theme in self.themes:
            if theme["id"] == theme_id:
                theme.update(fields)
                return dict(theme)
        raise KeyError(theme_id)

    # -- assets ------------------------------------------------------------

    def get_assets(self, theme_id: int) -> List[Dict[str, Any]]:
        return [
            {k: v for k, v in a.items() if k not in ("value", "attachment")}
            for a in self.assets.get(theme_id, {}).values()
        ]

    def get_asset(self, theme_id: int, key: str) -> Dict[str, Any]:
        return dict(self.assets[theme_id][key])

    def update_asset(
        self,
        theme_id: int,
        key: str,
        value: Optional[str] = None,
        attachment: Optional[str] = None,
    ) -> Dict[str, Any]:
        self.calls.append(("update_asset", theme_id, key, value, attachment))
        asset = {"key": key}
        if attachment is not None:
            asset["attachment"] = attachment
        else:
            asset["value"] = value or ""
        self.assets.setdefault(theme_id, {})[key] = asset
        return dict(asset)

    def delete_asset(self, theme_id: int, key: str) -> None:
        self.calls.append(("delete_asset", theme_id, key))
        del self.assets[theme_id][key]

    def download(self, url: str) -> bytes:
        self.calls.append(("download", url))
        return self.downloads[url]

    # -- redirects -----------------------------------------------------------

    def get_redirects(
        self, since_id: int = 0, limit: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        return self._page(self.redirects, since_id, limit)

    def get_redirects_count(self) -> int:
        return len(self.redirects)

    def create_redirect(self, path: str, target: str) -> Dict[str, Any]:
        self.calls.append(("create_redirect", path, target))
        rid = self.add_redirect(path, target)
        return dict(self.redirects[rid])

    def update_redirect(
        self, redirect_id: int, path: str, target: str
    ) -> Dict[str, Any]:
        self.calls.append(("update_redirect", redirect_id, path, target))
        self.redirects[redirect_id].update(path=path, target=target)
        return dict(self.redirects[redirect_id])

    def delete_redirect(self, redirect_id: int) -> None:
        self.calls.append(("delete_redirect", redirect_id))
        del self.redirects[redirect_id]

    # -- script tags -----------------------------------------------------------

    def get_script_tags(
        self, since_id: int = 0, limit: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        return self._page(self.script_tags, since_id, limit)

    def get_script_tags_count(self) -> int:
        return len(self.script_tags)

    def create_script_tag(
        self, src: str, event: str = "onload", display_scope: str = "all"
    ) -> Dict[str, Any]:
        self.calls.append(("create_script_tag", src, event, display_scope))
        sid = self.add_script_tag(src, event, display_scope)
        return dict(self.script_tags[sid])

    def update_script_tag(
        self,
        script_tag_id: int,
        src: str,
        event: str = "onload",
        display_scope: str = "all",
    ) -> Dict[str, Any]:
        self.calls.append(
            ("update_script_tag", script_tag_id, src, event, display_scope)
        )
        self.script_tags[script_tag_id].update(
            src=src, event=event, display_scope=display_scope
        )
        return dict(self.script_tags[script_tag_id])

    def delete_script_tag(self, script_tag_id: int) -> None:
        self.calls.append(("delete_script_tag", script_tag_id))
        del self.script_tags[script_tag_id]

    # -- pages ---------------------------------------------------------------

    def get_pages(
        self, since_id: int = 0, limit: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        return self._page(self.pages, since_id, limit)

    def get_pages_count(self) -> int:
        return len(self.pages)

    def create_page(self, page: Dict[str, Any]) -> Dict[str, Any]:
        self.calls.append(("create_page", page))
        pid = self.add_page(**page)
        return dict(self.pages[pid])

    def update_page(self, page_id: int, page: Dict[str, Any]) -> Dict[str, Any]:
        self.calls.append(("update_page", page_id, page))
        self.pages[page_id].update(page)
        return dict(self.pages[page_id])

    def delete_page(self, page_id: int) -> None:
        self.calls.append(("delete_page", page_id))
        del self.pages[page_id]

    # -- blogs & articles -------------------------------------------------------

    def get_blogs(
        self, since_id: int = 0, limit: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        return self._page(self.blogs, since_id, limit)

    def get_blogs_count(self) -> int:
        return len(self.blogs)

    def get_blog(self, blog_id: int) -> Dict[str, Any]:
        if blog_id not in self.blogs:
            response = requests.Response()
            response.status_code = 404
            raise requests.HTTPError("404 Not Found", response=response)
        return dict(self.blogs[blog_id])

    def get_blog_articles(
        self, blog_id: int, since_id: int = 0, limit: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        return self._page(self.articles.get(blog_id, {}), since_id, limit)

    def get_blog_articles_count(self, blog_id: int) -> int:
        return len(self.articles.get(blog_id, {}))

    def create_blog_article(
        self, blog_id: int, article: Dict[str, Any]
    ) -> Dict[str, Any]:
        self.calls.append(("create_blog_article", blog_id, article))
        aid = self.add_article(blog_id, **article)
        return dict(self.articles[blog_id][aid])

    def update_blog_article(
        self, blog_id: int, article_id: int, article: Dict[str, Any]
    ) -> Dict[str, Any]:
        self.calls.append(("update_blog_article", blog_id, article_id, article))
        self.articles[blog_id][article_id].update(article)
        return dict(self.articles[blog_id][article_id])

    def delete_blog_article(self, blog_id: int, article_id: int) -> None:
        self.calls.append(("delete_blog_article", blog_id, article_id))
        del self.articles[blog_id][article_id]


@pytest.fixture
def fake_client():
    return FakeShopifyClient()


@pytest.fixture
def sync_context(fake_client, tmp_path):
    """SyncContext over the fake client rooted at tmp_path."""
    return SyncContext(client=fake_client, output_dir=tmp_path)
