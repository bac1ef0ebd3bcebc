import threading
from typing import Any

import requests

from ..config import Config

# Assets are addressed by key, not id, and travel as a query parameter.
ASSET_KEY_PARAM = "asset[key]"


class ShopifyClient:
    def __init__(self, config: Config):
        self.config = config
        self._thread_local = threading.local()
        self.base_url = self._get_base_url()

    @property
    def session(self) -> requests.Session:
        """The current thread's session."""
        return self._get_session()

    def _get_base_url(self) -> str:
        return (
            f"https://{self.config.store}/admin/api/{self.config.api_version}"
        )

    def _get_session(self) -> requests.Session:
        """Get or create a thread-local requests.Session."""
        if not hasattr(self._thread_local, "session"):
            self._thread_local.session = self._create_session()
        return self._thread_local.session

    def _create_session(self) -> requests.Session:
        session = requests.Session()
        session.headers.update(
            {
                "X-Shopify-Access-Token": self.config.access_token,
                "Accept": "application/json",
            }
        )
        session.verify = not self.config.insecure
        return session

    def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        payload: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Call an Admin REST endpoint and return the decoded JSON body.

        Raises requests.HTTPError on a non-2xx response.  An empty body
        (DELETE) decodes to {}.
        """
        session = self._get_session()
        response = session.request(
            method,
            f"{self.base_url}/{path}",
            params=params,
            json=payload,
            timeout=(10, 60),
        )
        response.raise_for_status()
        if not response.content:
            return {}
        return response.json()

    def _page_params(self, since_id: int, limit: int | None) -> dict[str, Any]:
        return {
            "since_id": since_id,
            "limit": limit or self.config.page_size,
        }

    # -- shop & themes ---------------------------------------------------

    def validate_connection(self) -> str:
        """
        Fetch the shop record; returns the shop name.
        """
        shop = self._request("GET", "shop.json").get("shop", {})
        return shop.get("name") or self.config.store

    def get_themes(self) -> list[dict[str, Any]]:
        return self._request("GET", "themes.json").get("themes", [])

    def create_theme(
        self, name: str, src: str | None = None, role: str = "unpublished"
    ) -> dict[str, Any]:
        """
        Create a theme, optionally seeded from a zip archive URL.
        """
        theme: dict[str, Any] = {"name": name, "role": role}
        if src:
            theme["src"] = src
        return self._request("POST", "themes.json", payload={"theme": theme})[
            "theme"
        ]

    def update_theme(self, theme_id: int, **fields: Any) -> dict[str, Any]:
        return self._request(
            "PUT",
            f"themes/{theme_id}.json",
            payload={"theme": {"id": theme_id, **fields}},
        )["theme"]

    # -- assets -----------------------------------------------------------

    def get_assets(self, theme_id: int) -> list[dict[str, Any]]:
        """
        List asset metadata (no content) for a theme.
        """
        return self._request("GET", f"themes/{theme_id}/assets.json").get(
            "assets", []
        )

    def get_asset(self, theme_id: int, key: str) -> dict[str, Any]:
        """
        Fetch one asset including its value or base64 attachment.
        """
        return self._request(
            "GET",
            f"themes/{theme_id}/assets.json",
            params={ASSET_KEY_PARAM: key},
        )["asset"]

    def update_asset(
        self,
        theme_id: int,
        key: str,
        value: str | None = None,
        attachment: str | None = None,
    ) -> dict[str, Any]:
        """
        Create or replace an asset; pass text as value or base64 as attachment.
        """
        asset: dict[str, Any] = {"key": key}
        if attachment is not None:
            asset["attachment"] = attachment
        else:
            asset["value"] = value or ""
        return self._request(
            "PUT", f"themes/{theme_id}/assets.json", payload={"asset": asset}
        )["asset"]

    def delete_asset(self, theme_id: int, key: str) -> None:
        self._request(
            "DELETE",
            f"themes/{theme_id}/assets.json",
            params={ASSET_KEY_PARAM: key},
        )

    def download(self, url: str) -> bytes:
        """
        Download a public CDN URL; the access token is not sent.
        """
        response = requests.get(
            url, timeout=(10, 60), verify=not self.config.insecure
        )
        response.raise_for_status()
        return response.content

    # -- redirects ----------------------------------------------------------

    def get_redirects(
        self, since_id: int = 0, limit: int | None = None
    ) -> list[dict[str, Any]]:
        return self._request(
            "GET", "redirects.json", params=self._page_params(since_id, limit)
        ).get("redirects", [])

    def get_redirects_count(self) -> int:
        return self._request("GET", "redirects/count.json")["count"]

    def create_redirect(self, path: str, target: str) -> dict[str, Any]:
        return self._request(
            "POST",
            "redirects.json",
            payload={"redirect": {"path": path, "target": target}},
        )["redirect"]

    def update_redirect(
        self, redirect_id: int, path: str, target: str
    ) -> dict[str, Any]:
        return self._request(
            "PUT",
            f"redirects/{redirect_id}.json",
            payload={
                "redirect": {"id": redirect_id, "path": path, "target": target}
            },
        )["redirect"]

    def delete_redirect(self, redirect_id: int) -> None:
        self._request("DELETE", f"redirects/{redirect_id}.json")

    # -- script tags --------------------------------------------------------

    def get_script_tags(
        self, since_id: int = 0, limit: int | None = None
    ) -> list[dict[str, Any]]:
        return self._request(
            "GET",
            "script_tags.json",
            params=self._page_params(since_id, limit),
        ).get("script_tags", [])

    def get_script_tags_count(self) -> int:
        return self._request("GET", "script_tags/count.json")["count"]

    def create_script_tag(
        self, src: str, event: str = "onload", display_scope: str = "all"
    ) -> dict[str, Any]:
        return self._request(
            "POST",
            "script_tags.json",
            payload={
                "script_tag": {
                    "src": src,
                    "event": event,
                    "display_scope": display_scope,
                }
            },
        )["script_tag"]

    def update_script_tag(
        self,
        script_tag_id: int,
        src: str,
        event: str = "onload",
        display_scope: str = "all",
    ) -> dict[str, Any]:
        return self._request(
            "PUT",
            f"script_tags/{script_tag_id}.json",
            payload={
                "script_tag": {
                    "id": script_tag_id,
                    "src": src,
                    "event": event,
                    "display_scope": display_scope,
                }
            },
        )["script_tag"]

    def delete_script_tag(self, script_tag_id: int) -> None:
        self._request("DELETE", f"script_tags/{script_tag_id}.json")

    # -- pages --------------------------------------------------------------

    def get_pages(
        self, since_id: int = 0, limit: int | None = None
    ) -> list[dict[str, Any]]:
        return self._request(
            "GET", "pages.json", params=self._page_params(since_id, limit)
        ).get("pages", [])

    def get_pages_count(self) -> int:
        return self._request("GET", "pages/count.json")["count"]

    def create_page(self, page: dict[str, Any]) -> dict[str, Any]:
        return self._request("POST", "pages.json", payload={"page": page})[
            "page"
        ]

    def update_page(self, page_id: int, page: dict[str, Any]) -> dict[str, Any]:
        return self._request(
            "PUT",
            f"pages/{page_id}.json",
            payload={"page": {**page, "id": page_id}},
        )["page"]

    def delete_page(self, page_id: int) -> None:
        self._request("DELETE", f"pages/{page_id}.json")

    # -- blogs & articles ---------------------------------------------------

    def get_blogs(
        self, since_id: int = 0, limit: int | None = None
    ) -> list[dict[str, Any]]:
        return self._request(
            "GET", "blogs.json", params=self._page_params(since_id, limit)
        ).get("blogs", [])

    def get_blogs_count(self) -> int:
        return self._request("GET", "blogs/count.json")["count"]

    def get_blog(self, blog_id: int) -> dict[str, Any]:
        return self._request("GET", f"blogs/{blog_id}.json")["blog"]

    def get_blog_articles(
        self, blog_id: int, since_id: int = 0, limit: int | None = None
    ) -> list[dict[str, Any]]:
        return self._request(
            "GET",
            f"blogs/{blog_id}/articles.json",
            params=self._page_params(since_id, limit),
        ).get("articles", [])

    def get_blog_articles_count(self, blog_id: int) -> int:
        return self._request("GET", f"blogs/{blog_id}/articles/count.json")[
            "count"
        ]

    def create_blog_article(
        self, blog_id: int, article: dict[str, Any]
    ) -> dict[str, Any]:
        return self._request(
            "POST",
            f"blogs/{blog_id}/articles.json",
            payload={"article": article},
        )["article"]

    def update_blog_article(
        self, blog_id: int, article_id: int, article: dict[str, Any]
    ) -> dict[str, Any]:
        return self._request(
            "PUT",
            f"blogs/{blog_id}/articles/{article_id}.json",
            payload={"article": {**article, "id": article_id}},
        )["article"]

    def delete_blog_article(self, blog_id: int, article_id: int) -> None:
        self._request("DELETE", f"blogs/{blog_id}/articles/{article_id}.json")
