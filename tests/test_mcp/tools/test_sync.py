"""Tests for the shop_pull and shop_push MCP tools.

Handlers run against the in-memory store; the config file lookup is
patched so each test syncs into its own tmp_path.
"""

from __future__ import annotations

from unittest.mock import patch

import pytest

from shopify_sync.config_schema import SyncSettings
from shopify_sync.mcp.tools.registry import ToolRegistry
from shopify_sync.mcp.tools.sync import SYNC_SPECS, SYNC_TOOLS

PUBLISHED = "2024-01-01T00:00:00Z"


@pytest.fixture
def settings(tmp_path):
    value = SyncSettings(output_dir=str(tmp_path))
    with patch(
        "shopify_sync.mcp.tools.sync._load_sync_settings", return_value=value
    ):
        yield value


@pytest.fixture
def registry():
    return ToolRegistry(SYNC_SPECS)


@pytest.fixture
def store(fake_client):
    fake_client.add_asset("assets/theme.css", value="body{}")
    fake_client.add_redirect("/a", "/b")
    fake_client.add_page("about", title="About", body_html="<p>Hi</p>", published_at=PUBLISHED)
    return fake_client


class TestToolDefinitions:
    def test_names(self):
        assert [t.name for t in SYNC_TOOLS] == ["shop_pull", "shop_push"]

    def test_kinds_enum(self):
        kinds = SYNC_TOOLS[0].inputSchema["properties"]["kinds"]
        assert kinds["items"]["enum"] == [
            "asset",
            "redirect",
            "script_tag",
            "page",
            "blog_article",
        ]

    def test_no_required_args(self):
        for tool in SYNC_TOOLS:
            assert tool.inputSchema["required"] == []


class TestShopPull:
    async def test_pull_writes_tree(self, registry, store, settings, tmp_path):
        result = await registry.call_tool("shop_pull", {}, store)

        assert not result.isError
        assert (tmp_path / "assets" / "theme.css").read_text() == "body{}"
        assert (tmp_path / "pages" / "about.html").is_file()
        counts = result.structuredContent["counts"]
        assert counts["created_local"] == 5
        assert result.structuredContent["theme"] == "Live"
        assert result.content[0].text.startswith("Pull report for theme 'Live'")

    async def test_output_dir_argument(self, registry, store, settings, tmp_path):
        target = tmp_path / "elsewhere"
        await registry.call_tool("shop_pull", {"output_dir": str(target)}, store)
        assert (target / "redirects.csv").is_file()

    async def test_kinds_argument(self, registry, store, settings, tmp_path):
        result = await registry.call_tool("shop_pull", {"kinds": ["redirect"]}, store)

        assert {r["kind"] for r in result.structuredContent["results"]} == {"redirect"}
        assert not (tmp_path / "assets").exists()

    async def test_disabled_kinds_from_settings(self, registry, store, tmp_path):
        value = SyncSettings(output_dir=str(tmp_path), assets=False, pages=False)
        with patch(
            "shopify_sync.mcp.tools.sync._load_sync_settings", return_value=value
        ):
            await registry.call_tool("shop_pull", {}, store)

        assert (tmp_path / "redirects.csv").is_file()
        assert not (tmp_path / "assets").exists()
        assert not (tmp_path / "pages").exists()

    async def test_dry_run_preview(self, registry, store, settings, tmp_path):
        result = await registry.call_tool("shop_pull", {"dry_run": True}, store)

        text = result.content[0].text
        assert text.startswith("DRY RUN -- No changes will be made")
        assert "[asset] assets/theme.css" in text
        assert result.structuredContent["dry_run"] is True
        assert list(tmp_path.iterdir()) == []

    async def test_unknown_kind_is_validation_error(self, registry, store, settings):
        result = await registry.call_tool("shop_pull", {"kinds": ["orders"]}, store)
        assert result.isError
        assert result.content[0].text.startswith("Error (validation_error)")


class TestShopPush:
    async def test_round_trip_is_quiet(self, registry, store, settings):
        await registry.call_tool("shop_pull", {}, store)

        result = await registry.call_tool("shop_push", {}, store)

        assert not result.isError
        assert store.calls == []
        assert result.structuredContent["counts"]["skipped"] == result.structuredContent["counts"]["total"]

    async def test_push_creates_redirect(self, registry, store, settings, tmp_path):
        (tmp_path / "redirects.csv").write_text(
            "Redirect from,Redirect to\n/a,/b\n/new,/c\n"
        )

        await registry.call_tool("shop_push", {"kinds": ["redirect"]}, store)

        assert store.calls == [("create_redirect", "/new", "/c")]

    async def test_item_errors_flag_result(self, registry, store, settings, tmp_path):
        (tmp_path / "pages").mkdir()
        (tmp_path / "pages" / "about.json").write_text("{broken")
        (tmp_path / "pages" / "about.html").write_text("x")

        result = await registry.call_tool("shop_push", {"kinds": ["page"]}, store)

        assert result.isError
        assert store.calls == []
