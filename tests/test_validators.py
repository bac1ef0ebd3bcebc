"""Tests for asset key and handle validation."""

import pytest

from shopify_sync.validators import validate_asset_key, validate_handle


class TestValidateAssetKey:
    @pytest.mark.parametrize(
        "key",
        [
            "assets/theme.css",
            "templates/customers/account.liquid",
            "config/settings_data.json",
        ],
    )
    def test_valid(self, key):
        assert validate_asset_key(key) == (True, "")

    @pytest.mark.parametrize(
        "key, reason",
        [
            ("", "cannot be empty"),
            ("   ", "cannot be empty"),
            ("/assets/a.css", "must be relative"),
            ("assets\\a.css", "cannot contain '\\'"),
            ("assets/../a.css", "cannot contain '..'"),
            ("assets//a.css", "cannot have empty path segments"),
            ("theme.css", "must include a directory"),
        ],
    )
    def test_invalid(self, key, reason):
        ok, message = validate_asset_key(key)
        assert not ok
        assert message.startswith("Asset key")
        assert reason in message


class TestValidateHandle:
    @pytest.mark.parametrize("handle", ["about", "about-us", "faq_2024", "v1.2"])
    def test_valid(self, handle):
        assert validate_handle(handle) == (True, "")

    @pytest.mark.parametrize(
        "handle, reason",
        [
            ("", "cannot be empty"),
            ("a/b", "cannot contain path separators"),
            ("a\\b", "cannot contain path separators"),
            ("..", "cannot contain '..'"),
            ("x..y", "cannot contain '..'"),
        ],
    )
    def test_invalid(self, handle, reason):
        ok, message = validate_handle(handle)
        assert not ok
        assert reason in message
