"""Tests for shopify_sync.config -- env-var config loading and validation.

NOT to be confused with test_config_loader.py (hierarchical YAML config)
or test_config_schema.py (Pydantic models).
"""

import logging

import pytest

from shopify_sync.config import Config, load_config, validate_config

_ENV_VARS = (
    "SHOPIFY_STORE",
    "SHOPIFY_ACCESS_TOKEN",
    "SHOPIFY_API_VERSION",
    "SHOPIFY_INSECURE",
    "SHOPIFY_DEBUG",
    "SHOPIFY_MAX_PARALLEL_REQUESTS",
    "SHOPIFY_PAGE_SIZE",
)


@pytest.fixture
def clean_env(monkeypatch):
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    return monkeypatch


# -------------------------------------------------------------------------
# validate_config()
# -------------------------------------------------------------------------


class TestValidateConfig:
    def test_bare_domain(self):
        config = Config(store="shop.myshopify.com", access_token="t")
        validate_config(config)
        assert config.store == "shop.myshopify.com"

    def test_scheme_and_trailing_slash_stripped(self):
        config = Config(store="https://shop.myshopify.com/", access_token="t")
        validate_config(config)
        assert config.store == "shop.myshopify.com"

    def test_path_rejected(self):
        config = Config(store="shop.myshopify.com/admin", access_token="t")
        with pytest.raises(ValueError, match="Invalid Shopify store"):
            validate_config(config)

    def test_empty_store(self):
        with pytest.raises(ValueError, match="Invalid Shopify store"):
            validate_config(Config(store="  ", access_token="t"))

    def test_empty_token(self):
        with pytest.raises(ValueError, match="access token cannot be empty"):
            validate_config(Config(store="shop.myshopify.com", access_token=" "))

    def test_insecure_warns(self, caplog):
        config = Config(store="shop.myshopify.com", access_token="t", insecure=True)
        with caplog.at_level(logging.WARNING):
            validate_config(config)
        assert "SSL verification disabled" in caplog.text


# -------------------------------------------------------------------------
# load_config()
# -------------------------------------------------------------------------


class TestLoadConfig:
    def test_from_env(self, clean_env):
        clean_env.setenv("SHOPIFY_STORE", "env.myshopify.com")
        clean_env.setenv("SHOPIFY_ACCESS_TOKEN", "env-token")
        config = load_config()
        assert config.store == "env.myshopify.com"
        assert config.access_token == "env-token"
        assert config.api_version == "2024-10"
        assert config.max_parallel_requests == 4
        assert config.page_size == 250

    def test_cli_beats_env(self, clean_env):
        clean_env.setenv("SHOPIFY_STORE", "env.myshopify.com")
        clean_env.setenv("SHOPIFY_ACCESS_TOKEN", "env-token")
        config = load_config(store="cli.myshopify.com")
        assert config.store == "cli.myshopify.com"

    def test_env_beats_yaml(self, clean_env):
        clean_env.setenv("SHOPIFY_STORE", "env.myshopify.com")
        config = load_config(
            yaml_fallbacks={
                "store": "yaml.myshopify.com",
                "access_token": "yaml-token",
                "api_version": "2025-01",
            }
        )
        assert config.store == "env.myshopify.com"
        assert config.access_token == "yaml-token"
        assert config.api_version == "2025-01"

    def test_missing_store(self, clean_env):
        with pytest.raises(ValueError, match="store not found"):
            load_config(access_token="t")

    def test_missing_token(self, clean_env):
        with pytest.raises(ValueError, match="access token not found"):
            load_config(store="s.myshopify.com")

    def test_bool_flags(self, clean_env):
        clean_env.setenv("SHOPIFY_INSECURE", "yes")
        config = load_config(
            store="s.myshopify.com",
            access_token="t",
            yaml_fallbacks={"debug": True},
        )
        assert config.insecure is True
        assert config.debug is True

    def test_env_false_beats_yaml_true(self, clean_env):
        clean_env.setenv("SHOPIFY_DEBUG", "false")
        config = load_config(
            store="s.myshopify.com",
            access_token="t",
            yaml_fallbacks={"debug": True},
        )
        assert config.debug is False

    def test_int_settings(self, clean_env):
        clean_env.setenv("SHOPIFY_MAX_PARALLEL_REQUESTS", "8")
        config = load_config(
            store="s.myshopify.com",
            access_token="t",
            yaml_fallbacks={"page_size": 50},
        )
        assert config.max_parallel_requests == 8
        assert config.page_size == 50

    def test_int_out_of_range(self, clean_env):
        clean_env.setenv("SHOPIFY_PAGE_SIZE", "500")
        with pytest.raises(ValueError, match="SHOPIFY_PAGE_SIZE"):
            load_config(store="s.myshopify.com", access_token="t")

    def test_int_not_a_number(self, clean_env):
        clean_env.setenv("SHOPIFY_MAX_PARALLEL_REQUESTS", "many")
        with pytest.raises(ValueError, match="must be a number"):
            load_config(store="s.myshopify.com", access_token="t")
