"""Unified configuration schema for shopify_sync.

Defines Pydantic models for the YAML config file, with sections for the
Shopify connection, sync defaults and logging.

Usage:
    from shopify_sync.config_schema import build_config

    unified = build_config(load_hierarchical_config())
    settings = unified.sync
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Section models
# ---------------------------------------------------------------------------


class ShopifyConfig(BaseModel):
    """Store connection settings.

    All fields are optional to support zero-config: env vars and CLI args
    can supply them at runtime instead.
    """

    store: str | None = Field(
        default=None, description="Store domain (my-shop.myshopify.com)"
    )
    access_token: str | None = Field(
        default=None, description="Admin API access token"
    )
    api_version: str | None = Field(
        default=None, description="Admin API version (e.g. 2024-10)"
    )
    insecure: bool = Field(
        default=False,
        description="Disable SSL verification (development only)",
    )
    debug: bool = Field(default=False, description="Enable debug mode")
    max_parallel_requests: int = Field(
        default=4,
        ge=1,
        le=50,
        description="Maximum concurrent requests to the store (1-50)",
    )
    page_size: int = Field(
        default=250,
        ge=1,
        le=250,
        description="Items per listing page (1-250)",
    )

    model_config = {"frozen": True}


class SyncSettings(BaseModel):
    """Defaults for pull/push, overridable per invocation."""

    output_dir: str = Field(
        default=".", description="Root of the local store tree"
    )
    theme: str | None = Field(
        default=None, description="Theme name (default: the main theme)"
    )
    theme_check: bool = Field(
        default=True,
        description="Only sync store-wide content against the main theme",
    )
    force: bool = Field(
        default=False, description="Transfer items even when unchanged"
    )
    clock_skew_seconds: int = Field(
        default=300,
        ge=0,
        description="Tolerance when comparing asset timestamps",
    )
    assets: bool = True
    redirects: bool = True
    script_tags: bool = True
    pages: bool = True
    blogs: bool = True

    model_config = {"frozen": True}


class LoggingConfig(BaseModel):
    """Logging configuration.

    Attributes:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        file: Optional log file path.
    """

    level: str = Field(default="INFO", description="Log level")
    file: str | None = Field(default=None, description="Log file path")

    model_config = {"frozen": True}


# ---------------------------------------------------------------------------
# Top-level unified config
# ---------------------------------------------------------------------------


class UnifiedConfig(BaseModel):
    """Top-level unified configuration.

    Every section has defaults, so ``UnifiedConfig()`` is always valid.
    """

    shopify: ShopifyConfig = Field(default_factory=ShopifyConfig)
    sync: SyncSettings = Field(default_factory=SyncSettings)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"frozen": True}


# ---------------------------------------------------------------------------
# Factory function
# ---------------------------------------------------------------------------


def build_config(raw_data: dict) -> UnifiedConfig:
    """Construct a ``UnifiedConfig`` from the merged YAML dict.

    Missing sections get defaults.
    """
    if not raw_data:
        return UnifiedConfig()

    return UnifiedConfig(**raw_data)
