"""Shopify connection settings.

Reads the store connection from CLI args, environment variables, .env
files, and YAML config file fallbacks.

Precedence (highest to lowest):
    CLI args > Environment variables > .env file > YAML config > Built-in defaults

Environment variables:
    SHOPIFY_STORE: Store domain, e.g. my-shop.myshopify.com (required)
    SHOPIFY_ACCESS_TOKEN: Admin API access token (required)
    SHOPIFY_API_VERSION: Admin API version (optional, default: 2024-10)
    SHOPIFY_INSECURE: Skip SSL verification (optional, default: false)
    SHOPIFY_DEBUG: Enable debug logging (optional, default: false)
    SHOPIFY_MAX_PARALLEL_REQUESTS: Max parallel API requests (optional, default: 4)
    SHOPIFY_PAGE_SIZE: Items per listing page (optional, default: 250)
"""

import logging
import os
from dataclasses import dataclass
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

DEFAULT_API_VERSION = "2024-10"


@dataclass
class Config:
    store: str
    access_token: str
    api_version: str = DEFAULT_API_VERSION
    insecure: bool = False
    debug: bool = False
    max_parallel_requests: int = 4
    page_size: int = 250


def validate_config(config: Config) -> None:
    """Normalize and validate configuration values.

    The store may be given as a bare domain or a URL; scheme and trailing
    slashes are stripped.

    Raises:
        ValueError: If the store has no hostname or the token is empty.
    """
    store = config.store.strip()
    for scheme in ("https://", "http://"):
        store = store.removeprefix(scheme)
    store = store.rstrip("/")

    parsed = urlparse(f"https://{store}")
    if not store or not parsed.hostname or parsed.path:
        raise ValueError(
            f"Invalid Shopify store '{config.store}': expected a domain "
            "such as my-shop.myshopify.com"
        )
    config.store = store

    if not config.access_token.strip():
        raise ValueError(
            "Shopify access token cannot be empty. "
            "Set SHOPIFY_ACCESS_TOKEN environment variable."
        )

    if not config.api_version.strip():
        raise ValueError("Shopify API version cannot be empty.")

    if config.insecure:
        logger.warning(
            "WARNING: SSL verification disabled (insecure=True). Use only for development."
        )


def _get_bool_env(key: str) -> bool | None:
    """Return True/False from env var, or None if unset."""
    val = os.getenv(key)
    if val is None:
        return None
    return val.lower() in ("true", "1", "yes", "on")


def _resolve_flag(cli_value: bool, env_key: str, fallback: object) -> bool:
    if cli_value:
        return True
    env_value = _get_bool_env(env_key)
    if env_value is not None:
        return env_value
    return bool(fallback)


def _resolve_int(
    env_key: str, fallback: object, default: int, low: int, high: int
) -> int:
    raw = os.getenv(env_key)
    if raw is None:
        return int(fallback) if fallback is not None else default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(
            f"Invalid {env_key} '{raw}': must be a number between {low} and {high}"
        ) from None
    if not (low <= value <= high):
        raise ValueError(
            f"Invalid {env_key} '{raw}': must be a number between {low} and {high}"
        )
    return value


def load_config(
    store: str | None = None,
    access_token: str | None = None,
    api_version: str | None = None,
    insecure: bool = False,
    debug: bool = False,
    yaml_fallbacks: dict | None = None,
) -> Config:
    """Load configuration with unified precedence.

    Resolution order for each field (highest to lowest):
        CLI arg > env var / .env > yaml_fallbacks > built-in default

    The caller is responsible for calling ``load_dotenv()`` before this
    function so that .env values are available via ``os.getenv()``.

    Args:
        store: Override store domain.
        access_token: Override access token.
        api_version: Override Admin API version.
        insecure: Skip SSL verification (CLI flag).
        debug: Enable debug logging (CLI flag).
        yaml_fallbacks: Dict of values from the YAML ``shopify`` section.

    Returns:
        Validated Config instance.

    Raises:
        ValueError: If the store or token is missing after checking all
            sources, or a numeric setting is out of range.
    """
    fb = yaml_fallbacks or {}

    final_store = store or os.getenv("SHOPIFY_STORE") or fb.get("store")
    if not final_store:
        raise ValueError(
            "Shopify store not found. Set SHOPIFY_STORE environment variable, "
            "pass --store CLI argument, or add 'store' to config.yml."
        )

    final_token = (
        access_token
        or os.getenv("SHOPIFY_ACCESS_TOKEN")
        or fb.get("access_token")
    )
    if not final_token:
        raise ValueError(
            "Shopify access token not found. Set SHOPIFY_ACCESS_TOKEN "
            "environment variable, pass --access-token CLI argument, "
            "or add 'access_token' to config.yml."
        )

    final_version = (
        api_version
        or os.getenv("SHOPIFY_API_VERSION")
        or fb.get("api_version")
        or DEFAULT_API_VERSION
    )

    config = Config(
        store=final_store.strip(),
        access_token=final_token.strip(),
        api_version=final_version.strip(),
        insecure=_resolve_flag(insecure, "SHOPIFY_INSECURE", fb.get("insecure")),
        debug=_resolve_flag(debug, "SHOPIFY_DEBUG", fb.get("debug")),
        max_parallel_requests=_resolve_int(
            "SHOPIFY_MAX_PARALLEL_REQUESTS",
            fb.get("max_parallel_requests"),
            4,
            1,
            50,
        ),
        page_size=_resolve_int(
            "SHOPIFY_PAGE_SIZE", fb.get("page_size"), 250, 1, 250
        ),
    )

    validate_config(config)

    return config
