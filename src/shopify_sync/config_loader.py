"""
Hierarchical YAML configuration for shopify_sync.

Finds config files by convention, expands ``!include`` directives and
``${VAR}`` references, and merges files so the project-level file wins.
``resolve_runtime_config()`` folds in ``.env`` and environment variables
to produce the runtime ``Config``.

Usage:
    from shopify_sync.config_loader import resolve_runtime_config

    config, unified = resolve_runtime_config({"store": "my-shop.myshopify.com"})
"""

import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from .config import Config, load_config
from .config_schema import UnifiedConfig, build_config

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "SHOPIFY_SYNC_CONFIG"
PROJECT_CONFIG_DIR = ".shopify_sync"

# ---------------------------------------------------------------------------
# Env var interpolation
# ---------------------------------------------------------------------------

# ${VAR} or ${VAR:-default}
_ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+?)(?::-(.*?))?\}")


def interpolate_env_vars(value: str) -> str:
    """Expand ``${VAR}`` and ``${VAR:-default}`` in *value*.

    An unset or empty VAR becomes *default*, or "" without one.  A ``${``
    with no closing brace is left as-is.
    """

    def _replace(match: re.Match) -> str:
        env_val = os.environ.get(match.group(1))
        if env_val:
            return env_val
        return match.group(2) if match.group(2) is not None else ""

    return _ENV_VAR_PATTERN.sub(_replace, value)


def _interpolate_recursive(obj: Any) -> Any:
    if isinstance(obj, str):
        return interpolate_env_vars(obj)
    if isinstance(obj, dict):
        return {k: _interpolate_recursive(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_interpolate_recursive(item) for item in obj]
    return obj


# ---------------------------------------------------------------------------
# YAML !include support
# ---------------------------------------------------------------------------


class ConfigLoader(yaml.SafeLoader):
    """SafeLoader with ``!include``; the global SafeLoader is untouched.

    Each load carries the chain of files being included so cycles are
    reported instead of recursing forever.
    """


def _include_constructor(loader: ConfigLoader, node: yaml.ScalarNode) -> Any:
    """Load the file named by ``!include <path>`` (relative to the includer)."""
    target = Path(loader.construct_scalar(node))
    if not target.is_absolute():
        target = Path(loader.name).resolve().parent / target
    target = target.resolve()

    chain: list[Path] = getattr(loader, "_include_stack", [])
    if target in chain:
        cycle = " -> ".join(str(p) for p in [*chain, target])
        raise ValueError(f"Circular include detected: {cycle}")

    if not target.exists():
        raise FileNotFoundError(
            f"Include file not found: {target} "
            f"(referenced from {Path(loader.name).resolve()})"
        )

    return _load_yaml_with_includes(target, _include_stack=[*chain, target])


ConfigLoader.add_constructor("!include", _include_constructor)


def _load_yaml_with_includes(
    path: Path,
    *,
    _include_stack: list[Path] | None = None,
) -> Any:
    path = path.resolve()
    with open(path, "r", encoding="utf-8") as fh:
        loader = ConfigLoader(fh)
        loader._include_stack = _include_stack or [path]  # type: ignore[attr-defined]
        try:
            return loader.get_single_data()
        finally:
            loader.dispose()


# ---------------------------------------------------------------------------
# File discovery
# ---------------------------------------------------------------------------


def discover_config_files() -> list[Path]:
    """Return existing config files, highest precedence first.

    Search order:
        1. ``SHOPIFY_SYNC_CONFIG`` env var (explicit path)
        2. ``.shopify_sync/config.yml`` in CWD
        3. ``.shopify_sync/config.yaml`` in CWD
        4. ``~/.config/shopify_sync/config.yml``
    """
    candidates: list[Path] = []

    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        candidates.append(Path(env_path).expanduser().resolve())

    cwd = Path.cwd()
    candidates.append(cwd / PROJECT_CONFIG_DIR / "config.yml")
    candidates.append(cwd / PROJECT_CONFIG_DIR / "config.yaml")
    candidates.append(Path.home() / ".config" / "shopify_sync" / "config.yml")

    return [p for p in candidates if p.exists()]


_STARTER_CONFIG = """\
# shopify-sync configuration
#
# Connection settings can also come from the environment (or a .env file):
#   SHOPIFY_STORE, SHOPIFY_ACCESS_TOKEN, SHOPIFY_API_VERSION, SHOPIFY_INSECURE
#
# shopify:
#   store: my-shop.myshopify.com
#   access_token: ${SHOPIFY_ACCESS_TOKEN}
#   api_version: "2024-10"
#   max_parallel_requests: 4
#
# sync:
#   output_dir: ./store
#   theme: null          # default: the main theme
#   theme_check: true
#   assets: true
#   redirects: true
#   script_tags: true
#   pages: true
#   blogs: true
#
# logging:
#   level: INFO
#   file: null
"""


def resolve_config_path() -> Path:
    """The active config file, or the project-level default if none exists.

    Does not create anything; see ``ensure_config()``.
    """
    existing = discover_config_files()
    if existing:
        return existing[0]
    return Path.cwd() / PROJECT_CONFIG_DIR / "config.yml"


def ensure_config(target: Path | None = None) -> Path:
    """Return the active config file, writing a commented starter if none exists."""
    existing = discover_config_files()
    if existing:
        logger.debug("Config file already exists: %s", existing[0])
        return existing[0]

    config_path = target or resolve_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(_STARTER_CONFIG, encoding="utf-8")
    logger.info("Created starter config: %s", config_path)
    return config_path


# ---------------------------------------------------------------------------
# Merge
# ---------------------------------------------------------------------------


def load_hierarchical_config() -> dict[str, Any]:
    """Load and merge every discovered config file.

    Files are applied from lowest to highest precedence; each replaces the
    top-level sections of the ones before it.  Env var references are
    expanded after merging.  No files means ``{}``.
    """
    paths = discover_config_files()
    if not paths:
        logger.debug("No config files found; using defaults")
        return {}

    merged: dict[str, Any] = {}
    for path in reversed(paths):
        logger.debug("Loading config: %s", path)
        data = _load_yaml_with_includes(path)
        if isinstance(data, dict):
            merged.update(data)
        elif data is not None:
            logger.warning(
                "Config file %s has non-dict root (%s); skipping",
                path,
                type(data).__name__,
            )

    return _interpolate_recursive(merged)


def resolve_runtime_config(
    overrides: dict | None = None,
) -> tuple[Config, UnifiedConfig]:
    """Resolve the runtime config from every source.

    Loads ``.env`` into the environment, reads the YAML hierarchy, then
    resolves each connection field as CLI override > env > YAML > default.

    Args:
        overrides: CLI values (store, access_token, api_version, insecure,
            debug); missing or falsy entries fall through.

    Returns:
        Tuple of (validated Config, UnifiedConfig with sync/logging sections).

    Raises:
        ValueError: If required settings are missing or invalid.
    """
    load_dotenv()
    unified = build_config(load_hierarchical_config())
    fallbacks = unified.shopify.model_dump(exclude_none=True)
    opts = overrides or {}
    config = load_config(
        store=opts.get("store"),
        access_token=opts.get("access_token"),
        api_version=opts.get("api_version"),
        insecure=bool(opts.get("insecure", False)),
        debug=bool(opts.get("debug", False)),
        yaml_fallbacks=fallbacks,
    )
    return config, unified
