"""Command-line interface for Shopify store sync.

Usage:
    shopify-sync list
    shopify-sync pull [--theme NAME] [--no-assets] [--dry-run] ...
    shopify-sync push [--theme NAME] [--force] [--blog HANDLE] ...
    shopify-sync init NAME [--src URL]
    shopify-sync publish NAME
    shopify-sync config

Exit status: 0 on success, 1 on a transport error or failed items, 2 on
a configuration error, 130 when interrupted.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

import requests

from . import __version__
from .config import Config
from .config_loader import ensure_config, resolve_runtime_config
from .config_schema import UnifiedConfig
from .core.async_utils import init_semaphore
from .core.client import ShopifyClient
from .file_handler import validate_output_dir
from .logger import setup_logging
from .sync.engine import ShopSync, kinds_from_flags
from .sync.reporter import format_dry_run_preview, format_sync_report

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="shopify-sync",
        description="Mirror a Shopify store's theme and content to a local directory",
    )
    parser.add_argument(
        "--output-dir",
        help="Root of the local store tree (default from config, else .)",
    )
    parser.add_argument("--store", help="Store domain (overrides SHOPIFY_STORE)")
    parser.add_argument(
        "--access-token",
        help="Admin API access token (prefer SHOPIFY_ACCESS_TOKEN)",
    )
    parser.add_argument(
        "--insecure",
        action="store_true",
        help="Skip SSL certificate verification (development only)",
    )
    parser.add_argument(
        "--debug", action="store_true", help="Log everything at DEBUG"
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log this tool's own DEBUG messages",
    )
    parser.add_argument("--log-file", help="Also log to this file")
    parser.add_argument(
        "--log-format",
        choices=("text", "json"),
        default="text",
        help="Log record format (default: text)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"shopify-sync version {__version__}",
    )

    dry_run = argparse.ArgumentParser(add_help=False)
    dry_run.add_argument(
        "--dry-run",
        action="store_true",
        help="Log planned actions without executing them",
    )

    transfer = argparse.ArgumentParser(add_help=False, parents=[dry_run])
    transfer.add_argument("--theme", help="Theme name (default: the main theme)")
    transfer.add_argument(
        "--force",
        action="store_true",
        help="Transfer items even when they look unchanged",
    )
    transfer.add_argument(
        "--no-themecheck",
        dest="theme_check",
        action="store_false",
        help="Sync redirects, script tags, pages and blogs for any theme",
    )
    transfer.add_argument(
        "--blog", help="Limit blog articles to one blog (id or handle)"
    )
    for flag, dest in (
        ("--no-assets", "assets"),
        ("--no-redirects", "redirects"),
        ("--no-scripttags", "script_tags"),
        ("--no-pages", "pages"),
        ("--no-blogs", "blogs"),
    ):
        transfer.add_argument(
            flag, dest=dest, action="store_false", help=f"Skip {dest.replace('_', ' ')}"
        )

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("list", help="List themes; the main theme is marked")
    sub.add_parser(
        "pull", parents=[transfer], help="Mirror the store onto the local tree"
    )
    sub.add_parser(
        "push", parents=[transfer], help="Mirror the local tree onto the store"
    )
    init = sub.add_parser(
        "init", parents=[dry_run], help="Create an unpublished theme"
    )
    init.add_argument("theme", help="Theme name")
    init.add_argument("--src", help="URL of a theme zip archive to seed from")
    publish = sub.add_parser(
        "publish", parents=[dry_run], help="Make a theme the main theme"
    )
    publish.add_argument("theme", help="Theme name")
    sub.add_parser(
        "config", help="Print the config file path, writing a starter if none exists"
    )
    return parser


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


async def cmd_list(shop: ShopSync, args: argparse.Namespace) -> int:
    for theme in await shop.list_themes():
        print(f"{theme.name} (main)" if theme.is_main else theme.name)
    return 0


async def cmd_init(shop: ShopSync, args: argparse.Namespace) -> int:
    theme = await shop.init_theme(args.theme, args.src)
    print(f"{theme.name} ({theme.role})")
    return 0


async def cmd_publish(shop: ShopSync, args: argparse.Namespace) -> int:
    theme = await shop.publish_theme(args.theme)
    return 0 if theme is not None else 1


async def cmd_transfer(shop: ShopSync, args: argparse.Namespace) -> int:
    """Run a pull or push and print its report."""
    kinds = kinds_from_flags(
        assets=args.assets,
        redirects=args.redirects,
        script_tags=args.script_tags,
        pages=args.pages,
        blogs=args.blogs,
    )
    run = shop.pull if args.command == "pull" else shop.push
    report = await run(
        kinds=kinds,
        theme=args.theme,
        theme_check=args.theme_check,
        blog=args.blog,
    )
    if report.dry_run:
        print(format_dry_run_preview(report))
    else:
        print(format_sync_report(report))
    return 1 if report.errors else 0


_COMMANDS = {
    "list": cmd_list,
    "init": cmd_init,
    "publish": cmd_publish,
    "pull": cmd_transfer,
    "push": cmd_transfer,
}


async def _dispatch(
    args: argparse.Namespace, config: Config, unified: UnifiedConfig
) -> int:
    init_semaphore(config.max_parallel_requests)
    settings = unified.sync
    if getattr(args, "theme", None) is None and args.command in ("pull", "push"):
        args.theme = settings.theme
    shop = ShopSync(
        ShopifyClient(config),
        validate_output_dir(args.output_dir or settings.output_dir),
        dry_run=getattr(args, "dry_run", False),
        force=getattr(args, "force", False) or settings.force,
        clock_skew_seconds=settings.clock_skew_seconds,
        page_size=config.page_size,
    )
    return await _COMMANDS[args.command](shop, args)


def _apply_settings(args: argparse.Namespace, unified: UnifiedConfig) -> None:
    """Let config-file switches turn kinds and the theme check off."""
    if args.command not in ("pull", "push"):
        return
    settings = unified.sync
    args.theme_check = args.theme_check and settings.theme_check
    args.assets = args.assets and settings.assets
    args.redirects = args.redirects and settings.redirects
    args.script_tags = args.script_tags and settings.script_tags
    args.pages = args.pages and settings.pages
    args.blogs = args.blogs and settings.blogs


def main(argv: list[str] | None = None) -> int:
    """Entry point for ``shopify-sync``.

    Returns:
        Process exit status.
    """
    args = build_parser().parse_args(argv)
    if args.command == "config":
        print(ensure_config())
        return 0

    overrides = {
        "store": args.store,
        "access_token": args.access_token,
        "insecure": args.insecure,
        "debug": args.debug,
    }
    try:
        config, unified = resolve_runtime_config(overrides)
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    setup_logging(
        mode="cli",
        debug=config.debug,
        log_file=args.log_file or unified.logging.file,
        debug_format=args.log_format,
        level=unified.logging.level,
    )
    if args.verbose and not config.debug:
        logging.getLogger("shopify_sync").setLevel(logging.DEBUG)

    _apply_settings(args, unified)

    try:
        return asyncio.run(_dispatch(args, config, unified))
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    except requests.RequestException as e:
        logger.debug("Request failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
