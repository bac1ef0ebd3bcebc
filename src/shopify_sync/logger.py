import json
import logging
import os
import sys

DEFAULT_MCP_LOG_FILE = "/tmp/shopify-sync.log"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Noisy at INFO/DEBUG; only shown when debugging.
_QUIET_LOGGERS = ("urllib3", "requests", "charset_normalizer")


class JsonFormatter(logging.Formatter):
    """One JSON object per record: ts, level, logger, msg (and exc)."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def _formatter(debug_format: str, with_name: bool = False) -> logging.Formatter:
    if debug_format == "json":
        return JsonFormatter(datefmt=DATE_FORMAT)
    fmt = "[%(asctime)s] [%(levelname)s] "
    if with_name:
        fmt += "%(name)s "
    return logging.Formatter(fmt + "%(message)s", datefmt=DATE_FORMAT)


def setup_logging(
    mode: str = "cli",
    debug: bool = False,
    log_file: str | None = None,
    debug_format: str = "text",
    level: str | None = None,
) -> None:
    """
    Configure root logging for the CLI or the MCP server.

    Args:
        mode: "mcp" logs to a file only (stdout carries JSON-RPC);
              "cli" logs to stderr, plus log_file when given.
        debug: Force DEBUG, overriding every other level setting.
        log_file: Log file path (MCP default: LOG_FILE env var, then
                  /tmp/shopify-sync.log).
        debug_format: "text" (default) or "json".
        level: Level name used when LOG_LEVEL is unset (e.g. from config).

    Environment variables:
        LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR).
                   Default: WARNING for MCP mode, INFO for CLI mode.
        LOG_FILE: Log file path for MCP mode.
    """
    default_level = level or ("WARNING" if mode == "mcp" else "INFO")
    level_name = os.getenv("LOG_LEVEL", default_level).upper()
    log_level = (
        logging.DEBUG if debug else getattr(logging, level_name, logging.INFO)
    )

    handlers: list[logging.Handler] = []
    if mode == "mcp":
        path = log_file or os.getenv("LOG_FILE", DEFAULT_MCP_LOG_FILE)
        file_handler = logging.FileHandler(path, mode="a")
        file_handler.setFormatter(_formatter(debug_format))
        handlers.append(file_handler)
    else:
        stderr_handler = logging.StreamHandler(sys.stderr)
        stderr_handler.setFormatter(_formatter(debug_format))
        handlers.append(stderr_handler)
        if log_file:
            file_handler = logging.FileHandler(log_file, mode="a")
            file_handler.setFormatter(_formatter(debug_format, with_name=True))
            handlers.append(file_handler)

    logging.basicConfig(level=log_level, handlers=handlers, force=True)

    if log_level != logging.DEBUG:
        for name in _QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
