"""Tests for logger.py -- setup_logging() and JsonFormatter.

Strategy: Mock logging.basicConfig to verify setup_logging passes correct args,
since pytest's log capture plugin interferes with actual basicConfig calls.
"""

import json
import logging
import sys
from unittest.mock import patch

from shopify_sync.logger import DEFAULT_MCP_LOG_FILE, JsonFormatter, setup_logging


def _close(handlers):
    for h in handlers:
        if isinstance(h, logging.FileHandler):
            h.close()


# ---------------------------------------------------------------------------
# setup_logging tests
# ---------------------------------------------------------------------------


class TestSetupLogging:
    @patch("shopify_sync.logger.logging.basicConfig")
    def test_cli_mode_logs_to_stderr(self, mock_basic, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        setup_logging(mode="cli")

        mock_basic.assert_called_once()
        kwargs = mock_basic.call_args[1]
        handlers = kwargs["handlers"]
        assert len(handlers) == 1
        assert isinstance(handlers[0], logging.StreamHandler)
        assert handlers[0].stream is sys.stderr
        assert kwargs["level"] == logging.INFO
        assert kwargs["force"] is True

    @patch("shopify_sync.logger.logging.basicConfig")
    def test_mcp_mode_logs_to_file_only(self, mock_basic, tmp_path, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        log_file = tmp_path / "mcp.log"
        setup_logging(mode="mcp", log_file=str(log_file))

        kwargs = mock_basic.call_args[1]
        handlers = kwargs["handlers"]
        assert len(handlers) == 1
        assert isinstance(handlers[0], logging.FileHandler)
        assert handlers[0].baseFilename == str(log_file)
        assert kwargs["level"] == logging.WARNING
        _close(handlers)

    @patch("shopify_sync.logger.logging.basicConfig")
    def test_mcp_mode_env_log_file(self, mock_basic, tmp_path, monkeypatch):
        log_file = tmp_path / "env.log"
        monkeypatch.setenv("LOG_FILE", str(log_file))
        setup_logging(mode="mcp")

        handlers = mock_basic.call_args[1]["handlers"]
        assert handlers[0].baseFilename == str(log_file)
        _close(handlers)

    def test_default_mcp_log_file(self):
        assert DEFAULT_MCP_LOG_FILE == "/tmp/shopify-sync.log"

    @patch("shopify_sync.logger.logging.basicConfig")
    def test_debug_beats_env(self, mock_basic, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "ERROR")
        setup_logging(mode="cli", debug=True)

        assert mock_basic.call_args[1]["level"] == logging.DEBUG

    @patch("shopify_sync.logger.logging.basicConfig")
    def test_env_log_level_honored(self, mock_basic, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "error")
        setup_logging(mode="cli", level="DEBUG")

        assert mock_basic.call_args[1]["level"] == logging.ERROR

    @patch("shopify_sync.logger.logging.basicConfig")
    def test_configured_level_used_without_env(self, mock_basic, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        setup_logging(mode="cli", level="WARNING")

        assert mock_basic.call_args[1]["level"] == logging.WARNING

    @patch("shopify_sync.logger.logging.basicConfig")
    def test_cli_mode_with_log_file(self, mock_basic, tmp_path):
        setup_logging(mode="cli", log_file=str(tmp_path / "cli.log"))

        handlers = mock_basic.call_args[1]["handlers"]
        file_handlers = [h for h in handlers if isinstance(h, logging.FileHandler)]
        assert len(handlers) == 2
        assert len(file_handlers) == 1
        _close(handlers)

    @patch("shopify_sync.logger.logging.basicConfig")
    def test_json_format(self, mock_basic):
        setup_logging(mode="cli", debug_format="json")

        handlers = mock_basic.call_args[1]["handlers"]
        assert isinstance(handlers[0].formatter, JsonFormatter)

    @patch("shopify_sync.logger.logging.basicConfig")
    def test_third_party_silenced(self, _mock_basic, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        setup_logging(mode="cli")

        assert logging.getLogger("urllib3").level == logging.WARNING
        assert logging.getLogger("requests").level == logging.WARNING


# ---------------------------------------------------------------------------
# JsonFormatter tests
# ---------------------------------------------------------------------------


class TestJsonFormatter:
    def _record(self, msg, args=(), exc_info=None):
        return logging.LogRecord(
            name="shopify_sync.sync.driver",
            level=logging.INFO,
            pathname="driver.py",
            lineno=1,
            msg=msg,
            args=args,
            exc_info=exc_info,
        )

    def test_basic_output(self):
        output = JsonFormatter().format(self._record("SAVING: %s", ("assets/a.css",)))
        data = json.loads(output)
        assert data["level"] == "INFO"
        assert data["logger"] == "shopify_sync.sync.driver"
        assert data["msg"] == "SAVING: assets/a.css"
        assert "ts" in data
        assert "\n" not in output

    def test_includes_exception(self):
        try:
            raise ValueError("bad json")
        except ValueError:
            exc_info = sys.exc_info()

        data = json.loads(JsonFormatter().format(self._record("failed", exc_info=exc_info)))
        assert "ValueError" in data["exc"]
        assert "bad json" in data["exc"]
