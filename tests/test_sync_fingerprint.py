"""Tests for asset equality checks (checksum, size and timestamp)."""

import hashlib
import os
import time
from datetime import datetime, timezone

import pytest

from shopify_sync.sync.fingerprint import (
    is_asset_same,
    logical_size,
    md5_file,
    parse_timestamp,
)


def _iso(ts: float) -> str:
    return datetime.fromtimestamp(ts, tz=timezone.utc).isoformat()


class TestDigests:
    def test_md5_file_matches_hashlib(self, tmp_path):
        f = tmp_path / "a.css"
        f.write_bytes(b"body { color: red; }")
        assert md5_file(f) == hashlib.md5(b"body { color: red; }").hexdigest()


class TestLogicalSize:
    def test_plain_file_uses_byte_size(self, tmp_path):
        f = tmp_path / "a.css"
        f.write_bytes(b"12345")
        assert logical_size(f) == 5

    def test_json_measured_compact_with_escaped_slashes(self, tmp_path):
        f = tmp_path / "settings.json"
        f.write_text('{\n  "a": "x/y"\n}\n', encoding="utf-8")
        # {"a":"x\/y"}
        assert logical_size(f) == 12

    def test_invalid_json_falls_back_to_bytes(self, tmp_path):
        f = tmp_path / "broken.json"
        f.write_bytes(b"{not json")
        assert logical_size(f) == 9


class TestParseTimestamp:
    def test_zulu(self):
        parsed = parse_timestamp("2024-01-01T00:00:00Z")
        assert parsed == datetime(2024, 1, 1, tzinfo=timezone.utc)

    def test_offset(self):
        parsed = parse_timestamp("2024-01-01T05:00:00+05:00")
        assert parsed == datetime(2024, 1, 1, tzinfo=timezone.utc)

    def test_naive_is_utc(self):
        assert parse_timestamp("2024-01-01T00:00:00").tzinfo == timezone.utc

    def test_garbage_raises(self):
        with pytest.raises(ValueError):
            parse_timestamp("yesterday")


class TestIsAssetSame:
    def test_missing_file(self, tmp_path):
        assert not is_asset_same(tmp_path / "nope.css", checksum="abc")

    def test_checksum_match(self, tmp_path):
        f = tmp_path / "a.css"
        f.write_bytes(b"data")
        assert is_asset_same(f, checksum=hashlib.md5(b"data").hexdigest())

    def test_checksum_compare_is_case_insensitive(self, tmp_path):
        f = tmp_path / "a.css"
        f.write_bytes(b"data")
        assert is_asset_same(
            f, checksum=hashlib.md5(b"data").hexdigest().upper()
        )

    def test_checksum_mismatch_without_fallback(self, tmp_path):
        f = tmp_path / "a.css"
        f.write_bytes(b"data")
        assert not is_asset_same(f, checksum="0" * 32)

    def test_size_and_newer_mtime(self, tmp_path):
        f = tmp_path / "a.css"
        f.write_bytes(b"data")
        remote_time = time.time() - 3600
        assert is_asset_same(f, updated_at=_iso(remote_time), size=4)

    def test_size_mismatch(self, tmp_path):
        f = tmp_path / "a.css"
        f.write_bytes(b"data")
        assert not is_asset_same(f, updated_at=_iso(time.time() - 3600), size=5)

    def test_remote_newer_than_skew(self, tmp_path):
        f = tmp_path / "a.css"
        f.write_bytes(b"data")
        now = time.time()
        os.utime(f, (now - 7200, now - 7200))
        assert not is_asset_same(f, updated_at=_iso(now), size=4)

    def test_remote_newer_within_skew(self, tmp_path):
        f = tmp_path / "a.css"
        f.write_bytes(b"data")
        now = time.time()
        os.utime(f, (now - 60, now - 60))
        assert is_asset_same(f, updated_at=_iso(now), size=4, skew_seconds=300)

    def test_missing_updated_at_is_not_same(self, tmp_path):
        f = tmp_path / "a.css"
        f.write_bytes(b"data")
        assert not is_asset_same(f, size=4)

    def test_unparseable_updated_at(self, tmp_path):
        f = tmp_path / "a.css"
        f.write_bytes(b"data")
        assert not is_asset_same(f, updated_at="soon", size=4)
