"""Tests for file_handler module: output-dir validation, encoding-aware reads, idempotent writes."""

import os

import pytest

from shopify_sync.file_handler import (
    read_text,
    remove_file,
    resolve_within,
    validate_output_dir,
    write_file,
    write_if_changed,
)

# =============================================================================
# validate_output_dir / resolve_within
# =============================================================================


class TestValidateOutputDir:
    def test_existing_directory(self, tmp_path):
        assert validate_output_dir(str(tmp_path)) == tmp_path.resolve()

    def test_missing_directory_allowed(self, tmp_path):
        target = tmp_path / "not-yet"
        assert validate_output_dir(str(target)) == target.resolve()
        assert not target.exists()

    def test_file_rejected(self, tmp_path):
        f = tmp_path / "store.txt"
        f.write_text("x")
        with pytest.raises(ValueError, match="not a directory"):
            validate_output_dir(str(f))

    def test_relative_resolved_against_cwd(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert validate_output_dir("store") == (tmp_path / "store").resolve()


class TestResolveWithin:
    def test_inside(self, tmp_path):
        result = resolve_within(tmp_path, "assets/theme.css")
        assert result == (tmp_path / "assets" / "theme.css").resolve()

    def test_escape_rejected(self, tmp_path):
        with pytest.raises(ValueError, match="outside output directory"):
            resolve_within(tmp_path, "../elsewhere.txt")

    def test_absolute_rejected(self, tmp_path):
        with pytest.raises(ValueError, match="outside output directory"):
            resolve_within(tmp_path, "/etc/passwd")


# =============================================================================
# read_text
# =============================================================================


class TestReadText:
    def test_utf8_file(self, tmp_path):
        f = tmp_path / "page.html"
        f.write_bytes("<p>Hello, world!</p>".encode("utf-8"))
        assert read_text(f) == "<p>Hello, world!</p>"

    def test_empty_file(self, tmp_path):
        f = tmp_path / "empty.liquid"
        f.write_bytes(b"")
        assert read_text(f) == ""

    @pytest.mark.parametrize(
        "text", ["?", "—", "é", "<p>Café — crème</p>"]
    )
    def test_short_and_non_ascii_utf8(self, tmp_path, text):
        f = tmp_path / "body.html"
        f.write_bytes(text.encode("utf-8"))
        assert read_text(f) == text

    def test_non_utf8_file(self, tmp_path):
        f = tmp_path / "latin.html"
        text = "Caf\xe9 cr\xe8me br\xfbl\xe9e na\xefve r\xe9sum\xe9 " * 4
        f.write_bytes(text.encode("latin-1"))
        content = read_text(f)
        assert "Caf" in content


# =============================================================================
# write_file / write_if_changed / remove_file
# =============================================================================


class TestWriteFile:
    def test_write_text(self, tmp_path):
        f = tmp_path / "out.txt"
        count = write_file(f, "Hello, world!")
        assert f.read_text(encoding="utf-8") == "Hello, world!"
        assert count == len("Hello, world!".encode("utf-8"))

    def test_write_bytes(self, tmp_path):
        f = tmp_path / "assets" / "logo.png"
        assert write_file(f, b"\x89PNG\r\n") == 6
        assert f.read_bytes() == b"\x89PNG\r\n"

    def test_creates_parent_directories(self, tmp_path):
        f = tmp_path / "blogs" / "news" / "drafts" / "post.html"
        write_file(f, "nested")
        assert f.read_text(encoding="utf-8") == "nested"


class TestWriteIfChanged:
    def test_new_file_written(self, tmp_path):
        f = tmp_path / "a" / "b.txt"
        assert write_if_changed(f, "x") is True
        assert f.read_text() == "x"

    def test_same_content_not_rewritten(self, tmp_path):
        f = tmp_path / "b.txt"
        f.write_text("same")
        os.utime(f, (1_000_000, 1_000_000))

        assert write_if_changed(f, "same") is False
        assert f.stat().st_mtime == 1_000_000

    def test_changed_content_written(self, tmp_path):
        f = tmp_path / "b.txt"
        f.write_text("old")
        assert write_if_changed(f, b"new") is True
        assert f.read_bytes() == b"new"


class TestRemoveFile:
    def test_removes(self, tmp_path):
        f = tmp_path / "gone.txt"
        f.write_text("x")
        assert remove_file(f) is True
        assert not f.exists()

    def test_missing(self, tmp_path):
        assert remove_file(tmp_path / "never.txt") is False

