"""Unit tests for utility functions."""

from pathlib import Path

import pytest

from shopsync.utils import (
    BINARY_EXTENSIONS,
    THEME_DIRECTORIES,
    format_size,
    is_binary_file,
)


class TestIsBinaryFile:
    """Tests for is_binary_file function."""

    @pytest.mark.parametrize(
        "key",
        [
            "assets/logo.png",
            "assets/hero.JPG",
            "assets/font.woff2",
            "assets/icon.svg",
            "assets/clip.mp4",
        ],
    )
    def test_binary_keys(self, key):
        """Test that media and font assets are binary."""
        assert is_binary_file(key) is True

    @pytest.mark.parametrize(
        "key",
        [
            "layout/theme.liquid",
            "config/settings_data.json",
            "assets/theme.css",
            "assets/app.js",
            "locales/en.default.json",
        ],
    )
    def test_text_keys(self, key):
        """Test that templates, styles and scripts are text."""
        assert is_binary_file(key) is False

    def test_accepts_path(self):
        """Test that Path objects are accepted."""
        assert is_binary_file(Path("/tmp/theme/assets/photo.webp")) is True

    def test_no_extension(self):
        """Test files without extension are text."""
        assert is_binary_file("assets/LICENSE") is False

    def test_extensions_are_lowercase(self):
        """Test the lookup set only holds lowercase extensions."""
        assert all(ext == ext.lower() for ext in BINARY_EXTENSIONS)


class TestThemeDirectories:
    """Tests for the known theme folders."""

    def test_contains_standard_folders(self):
        """Test every standard theme folder is known."""
        assert set(THEME_DIRECTORIES) == {
            "assets",
            "blocks",
            "config",
            "layout",
            "locales",
            "sections",
            "snippets",
            "templates",
        }


class TestFormatSize:
    """Tests for format_size function."""

    def test_bytes(self):
        assert format_size(512) == "512.0 B"

    def test_kilobytes(self):
        assert format_size(1536) == "1.5 KB"

    def test_megabytes(self):
        assert format_size(5 * 1024 * 1024) == "5.0 MB"

    def test_terabytes(self):
        assert format_size(2 * 1024**4) == "2.0 TB"
