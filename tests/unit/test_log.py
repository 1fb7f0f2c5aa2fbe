"""
Unit tests for logging helpers.
"""

import logging

import pytest

from fileserver.log import HostLogAdapter, preview, setup_logging, PREVIEW_LENGTH


class TestHostLogAdapter:
    """Tests for the host-prefixing adapter."""

    def test_prefix(self, caplog):
        """Test the "<host> >> <msg>" format."""
        log = HostLogAdapter(logging.getLogger("tests.log"), "10.0.0.7:4000")

        with caplog.at_level(logging.INFO, logger="tests.log"):
            log.info("Serving.")
            log.warning("Failed closing connection: %s", "reset")

        assert [r.getMessage() for r in caplog.records] == [
            "10.0.0.7:4000 >> Serving.",
            "10.0.0.7:4000 >> Failed closing connection: reset",
        ]
        assert caplog.records[1].levelno == logging.WARNING

    def test_wraps_another_adapter(self, caplog):
        """Test stacking adapters keeps both prefixes."""
        inner = HostLogAdapter(logging.getLogger("tests.log"), "inner")
        outer = HostLogAdapter(inner, "outer")

        with caplog.at_level(logging.INFO, logger="tests.log"):
            outer.info("hello")

        assert caplog.records[0].getMessage() == "inner >> outer >> hello"


class TestPreview:
    """Tests for preview()."""

    def test_short_content_is_shown_whole(self):
        """Test content shorter than the preview length."""
        assert preview(b"<p>hi</p>") == "'<p>hi</p>'"

    def test_long_content_is_truncated(self):
        """Test that at most PREVIEW_LENGTH characters are shown."""
        content = b"a" * 100
        assert preview(content) == repr("a" * PREVIEW_LENGTH)

    def test_empty(self):
        assert preview(b"") == "''"

    def test_binary_content(self):
        """Test that undecodable bytes don't raise."""
        assert isinstance(preview(b"\xff\xd8\xff\xe0"), str)

    def test_str_and_custom_length(self):
        assert preview("abcdef", length=3) == "'abc'"

    def test_control_characters_are_escaped(self):
        """Test that newlines can't break log lines."""
        assert "\n" not in preview(b"line1\nline2")


class TestSetupLogging:
    """Tests for setup_logging()."""

    @pytest.mark.parametrize("level, expected", [
        ("DEBUG", logging.DEBUG),
        ("warning", logging.WARNING),
        ("nonsense", logging.INFO),
        ("BASIC_FORMAT", logging.INFO),
    ])
    def test_level(self, level, expected):
        """Test level names, including unknown ones."""
        package_logger = logging.getLogger("fileserver")
        original = package_logger.level
        try:
            setup_logging(level)
            assert package_logger.level == expected
        finally:
            package_logger.setLevel(original)
