"""
Unit tests for the command-line entry point.
"""

import logging
import socket

import pytest

from fileserver.__main__ import main, binary_name


@pytest.fixture(autouse=True)
def restore_package_log_level():
    """main() configures logging; undo it for the next test."""
    package_logger = logging.getLogger("fileserver")
    original = package_logger.level
    yield
    package_logger.setLevel(original)


class TestUsage:
    """Tests for the wrong-argument-count path."""

    @pytest.mark.parametrize("argv", [
        ["fileserver"],
        ["fileserver", "8080", "extra"],
    ])
    def test_usage_line(self, argv, capsys):
        """Test that the usage line goes to stdout with exit 0."""
        assert main(argv) == 0

        out = capsys.readouterr().out
        assert out == "fileserver usage: fileserver <port>\n"

    def test_usage_uses_base_name(self, capsys):
        """Test that directories are stripped from the program name."""
        assert main(["/usr/local/bin/fs"]) == 0
        assert capsys.readouterr().out == "fs usage: fs <port>\n"

    def test_usage_windows_path(self, capsys):
        """Test backslash-separated program paths."""
        assert main(["C:\\bin\\fs.exe"]) == 0
        assert capsys.readouterr().out == "fs.exe usage: fs.exe <port>\n"

    def test_empty_argv(self, capsys):
        assert main([]) == 0
        assert "usage" in capsys.readouterr().out


class TestBinaryName:
    @pytest.mark.parametrize("argv0, expected", [
        ("fileserver", "fileserver"),
        ("./fileserver", "fileserver"),
        ("/opt/site/fileserver", "fileserver"),
        ("C:\\site\\fileserver.exe", "fileserver.exe"),
    ])
    def test_binary_name(self, argv0, expected):
        assert binary_name(argv0) == expected


class TestFatalErrors:
    """Tests for exit status 1."""

    def test_invalid_port(self, caplog):
        """Test that a non-numeric port is fatal."""
        with caplog.at_level(logging.CRITICAL, logger="fileserver"):
            assert main(["fileserver", "http"]) == 1

        assert any("Fatal: Invalid port" in r.getMessage() for r in caplog.records)

    def test_port_in_use(self, caplog):
        """Test that a port held by someone else is fatal."""
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as occupied:
            occupied.bind(("0.0.0.0", 0))
            occupied.listen(1)
            port = occupied.getsockname()[1]

            with caplog.at_level(logging.CRITICAL, logger="fileserver"):
                assert main(["fileserver", str(port)]) == 1

        assert any("Failed to create listener" in r.getMessage() for r in caplog.records)
