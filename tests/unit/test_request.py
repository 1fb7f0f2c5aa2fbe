"""
Unit tests for request line parsing.
"""

import pytest

from fileserver.http.request import (
    Request,
    RequestLineParser,
    RequestParseError,
    parse_request_line,
    DEFAULT_DOCUMENT,
)


class TestRequestLineParser:
    """Tests for RequestLineParser class."""

    @pytest.mark.parametrize("line, name, ext, version", [
        ("GET /index.html HTTP/1.1\r\n", "index.html", "html", "1.1"),
        ("GET /photo.jpg HTTP/1.0\r\n", "photo.jpg", "jpg", "1.0"),
        ("GET /My_File2.JPEG HTTP/2.0\r\n", "My_File2.JPEG", "JPEG", "2.0"),
        ("GET /a.b HTTP/9.9\r\n", "a.b", "b", "9.9"),
        ("GET /_._ HTTP/0.9\r\n", "_._", "_", "0.9"),
    ])
    def test_explicit_path(self, line, name, ext, version):
        """Test that name, extension and version come back exactly."""
        request = RequestLineParser().parse(line)

        assert request.file_name == name
        assert request.file_extension == ext
        assert request.http_version == version
        assert request.raw == line
        assert request.is_default_document is False

    def test_default_document(self):
        """Test that an omitted path resolves to index.html."""
        request = parse_request_line("GET / HTTP/1.0\r\n")

        assert request.file_name == "index.html"
        assert request.file_name == DEFAULT_DOCUMENT
        assert request.file_extension == "html"
        assert request.http_version == "1.0"
        assert request.is_default_document is True

    def test_explicit_index_is_not_default(self):
        """Test that asking for index.html by name is not the default path."""
        request = parse_request_line("GET /index.html HTTP/1.1\r\n")
        assert request.is_default_document is False

    def test_request_is_immutable(self):
        """Test that parsed requests are frozen."""
        request = parse_request_line("GET / HTTP/1.1\r\n")
        with pytest.raises(AttributeError):
            request.file_name = "other.html"

    @pytest.mark.parametrize("line", [
        "POST / HTTP/1.1\r\n",               # method
        "get / HTTP/1.1\r\n",                # method is case-sensitive
        "HEAD /index.html HTTP/1.1\r\n",
        "GET / HTTP/1.1",                    # no terminator
        "GET / HTTP/1.1\n",                  # bare LF
        "GET / HTTP/1.1\r",                  # bare CR
        "GET / 1.1\r\n",                     # missing HTTP/
        "GET / HTTPS/1.1\r\n",
        "GET index.html HTTP/1.1\r\n",       # missing leading slash
        "GET /index HTTP/1.1\r\n",           # missing extension
        "GET /index. HTTP/1.1\r\n",
        "GET /.html HTTP/1.1\r\n",           # missing name
        "GET /a.b.c HTTP/1.1\r\n",           # more than one dot
        "GET /dir/a.html HTTP/1.1\r\n",      # nested path
        "GET /../a.html HTTP/1.1\r\n",       # traversal
        "GET /a-b.html HTTP/1.1\r\n",        # '-' is not a word character
        "GET /a.html?x=1 HTTP/1.1\r\n",      # query string
        "GET /café.html HTTP/1.1\r\n",       # non-ASCII word character
        "GET /a.html HTTP/1\r\n",            # incomplete version
        "GET /a.html HTTP/10.1\r\n",         # multi-digit version
        "GET /a.html HTTP/1.10\r\n",
        "GET /a.html HTTP/x.y\r\n",
        "GET  /a.html HTTP/1.1\r\n",         # extra space
        "GET /a.html  HTTP/1.1\r\n",
        "GET /a.html HTTP/1.1 \r\n",
        "GET /a.html HTTP/1.1\r\nHost: x\r\n",  # anything after CRLF
        "XGET / HTTP/1.1\r\n",               # no substring matches
        "",
        "\r\n",
    ])
    def test_rejects_non_matching_lines(self, line):
        """Test that anything outside the grammar is a parse error."""
        with pytest.raises(RequestParseError):
            RequestLineParser().parse(line)

    def test_error_reports_column(self):
        """Test that the error points at the failing position."""
        with pytest.raises(RequestParseError) as exc_info:
            parse_request_line("GET /index HTTP/1.1\r\n")

        error = exc_info.value
        assert error.column == len("GET /index")
        assert error.line == "GET /index HTTP/1.1\r\n"
        assert "'.'" in str(error)

    def test_error_at_end_of_line(self):
        """Test the message when the line stops early."""
        with pytest.raises(RequestParseError) as exc_info:
            parse_request_line("GET / HTTP/1.")

        assert "end of line" in str(exc_info.value)

    def test_parser_is_reusable(self):
        """Test that one parser instance handles many lines."""
        parser = RequestLineParser()

        first = parser.parse("GET /a.html HTTP/1.0\r\n")
        second = parser.parse("GET /b.jpg HTTP/1.1\r\n")

        assert first == Request("GET /a.html HTTP/1.0\r\n", "a.html", "html", "1.0")
        assert second.file_name == "b.jpg"
