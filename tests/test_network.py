"""
Tests for network interfaces and mock implementations.

This module contains tests for the NetworkStream and NetworkBackend
interfaces, their mock implementations, and the URL helpers.
"""

import socket

import pytest

from sfs_client.network import (
    MockNetworkBackend,
    MockNetworkStream,
    NetworkBackend,
    NetworkStream,
    SocketNetworkBackend,
    format_host_header,
    parse_url,
    validate_port,
)


class TestMockNetworkStream:
    """Test cases for MockNetworkStream."""
    
    def test_read_write_basic(self):
        """Test basic read and write operations."""
        stream = MockNetworkStream()
        
        stream.write(b"hello world")
        assert stream.written_data == b"hello world"
        
        stream.add_data(b"hello world")
        
        assert stream.read(5) == b"hello"
        assert stream.read(100) == b" world"
    
    def test_read_empty_stream(self):
        """Test reading from an empty stream."""
        stream = MockNetworkStream()
        
        assert stream.read(10) == b""
    
    def test_read_with_initial_data(self):
        """Test reading from a stream with initial data."""
        stream = MockNetworkStream(data=b"initial data")
        
        assert stream.read(7) == b"initial"
        assert stream.read(100) == b" data"
    
    def test_close(self):
        """Test closing the stream."""
        stream = MockNetworkStream()
        assert not stream.is_closed
        
        stream.close()
        assert stream.is_closed
    
    def test_read_after_close(self):
        """Test reading from a closed stream raises error."""
        stream = MockNetworkStream(data=b"data")
        stream.close()
        
        with pytest.raises(RuntimeError, match="Stream is closed"):
            stream.read(10)
    
    def test_write_after_close(self):
        """Test writing to a closed stream raises error."""
        stream = MockNetworkStream()
        stream.close()
        
        with pytest.raises(RuntimeError, match="Stream is closed"):
            stream.write(b"data")
    
    def test_extra_info(self):
        """Test getting and setting extra information."""
        stream = MockNetworkStream()
        assert stream.get_extra_info("peername") is None
        
        stream.set_extra_info("peername", ("example.com", 80))
        assert stream.get_extra_info("peername") == ("example.com", 80)


class TestMockNetworkBackend:
    """Test cases for MockNetworkBackend."""
    
    def test_reply_served_after_write(self):
        """Test that a queued reply is served once a request was written."""
        backend = MockNetworkBackend()
        backend.queue_reply(b"response")
        stream = backend.connect_tcp("example.com", 80)
        
        assert stream.read(100) == b""
        
        stream.write(b"request")
        assert stream.read(100) == b"response"
        assert backend.pending_replies == 0
    
    def test_reply_chunk_size(self):
        """Test that chunk_size limits every read."""
        backend = MockNetworkBackend()
        backend.queue_reply(b"abcdefgh", chunk_size=3)
        stream = backend.connect_tcp("example.com", 80)
        stream.write(b"request")
        
        assert [stream.read(100) for _ in range(4)] == [b"abc", b"def", b"gh", b""]
    
    def test_reply_error_after_data(self):
        """Test that a scripted error is raised once the data is consumed."""
        backend = MockNetworkBackend()
        backend.queue_reply(b"partial", error=socket.timeout("timed out"))
        stream = backend.connect_tcp("example.com", 80)
        stream.write(b"request")
        
        assert stream.read(100) == b"partial"
        with pytest.raises(socket.timeout):
            stream.read(100)
    
    def test_replies_span_connections(self):
        """Test that replies are consumed in order across streams."""
        backend = MockNetworkBackend()
        backend.queue_reply(b"first")
        backend.queue_reply(b"second")
        
        one = backend.connect_tcp("example.com", 80)
        two = backend.connect_tcp("example.com", 80)
        two.write(b"request")
        one.write(b"request")
        
        assert two.read(100) == b"first"
        assert one.read(100) == b"second"
        assert backend.connect_calls == [("example.com", 80, None)] * 2
    
    def test_connect_error(self):
        """Test scripted connection failures."""
        backend = MockNetworkBackend()
        backend.queue_connect_error(ConnectionRefusedError("refused"))
        
        with pytest.raises(ConnectionRefusedError):
            backend.connect_tcp("example.com", 80)
        
        assert backend.connect_tcp("example.com", 80) is backend.streams[0]
    
    def test_tls(self):
        """Test TLS upgrade marks the stream."""
        backend = MockNetworkBackend()
        stream = backend.connect_tcp("example.com", 443)
        
        tls = backend.connect_tls(stream, "example.com")
        
        assert tls.get_extra_info("ssl_object") is True
        assert tls.get_extra_info("server_hostname") == "example.com"
    
    def test_open_streams_and_reset(self):
        """Test open stream tracking and reset."""
        backend = MockNetworkBackend()
        first = backend.connect_tcp("example.com", 80)
        backend.connect_tcp("example.com", 80)
        first.close()
        
        assert len(backend.open_streams) == 1
        
        backend.queue_reply(b"x")
        backend.reset()
        assert backend.streams == []
        assert backend.pending_replies == 0
    
    def test_interfaces(self):
        """Test that the implementations satisfy the interfaces."""
        assert isinstance(MockNetworkStream(), NetworkStream)
        assert isinstance(MockNetworkBackend(), NetworkBackend)
        assert isinstance(SocketNetworkBackend(), NetworkBackend)


class TestUtils:
    """Test URL and port helpers."""
    
    @pytest.mark.parametrize(
        "url, expected",
        [
            ("http://example.com", ("http", "example.com", 80, "/")),
            ("https://example.com/a/b", ("https", "example.com", 443, "/a/b")),
            ("HTTPS://Example.com:8443/x?y=1#frag", ("https", "example.com", 8443, "/x?y=1")),
            ("http://[::1]:8080/", ("http", "::1", 8080, "/")),
            ("ftp://example.com/file", ("ftp", "example.com", 0, "/file")),
        ],
    )
    def test_parse_url(self, url, expected):
        assert parse_url(url) == expected
    
    @pytest.mark.parametrize("url", ["example.com/path", "http:///path", "http://example.com:99999/"])
    def test_parse_url_invalid(self, url):
        with pytest.raises(ValueError):
            parse_url(url)
    
    def test_format_host_header(self):
        assert format_host_header("example.com", 80, "http") == "example.com"
        assert format_host_header("example.com", 443, "https") == "example.com"
        assert format_host_header("example.com", 8080, "http") == "example.com:8080"
        assert format_host_header("::1", 8080, "http") == "[::1]:8080"
    
    def test_validate_port(self):
        assert validate_port("8080") == 8080
        
        with pytest.raises(ValueError, match="Invalid port"):
            validate_port("http")
        
        with pytest.raises(ValueError, match="between 1 and 65535"):
            validate_port(0)
