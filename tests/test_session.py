"""
Tests for TransportSession, the handle driven by the transport engine.
"""

import socket

import pytest

from sfs_client.connection.session import (
    ERROR_BUFFER_SIZE,
    WRITE_ABORT,
    EngineCode,
    TransportSession,
    describe,
)
from sfs_client.exceptions import SessionError

from conftest import http_response


def collect(chunk, target):
    target.extend(chunk)
    return len(chunk)


@pytest.fixture
def session(backend):
    session = TransportSession(backend)
    session.set_write_callback(collect)
    yield session
    session.close()


class TestConfiguration:
    """Setter primitives validate their input."""

    @pytest.mark.parametrize("timeout", [0, -1, "5", None, True])
    def test_invalid_timeout(self, session, timeout):
        with pytest.raises(SessionError) as exc_info:
            session.set_timeout(timeout)

        assert exc_info.value.engine_code is EngineCode.BAD_FUNCTION_ARGUMENT

    def test_invalid_read_chunk_size(self, session):
        with pytest.raises(SessionError):
            session.set_read_chunk_size(0)

    def test_set_url(self, session):
        session.set_url("https://svc/meta")
        assert session.url == "https://svc/meta"

    @pytest.mark.parametrize(
        "url, code",
        [
            ("svc/meta", EngineCode.URL_MALFORMAT),
            ("http:///meta", EngineCode.URL_MALFORMAT),
            ("ftp://svc/meta", EngineCode.UNSUPPORTED_PROTOCOL),
            (b"https://svc", EngineCode.BAD_FUNCTION_ARGUMENT),
        ],
    )
    def test_rejected_url(self, session, url, code):
        with pytest.raises(SessionError) as exc_info:
            session.set_url(url)

        assert exc_info.value.engine_code is code
        assert session.url is None

    def test_post_body_must_be_bytes(self, session):
        with pytest.raises(SessionError):
            session.set_method_post("text")

    @pytest.mark.parametrize("buffer", [bytearray(10), b"\x00" * ERROR_BUFFER_SIZE])
    def test_rejected_error_buffer(self, session, buffer):
        with pytest.raises(SessionError):
            session.bind_error_buffer(buffer)

    def test_closed_session_rejects_setters(self, session):
        session.close()

        with pytest.raises(SessionError):
            session.set_url("https://svc/meta")
        with pytest.raises(SessionError):
            session.bind_error_buffer(None)


class TestPerform:
    """Transfers report engine codes and fill the error buffer."""

    def test_success(self, session, backend):
        target = bytearray()
        session.set_write_target(target)
        session.set_url("http://svc/meta")
        backend.queue_reply(http_response(404, b"nope"))

        assert session.perform() is EngineCode.OK
        assert session.response_code() == 404
        assert target == b"nope"
        assert session.transfer_count == 1

    def test_no_url(self, session):
        buffer = bytearray(ERROR_BUFFER_SIZE)
        session.bind_error_buffer(buffer)

        assert session.perform() is EngineCode.URL_MALFORMAT
        assert buffer.startswith(b"No URL set\x00")
        assert session.transfer_count == 0

    def test_closed(self, session):
        session.close()

        assert session.perform() is EngineCode.BAD_FUNCTION_ARGUMENT

    def test_response_code_unavailable_after_failure(self, session, backend):
        session.set_url("http://svc/meta")
        backend.queue_connect_error(ConnectionRefusedError("refused"))

        assert session.perform() is EngineCode.COULDNT_CONNECT
        with pytest.raises(SessionError):
            session.response_code()

    def test_error_buffer_is_nul_terminated(self, session, backend):
        buffer = bytearray(b"\xff" * ERROR_BUFFER_SIZE)
        session.bind_error_buffer(buffer)
        session.set_url("http://svc/meta")
        backend.queue_reply(b"", error=socket.timeout("timed out"))

        assert session.perform() is EngineCode.OPERATION_TIMEDOUT

        message = b"Operation timed out after 30000 milliseconds with 0 bytes received"
        assert buffer[:len(message) + 1] == message + b"\x00"

    def test_write_callback_abort(self, session, backend):
        session.set_write_callback(lambda chunk, target: WRITE_ABORT)
        session.set_url("http://svc/meta")
        backend.queue_reply(http_response(200, b"data"))

        assert session.perform() is EngineCode.WRITE_ERROR
        assert not session.has_open_stream

    def test_no_write_callback_discards_body(self, session, backend):
        session.set_write_callback(None)
        session.set_url("http://svc/meta")
        backend.queue_reply(http_response(200, b"data"))

        assert session.perform() is EngineCode.OK
        assert session.response_code() == 200

    def test_informational_response_skipped(self, session, backend):
        target = bytearray()
        session.set_write_target(target)
        session.set_url("http://svc/meta")
        backend.queue_reply(b"HTTP/1.1 100 Continue\r\n\r\n" + http_response(200, b"ok"))

        assert session.perform() is EngineCode.OK
        assert session.response_code() == 200
        assert target == b"ok"

    def test_body_without_length_until_close(self, session, backend):
        target = bytearray()
        session.set_write_target(target)
        session.set_url("http://svc/meta")
        backend.queue_reply(b"HTTP/1.1 200 OK\r\nConnection: close\r\n\r\nstreamed")

        assert session.perform() is EngineCode.OK
        assert target == b"streamed"
        assert not session.has_open_stream

    def test_send_failure(self, session, backend, monkeypatch):
        session.set_url("http://svc/meta")
        stream = backend.connect_tcp("svc", 80)
        backend.reset()

        def broken(data):
            raise BrokenPipeError("broken pipe")

        monkeypatch.setattr(stream, "write", broken)
        monkeypatch.setattr(backend, "connect_tcp", lambda host, port, timeout=None: stream)

        assert session.perform() is EngineCode.SEND_ERROR

    def test_timeout_value_used(self, session, backend):
        session.set_timeout(5)
        session.set_url("http://svc/meta")
        backend.queue_reply(http_response(200))

        session.perform()

        assert backend.connect_calls == [("svc", 80, 5.0)]

    def test_close_releases_stream(self, session, backend):
        session.set_url("http://svc/meta")
        backend.queue_reply(http_response(200))
        session.perform()
        assert session.has_open_stream

        session.close()
        session.close()

        assert session.is_closed
        assert backend.streams[0].is_closed
        assert session.headers is None
        assert session.error_buffer is None


class TestDescribe:
    """Every engine code has a description."""

    def test_all_codes_described(self):
        for code in EngineCode:
            assert describe(code)
