"""
Transport session for sfs_client.

A TransportSession is the handle the transport engine drives: it is
configured through setter primitives (method, URL, headers, write
callback, error buffer) and then performs one blocking HTTP/1.1
exchange per perform() call, using h11 over a NetworkStream.

perform() never raises for transfer problems. It reports an EngineCode
and, if an error buffer is bound, writes a human readable description
of the failure into it. The setters raise SessionError when they
reject their input.
"""

import logging
import socket
from enum import IntEnum
from typing import TYPE_CHECKING, Any, Callable, List, Optional, Tuple

import h11
from typing_extensions import Final

from ..config import DEFAULT_READ_CHUNK_SIZE, DEFAULT_TIMEOUT
from ..exceptions import SessionError
from ..network import NetworkBackend, NetworkStream, SocketNetworkBackend
from ..network.utils import format_host_header, parse_url

if TYPE_CHECKING:
    from .guards import HeaderList  # Forward reference

logger = logging.getLogger(__name__)

# Capacity of the diagnostic buffer, terminating NUL included
ERROR_BUFFER_SIZE: Final = 256

SUPPORTED_SCHEMES: Final = ("http", "https")

# (chunk, write_target) -> number of bytes consumed. Returning anything
# other than len(chunk), such as WRITE_ABORT, aborts the transfer.
WriteCallback = Callable[[bytes, Any], int]
WRITE_ABORT: Final = -1


class EngineCode(IntEnum):
    """Outcome of a session primitive or transfer."""
    OK = 0
    UNSUPPORTED_PROTOCOL = 1
    URL_MALFORMAT = 2
    COULDNT_RESOLVE_HOST = 3
    COULDNT_CONNECT = 4
    WEIRD_SERVER_REPLY = 5
    WRITE_ERROR = 6
    OPERATION_TIMEDOUT = 7
    SSL_CONNECT_ERROR = 8
    BAD_FUNCTION_ARGUMENT = 9
    GOT_NOTHING = 10
    SEND_ERROR = 11
    RECV_ERROR = 12


_DESCRIPTIONS = {
    EngineCode.OK: "No error",
    EngineCode.UNSUPPORTED_PROTOCOL: "Unsupported protocol",
    EngineCode.URL_MALFORMAT: "URL using bad/illegal format or missing URL",
    EngineCode.COULDNT_RESOLVE_HOST: "Couldn't resolve host name",
    EngineCode.COULDNT_CONNECT: "Couldn't connect to server",
    EngineCode.WEIRD_SERVER_REPLY: "Weird server reply",
    EngineCode.WRITE_ERROR: "Failed writing received data to disk/application",
    EngineCode.OPERATION_TIMEDOUT: "Timeout was reached",
    EngineCode.SSL_CONNECT_ERROR: "SSL connect error",
    EngineCode.BAD_FUNCTION_ARGUMENT: "A session primitive was given a bad argument",
    EngineCode.GOT_NOTHING: "Server returned nothing (no headers, no data)",
    EngineCode.SEND_ERROR: "Failed sending data to the peer",
    EngineCode.RECV_ERROR: "Failure when receiving data from the peer",
}


def describe(code: EngineCode) -> str:
    """Get the generic description of an engine code."""
    return _DESCRIPTIONS[code]


class _TransferFailed(Exception):
    """Internal signal unwinding a transfer to perform()."""

    def __init__(self, code: EngineCode, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


class TransportSession:
    """
    Blocking HTTP/1.1 session.

    Options persist across transfers until changed. The underlying
    network stream is kept alive between transfers to the same origin
    when the server allows it.
    """

    def __init__(self, backend: Optional[NetworkBackend] = None) -> None:
        """
        Initialize the session.

        Args:
            backend: Network backend used to open connections
        """
        self._backend = backend if backend is not None else SocketNetworkBackend()
        self._closed = False

        # Baseline options
        self._timeout = DEFAULT_TIMEOUT
        self._verify_tls = True
        self._read_chunk_size = DEFAULT_READ_CHUNK_SIZE

        # Per-request options
        self._method = "GET"
        self._body: Optional[bytes] = None
        self._headers: Optional["HeaderList"] = None
        self._url: Optional[str] = None
        self._target: Optional[Tuple[str, str, int, str]] = None
        self._write_callback: Optional[WriteCallback] = None
        self._write_target: Any = None
        self._error_buffer: Optional[bytearray] = None

        # Transfer state
        self._stream: Optional[NetworkStream] = None
        self._origin: Optional[Tuple[str, str, int]] = None
        self._h11: Optional[h11.Connection] = None
        self._response_code: Optional[int] = None
        self._received = 0

        # Stats
        self.transfer_count = 0
        self.connect_count = 0

        logger.debug("Transport session initialized")

    # -- baseline configuration -------------------------------------------

    def set_timeout(self, timeout: float) -> None:
        """
        Set the timeout used for connecting and for each network read.

        Raises:
            SessionError: If timeout is not a positive number
        """
        self._check_open()
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
            raise SessionError(
                EngineCode.BAD_FUNCTION_ARGUMENT, f"Invalid timeout: {timeout!r}"
            )
        self._timeout = float(timeout)

    def set_verify_tls(self, verify: bool) -> None:
        self._check_open()
        self._verify_tls = bool(verify)

    def set_read_chunk_size(self, size: int) -> None:
        self._check_open()
        if isinstance(size, bool) or not isinstance(size, int) or size <= 0:
            raise SessionError(EngineCode.BAD_FUNCTION_ARGUMENT, f"Invalid read size: {size!r}")
        self._read_chunk_size = size

    # -- per-request configuration ----------------------------------------

    def set_method_get(self) -> None:
        """Use GET for the next transfers and drop any request body."""
        self._check_open()
        self._method = "GET"
        self._body = None

    def set_method_post(self, body: bytes) -> None:
        """
        Use POST for the next transfers.

        Args:
            body: Request body. The session keeps its own copy.
        """
        self._check_open()
        if not isinstance(body, (bytes, bytearray, memoryview)):
            raise SessionError(EngineCode.BAD_FUNCTION_ARGUMENT, "POST body must be bytes")
        self._method = "POST"
        self._body = bytes(body)

    def set_headers(self, headers: Optional["HeaderList"]) -> None:
        """Attach a header list to the next transfers, or detach with None."""
        self._check_open()
        self._headers = headers

    @property
    def headers(self) -> Optional["HeaderList"]:
        return self._headers

    def set_url(self, url: str) -> None:
        """
        Set the URL of the next transfers.

        Raises:
            SessionError: If the URL cannot be parsed or uses a scheme
                          other than http or https
        """
        self._check_open()
        if not isinstance(url, str):
            raise SessionError(EngineCode.BAD_FUNCTION_ARGUMENT, "URL must be a string")

        try:
            target = parse_url(url)
        except ValueError as e:
            raise SessionError(EngineCode.URL_MALFORMAT, f"URL rejected: {e}", e)

        if target[0] not in SUPPORTED_SCHEMES:
            raise SessionError(
                EngineCode.UNSUPPORTED_PROTOCOL,
                f"Protocol \"{target[0]}\" not supported",
            )

        self._url = url
        self._target = target

    @property
    def url(self) -> Optional[str]:
        return self._url

    def set_write_callback(self, callback: Optional[WriteCallback]) -> None:
        """Set the function receiving response body chunks."""
        self._check_open()
        self._write_callback = callback

    def set_write_target(self, target: Any) -> None:
        """Set the object passed to the write callback with every chunk."""
        self._check_open()
        self._write_target = target

    def bind_error_buffer(self, buffer: Optional[bytearray]) -> None:
        """
        Bind the buffer receiving failure descriptions, or unbind with None.

        Raises:
            SessionError: If the session is closed or the buffer is not a
                          bytearray of at least ERROR_BUFFER_SIZE bytes
        """
        self._check_open()
        if buffer is not None:
            if not isinstance(buffer, bytearray) or len(buffer) < ERROR_BUFFER_SIZE:
                raise SessionError(
                    EngineCode.BAD_FUNCTION_ARGUMENT,
                    f"Error buffer must be a bytearray of at least {ERROR_BUFFER_SIZE} bytes",
                )
        self._error_buffer = buffer

    @property
    def error_buffer(self) -> Optional[bytearray]:
        return self._error_buffer

    # -- transfer ---------------------------------------------------------

    def perform(self) -> EngineCode:
        """
        Execute one blocking transfer with the current options.

        Returns:
            EngineCode.OK if a complete response was received, whatever
            its HTTP status. Any other code describes why the transfer
            failed; the description is written to the error buffer.
        """
        self._response_code = None
        self._received = 0

        if self._closed:
            return self._fail(EngineCode.BAD_FUNCTION_ARGUMENT, "Session is closed")

        if self._target is None:
            return self._fail(EngineCode.URL_MALFORMAT, "No URL set")

        self.transfer_count += 1

        try:
            self._exchange()
        except _TransferFailed as e:
            self._drop_stream()
            return self._fail(e.code, e.message)

        logger.debug(
            f"{self._method} {self._url} -> {self._response_code} ({self._received} bytes)"
        )
        return EngineCode.OK

    def response_code(self) -> int:
        """
        Get the HTTP status code of the last transfer.

        Raises:
            SessionError: If the last transfer did not receive a response
        """
        if self._response_code is None:
            raise SessionError(EngineCode.BAD_FUNCTION_ARGUMENT, "No response code available")
        return self._response_code

    def close(self) -> None:
        """Release the network stream. The session cannot be used afterwards."""
        if self._closed:
            return
        self._drop_stream()
        self._closed = True
        self._headers = None
        self._error_buffer = None
        self._write_callback = None
        self._write_target = None
        logger.debug(
            f"Transport session closed after {self.transfer_count} transfers"
        )

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def has_open_stream(self) -> bool:
        return self._stream is not None and not self._stream.is_closed

    # -- internals --------------------------------------------------------

    def _check_open(self) -> None:
        if self._closed:
            raise SessionError(EngineCode.BAD_FUNCTION_ARGUMENT, "Session is closed")

    def _exchange(self) -> None:
        scheme, host, port, target = self._target
        reused = self._can_reuse(scheme, host, port)
        if not reused:
            self._open(scheme, host, port)

        try:
            self._transfer(scheme, host, port, target)
        except _TransferFailed as e:
            # A kept-alive stream the server already closed yields nothing;
            # that is a dead connection, not an answer to this request.
            stale = e.code in (
                EngineCode.GOT_NOTHING,
                EngineCode.SEND_ERROR,
                EngineCode.RECV_ERROR,
            )
            if not (reused and stale and self._received == 0):
                raise
            logger.debug(f"Reused connection to {host}:{port} was dead, reconnecting")
            self._drop_stream()
            self._open(scheme, host, port)
            self._transfer(scheme, host, port, target)

    def _can_reuse(self, scheme: str, host: str, port: int) -> bool:
        return (
            self.has_open_stream
            and self._origin == (scheme, host, port)
            and self._h11 is not None
            and self._h11.our_state is h11.IDLE
        )

    def _open(self, scheme: str, host: str, port: int) -> None:
        self._drop_stream()

        try:
            stream = self._backend.connect_tcp(host, port, self._timeout)
        except socket.timeout:
            raise _TransferFailed(
                EngineCode.OPERATION_TIMEDOUT,
                f"Connection timed out after {int(self._timeout * 1000)} milliseconds",
            )
        except socket.gaierror:
            raise _TransferFailed(
                EngineCode.COULDNT_RESOLVE_HOST, f"Could not resolve host: {host}"
            )
        except ValueError as e:
            raise _TransferFailed(EngineCode.URL_MALFORMAT, f"Bad port: {e}")
        except OSError as e:
            raise _TransferFailed(
                EngineCode.COULDNT_CONNECT,
                f"Failed to connect to {host} port {port}: {e}",
            )

        if scheme == "https":
            try:
                stream = self._backend.connect_tls(stream, host, self._timeout, self._verify_tls)
            except socket.timeout:
                stream.close()
                raise _TransferFailed(
                    EngineCode.OPERATION_TIMEDOUT,
                    f"TLS handshake timed out after {int(self._timeout * 1000)} milliseconds",
                )
            except (OSError, RuntimeError) as e:
                stream.close()
                raise _TransferFailed(EngineCode.SSL_CONNECT_ERROR, f"TLS handshake failed: {e}")

        self._stream = stream
        self._origin = (scheme, host, port)
        self._h11 = h11.Connection(h11.CLIENT)
        self.connect_count += 1

    def _transfer(self, scheme: str, host: str, port: int, target: str) -> None:
        conn = self._h11

        try:
            headers: List[Tuple[bytes, bytes]] = [
                (b"Host", format_host_header(host, port, scheme).encode("idna"))
            ]
            if self._headers is not None:
                headers.extend(self._headers.fields)
            if self._method == "POST":
                headers.append((b"Content-Length", str(len(self._body or b"")).encode()))

            self._send(conn.send(h11.Request(method=self._method, target=target, headers=headers)))
            if self._body:
                self._send(conn.send(h11.Data(data=self._body)))
            self._send(conn.send(h11.EndOfMessage()))
        except (h11.LocalProtocolError, UnicodeError) as e:
            raise _TransferFailed(EngineCode.SEND_ERROR, f"Invalid request: {e}")

        self._receive(conn)

        if conn.our_state is h11.DONE and conn.their_state is h11.DONE:
            conn.start_next_cycle()
        else:
            self._drop_stream()

    def _send(self, data: Optional[bytes]) -> None:
        if not data:
            return
        try:
            self._stream.write(data)
        except socket.timeout:
            raise _TransferFailed(
                EngineCode.OPERATION_TIMEDOUT,
                f"Operation timed out after {int(self._timeout * 1000)} milliseconds while sending",
            )
        except (OSError, RuntimeError) as e:
            raise _TransferFailed(EngineCode.SEND_ERROR, f"Send failure: {e}")

    def _receive(self, conn: h11.Connection) -> None:
        while True:
            try:
                event = conn.next_event()
            except h11.RemoteProtocolError as e:
                raise self._protocol_failure(str(e))

            if event is h11.NEED_DATA:
                conn.receive_data(self._read())
                continue

            if isinstance(event, h11.InformationalResponse):
                continue

            if isinstance(event, h11.Response):
                self._response_code = event.status_code
                continue

            if isinstance(event, h11.Data):
                self._deliver(event.data)
                continue

            if isinstance(event, h11.EndOfMessage):
                return

            if isinstance(event, h11.ConnectionClosed):
                raise self._protocol_failure("connection closed by server")

            raise _TransferFailed(
                EngineCode.WEIRD_SERVER_REPLY, f"Unexpected protocol event: {event!r}"
            )

    def _read(self) -> bytes:
        try:
            data = self._stream.read(self._read_chunk_size)
        except socket.timeout:
            raise _TransferFailed(
                EngineCode.OPERATION_TIMEDOUT,
                f"Operation timed out after {int(self._timeout * 1000)} milliseconds "
                f"with {self._received} bytes received",
            )
        except (OSError, RuntimeError) as e:
            raise _TransferFailed(EngineCode.RECV_ERROR, f"Recv failure: {e}")

        self._received += len(data)
        return data

    def _protocol_failure(self, detail: str) -> _TransferFailed:
        if self._received == 0:
            return _TransferFailed(EngineCode.GOT_NOTHING, "Empty reply from server")
        if self._response_code is None:
            return _TransferFailed(EngineCode.WEIRD_SERVER_REPLY, f"Invalid server reply: {detail}")
        return _TransferFailed(
            EngineCode.RECV_ERROR,
            f"Transfer closed with outstanding read data remaining: {detail}",
        )

    def _deliver(self, chunk: bytes) -> None:
        if not chunk or self._write_callback is None:
            return

        consumed = self._write_callback(chunk, self._write_target)
        if consumed != len(chunk):
            raise _TransferFailed(
                EngineCode.WRITE_ERROR,
                f"Failure writing output to destination, passed {len(chunk)} returned {consumed}",
            )

    def _fail(self, code: EngineCode, message: str) -> EngineCode:
        logger.debug(f"Transfer failed ({code.name}): {message}")
        buffer = self._error_buffer
        if buffer is not None:
            encoded = message.encode("utf-8", "replace")[: ERROR_BUFFER_SIZE - 1]
            buffer[: len(encoded)] = encoded
            buffer[len(encoded)] = 0
        return code

    def _drop_stream(self) -> None:
        if self._stream is not None:
            self._stream.close()
        self._stream = None
        self._origin = None
        self._h11 = None
