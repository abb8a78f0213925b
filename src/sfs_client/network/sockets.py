"""
Blocking socket backend for sfs_client.
"""

import logging
import socket
import ssl
from typing import Any, Optional

from .backend import NetworkBackend
from .stream import NetworkStream
from .utils import create_socket, create_ssl_context, validate_port

logger = logging.getLogger(__name__)


class SocketNetworkStream(NetworkStream):
    """Network stream over a blocking (optionally TLS wrapped) socket."""

    def __init__(self, sock: socket.socket) -> None:
        self.sock = sock
        self.closed = False

    def read(self, max_bytes: int) -> bytes:
        if self.closed:
            raise RuntimeError("Stream is closed")
        return self.sock.recv(max_bytes)

    def write(self, data: bytes) -> None:
        if self.closed:
            raise RuntimeError("Stream is closed")
        self.sock.sendall(data)

    def close(self) -> None:
        if not self.closed:
            self.closed = True
            self.sock.close()

    def get_extra_info(self, name: str) -> Optional[Any]:
        if name == "socket":
            return self.sock
        elif name == "peername":
            try:
                return self.sock.getpeername()
            except OSError:
                return None
        elif name == "sockname":
            try:
                return self.sock.getsockname()
            except OSError:
                return None
        elif name == "ssl_object":
            return isinstance(self.sock, ssl.SSLSocket)
        return None

    @property
    def is_closed(self) -> bool:
        return self.closed


class SocketNetworkBackend(NetworkBackend):
    """Network backend creating blocking sockets."""

    def connect_tcp(
        self, host: str, port: int, timeout: Optional[float] = None
    ) -> SocketNetworkStream:
        port = validate_port(port)
        last_error: Optional[OSError] = None

        for family, type_, proto, _, address in socket.getaddrinfo(
            host, port, type=socket.SOCK_STREAM
        ):
            sock = create_socket(family, type_, proto, timeout)
            try:
                sock.connect(address)
            except OSError as e:
                sock.close()
                last_error = e
                continue
            logger.debug(f"Connected to {host}:{port} via {address}")
            return SocketNetworkStream(sock)

        if last_error is None:
            raise OSError(f"No addresses found for {host}:{port}")
        raise last_error

    def connect_tls(
        self,
        stream: NetworkStream,
        host: str,
        timeout: Optional[float] = None,
        verify: bool = True,
    ) -> SocketNetworkStream:
        sock = stream.get_extra_info("socket")
        if not isinstance(sock, socket.socket):
            raise RuntimeError("Stream does not expose a socket")

        context = create_ssl_context(verify)
        sock.settimeout(timeout)
        ssl_sock = context.wrap_socket(sock, server_hostname=host)
        logger.debug(f"TLS established with {host} ({ssl_sock.version()})")
        return SocketNetworkStream(ssl_sock)
