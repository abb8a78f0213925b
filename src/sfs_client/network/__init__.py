"""
Network backend components for sfs_client.

This module provides the low-level networking abstractions used by
the transport session: blocking byte streams and the backends that
open them.
"""

from .backend import NetworkBackend
from .stream import NetworkStream
from .sockets import SocketNetworkBackend, SocketNetworkStream
from .mock import MockNetworkBackend, MockNetworkStream, MockReply
from .utils import (
    create_socket,
    create_ssl_context,
    parse_url,
    format_host_header,
    validate_port,
)

__all__ = [
    "NetworkBackend", 
    "NetworkStream",
    "SocketNetworkBackend",
    "SocketNetworkStream",
    "MockNetworkBackend", 
    "MockNetworkStream",
    "MockReply",
    "create_socket",
    "create_ssl_context",
    "parse_url",
    "format_host_header",
    "validate_port",
]
