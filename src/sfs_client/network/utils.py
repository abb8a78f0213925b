"""
Helpers shared by the network backends and the transport session.
"""

import socket
import ssl
from typing import Optional, Tuple, Union
from urllib.parse import urlsplit

DEFAULT_PORTS = {"http": 80, "https": 443}


def create_socket(
    family: int = socket.AF_INET,
    type: int = socket.SOCK_STREAM,
    proto: int = 0,
    timeout: Optional[float] = None,
) -> socket.socket:
    """
    Create a blocking socket for one request/response connection.
    
    The timeout applies to connect and to every later send and recv on
    the socket; None blocks indefinitely.
    """
    sock = socket.socket(family, type, proto)
    
    # Requests are small; send them without coalescing delay
    sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_KEEPALIVE, 1)
    sock.settimeout(timeout)
    
    return sock


def create_ssl_context(verify: bool = True) -> ssl.SSLContext:
    """
    Build the client TLS context: TLS 1.2 or newer, ALPN http/1.1.
    
    Args:
        verify: Check the certificate chain and hostname. Only tests
                against self-signed servers should turn this off.
    """
    context = ssl.create_default_context()
    if not verify:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    
    context.options |= ssl.OP_NO_COMPRESSION
    context.minimum_version = ssl.TLSVersion.TLSv1_2
    context.set_alpn_protocols(["http/1.1"])
    return context


def parse_url(url: str) -> Tuple[str, str, int, str]:
    """
    Split a request URL into what the session needs to open a stream.
    
    Returns:
        (scheme, host, port, target). The scheme is lowercased, the port
        defaults from the scheme (0 if unknown) and the target is the
        path plus query string; the fragment is dropped.
    
    Raises:
        ValueError: If the scheme or host is missing or the port is invalid
    """
    parsed = urlsplit(url)
    
    scheme = parsed.scheme.lower()
    if not scheme:
        raise ValueError(f"No scheme found in URL: {url}")
    
    host = parsed.hostname or ""
    if not host:
        raise ValueError(f"No hostname found in URL: {url}")
    
    # .port raises ValueError on out of range values
    port = parsed.port
    if port is None:
        port = DEFAULT_PORTS.get(scheme, 0)
    
    target = parsed.path or "/"
    if parsed.query:
        target += "?" + parsed.query
    
    return scheme, host, port, target


def format_host_header(host: str, port: int, scheme: str) -> str:
    """Value of the Host header; the port is omitted when it is the scheme default."""
    if ":" in host:
        host = f"[{host}]"
    if DEFAULT_PORTS.get(scheme) == port:
        return host
    return f"{host}:{port}"


def validate_port(port: Union[int, str]) -> int:
    try:
        port_int = int(port)
    except (ValueError, TypeError):
        raise ValueError(f"Invalid port: {port}")
    
    if not (1 <= port_int <= 65535):
        raise ValueError(f"Port must be between 1 and 65535, got {port_int}")
    return port_int
