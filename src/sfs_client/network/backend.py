"""
Connection factory interface used by the transport session.
"""

from abc import ABC, abstractmethod
from typing import Optional

from .stream import NetworkStream


class NetworkBackend(ABC):
    """
    Opens the streams a transport session talks HTTP over.
    
    The session asks for a TCP stream and, for https URLs, upgrades it
    to TLS. Tests substitute a scripted backend so no real network
    access is needed.
    """
    
    @abstractmethod
    def connect_tcp(
        self,
        host: str,
        port: int,
        timeout: Optional[float] = None
    ) -> NetworkStream:
        """
        Open a TCP connection.
        
        Args:
            host: Hostname or IP address
            port: Port number
            timeout: Seconds allowed for connecting and for each later read
        
        Raises:
            socket.gaierror: If the host cannot be resolved
            socket.timeout: If connecting times out
            OSError: If the connection is refused or otherwise fails
        """
    
    @abstractmethod
    def connect_tls(
        self,
        stream: NetworkStream,
        host: str,
        timeout: Optional[float] = None,
        verify: bool = True,
    ) -> NetworkStream:
        """
        Run the TLS handshake over an open TCP stream.
        
        Returns:
            The TLS stream to use in place of the TCP one
        
        Raises:
            ssl.SSLError: If the handshake or certificate check fails
            socket.timeout: If the handshake times out
        """
