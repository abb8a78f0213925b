"""
Byte stream interface used by the transport session.

Streams are blocking: a read waits until data arrives, the peer
closes, or the timeout the backend applied at connect time expires.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional


class NetworkStream(ABC):
    """One open connection to a server, plain or TLS."""
    
    @abstractmethod
    def read(self, max_bytes: int) -> bytes:
        """
        Read up to max_bytes.
        
        Returns:
            The bytes read, or b"" once the peer has closed the connection.
        
        Raises:
            RuntimeError: If the stream is closed
            socket.timeout: If nothing arrives within the timeout
            OSError: On any other network failure
        """
    
    @abstractmethod
    def write(self, data: bytes) -> None:
        """Send all of data. Raises like read()."""
    
    @abstractmethod
    def close(self) -> None:
        """Release the connection. Closing twice is a no-op."""
    
    @abstractmethod
    def get_extra_info(self, name: str) -> Optional[Any]:
        """
        Look up connection details: "peername", "sockname", "ssl_object"
        (true for TLS streams) or "socket". Unknown names give None.
        """
    
    @property
    @abstractmethod
    def is_closed(self) -> bool:
        ...
