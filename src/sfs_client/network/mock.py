"""
Mock network implementations for testing.

This module provides mock implementations of NetworkStream and NetworkBackend
that replay scripted server replies, so the transport engine can be
exercised end to end without real network connections.
"""

from collections import deque
from dataclasses import dataclass
from typing import Any, Deque, Dict, List, Optional, Tuple

from .backend import NetworkBackend
from .stream import NetworkStream


@dataclass
class MockReply:
    """
    One scripted server reply.
    
    Attributes:
        data: Raw bytes the server sends
        chunk_size: If set, reads never return more than this many bytes
        error: Raised by read once data is exhausted, instead of EOF
    """
    data: bytes
    chunk_size: Optional[int] = None
    error: Optional[BaseException] = None


class MockNetworkStream(NetworkStream):
    """
    Mock network stream for testing.
    
    The stream pulls the next scripted reply from its backend the first
    time it is read after a request was written, which lets a single
    stream serve several keep-alive exchanges.
    """
    
    def __init__(self, backend: Optional["MockNetworkBackend"] = None, data: bytes = b""):
        """
        Initialize the mock stream.
        
        Args:
            backend: Backend supplying scripted replies
            data: Initial data to be available for reading.
        """
        self._backend = backend
        self._data = data
        self._position = 0
        self._closed = False
        self._awaiting_reply = False
        self._current: Optional[MockReply] = None
        self._extra_info: Dict[str, Any] = {}
        self._write_buffer: List[bytes] = []
    
    def read(self, max_bytes: int) -> bytes:
        """
        Read data from the mock stream.
        
        Raises:
            RuntimeError: If the stream is closed.
        """
        if self._closed:
            raise RuntimeError("Stream is closed")
        
        if self._position >= len(self._data) and self._awaiting_reply:
            self._awaiting_reply = False
            if self._backend is not None:
                self._current = self._backend.next_reply()
                if self._current is not None:
                    self._data = self._current.data
                    self._position = 0
        
        if self._position >= len(self._data):
            if self._current is not None and self._current.error is not None:
                raise self._current.error
            return b""
        
        limit = max_bytes
        if self._current is not None and self._current.chunk_size:
            limit = min(limit, self._current.chunk_size)
        
        end = min(self._position + limit, len(self._data))
        result = self._data[self._position:end]
        self._position = end
        return result
    
    def write(self, data: bytes) -> None:
        """
        Write data to the mock stream.
        
        Raises:
            RuntimeError: If the stream is closed.
        """
        if self._closed:
            raise RuntimeError("Stream is closed")
        
        self._write_buffer.append(data)
        self._awaiting_reply = True
    
    def close(self) -> None:
        """Close the mock stream."""
        self._closed = True
    
    def get_extra_info(self, name: str) -> Optional[Any]:
        return self._extra_info.get(name)
    
    @property
    def is_closed(self) -> bool:
        """Check if the mock stream is closed."""
        return self._closed
    
    @property
    def written_data(self) -> bytes:
        """Get all data that was written to the stream."""
        return b"".join(self._write_buffer)
    
    def set_extra_info(self, name: str, value: Any) -> None:
        self._extra_info[name] = value
    
    def add_data(self, data: bytes) -> None:
        """Add data to be available for reading."""
        self._data += data


class MockNetworkBackend(NetworkBackend):
    """
    Mock network backend for testing.
    
    Replies queued with queue_reply are consumed in order by whichever
    stream reads next, regardless of whether the session reused its
    connection or opened a new one.
    """
    
    def __init__(self):
        """Initialize the mock backend."""
        self._replies: Deque[MockReply] = deque()
        self._connect_errors: Deque[BaseException] = deque()
        self._tls_errors: Deque[BaseException] = deque()
        self.streams: List[MockNetworkStream] = []
        self.connect_calls: List[Tuple[str, int, Optional[float]]] = []
    
    def queue_reply(
        self,
        data: bytes,
        chunk_size: Optional[int] = None,
        error: Optional[BaseException] = None,
    ) -> None:
        """
        Queue a scripted server reply.
        
        Args:
            data: Raw HTTP response bytes
            chunk_size: Maximum bytes handed out per read
            error: Exception raised after data is exhausted
        """
        self._replies.append(MockReply(data, chunk_size, error))
    
    def queue_connect_error(self, error: BaseException) -> None:
        """Make the next connect_tcp call raise error."""
        self._connect_errors.append(error)
    
    def queue_tls_error(self, error: BaseException) -> None:
        """Make the next connect_tls call raise error."""
        self._tls_errors.append(error)
    
    def next_reply(self) -> Optional[MockReply]:
        if self._replies:
            return self._replies.popleft()
        return None
    
    def connect_tcp(
        self, 
        host: str, 
        port: int, 
        timeout: Optional[float] = None
    ) -> MockNetworkStream:
        self.connect_calls.append((host, port, timeout))
        
        if self._connect_errors:
            raise self._connect_errors.popleft()
        
        stream = MockNetworkStream(self)
        stream.set_extra_info("peername", (host, port))
        stream.set_extra_info("sockname", ("127.0.0.1", 12345))
        self.streams.append(stream)
        return stream
    
    def connect_tls(
        self,
        stream: NetworkStream,
        host: str,
        timeout: Optional[float] = None,
        verify: bool = True,
    ) -> NetworkStream:
        if self._tls_errors:
            raise self._tls_errors.popleft()
        
        if isinstance(stream, MockNetworkStream):
            stream.set_extra_info("ssl_object", True)
            stream.set_extra_info("server_hostname", host)
        return stream
    
    @property
    def pending_replies(self) -> int:
        return len(self._replies)
    
    @property
    def open_streams(self) -> List[MockNetworkStream]:
        return [stream for stream in self.streams if not stream.is_closed]
    
    def reset(self) -> None:
        """Forget all scripted replies and connections."""
        self._replies.clear()
        self._connect_errors.clear()
        self._tls_errors.clear()
        self.streams.clear()
        self.connect_calls.clear()
