"""
Connection interface for sfs_client.

A Connection performs HTTP exchanges with the content-fulfillment
service and reports every outcome as a Result. Implementations include
the network-backed TransportConnection and the scripted MockConnection.
"""

from abc import ABC, abstractmethod
from types import TracebackType
from typing import Optional, Tuple, Type, Union

from ..reporting import ReportingHandler
from ..result import Result

Body = Union[str, bytes]


class Connection(ABC):
    """
    Interface for HTTP connections.
    
    Both operations fail with InvalidArg, without any network activity,
    when url is empty. Otherwise they make exactly one transfer attempt.
    On success the returned body is the exact bytes the peer sent; on
    failure it is empty.
    
    A Connection is not safe for concurrent use. Callers that need
    concurrency use one Connection per thread.
    """
    
    def __init__(self, handler: ReportingHandler) -> None:
        self._handler = handler
    
    @property
    def handler(self) -> ReportingHandler:
        return self._handler
    
    @abstractmethod
    def get(self, url: str) -> Tuple[Result, bytes]:
        """
        Perform a GET request.
        
        Args:
            url: Target URL
        
        Returns:
            (Result, body)
        """
        pass
    
    @abstractmethod
    def post(self, url: str, body: Body) -> Tuple[Result, bytes]:
        """
        Perform a POST request with a JSON body.
        
        Args:
            url: Target URL
            body: Request body sent verbatim; str is encoded as UTF-8
        
        Returns:
            (Result, body)
        """
        pass
    
    def close(self) -> None:
        """Release resources held by the connection."""
        pass
    
    def __enter__(self) -> "Connection":
        return self
    
    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_value: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> None:
        self.close()


class ConnectionManager(ABC):
    """
    Factory of connections.
    
    Construction failures never escape as exceptions; they come back as
    a non-Ok Result with no connection.
    """
    
    def __init__(self, handler: ReportingHandler) -> None:
        self._handler = handler
    
    @abstractmethod
    def make_connection(self) -> Tuple[Result, Optional[Connection]]:
        """
        Create a new connection.
        
        Returns:
            (Result, connection). connection is None unless the Result is Ok.
        """
        pass
