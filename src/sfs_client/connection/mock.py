"""
Scripted Connection for testing code that depends on a Connection.

MockConnection needs no network. It replays queued MockResponses
through the same validation, size cap and status mapping as the
network-backed connection.
"""

from collections import deque
from dataclasses import dataclass
from typing import Deque, List, Optional, Tuple

from ..config import MAX_RESPONSE_CHARACTERS
from ..reporting import ReportingHandler, log_failure
from ..result import Result, ResultCode
from .connection import Body, Connection, ConnectionManager
from .engine import engine_code_to_result, http_status_to_result
from .session import EngineCode


@dataclass(frozen=True)
class MockResponse:
    """
    One scripted outcome.
    
    Attributes:
        status: HTTP status the peer answers with
        body: Response body bytes
        engine_code: If set, the transfer fails with this engine code
        message: Diagnostic text reported with engine_code
        chunk_size: Size of the chunks the body arrives in
    """
    status: int = 200
    body: bytes = b""
    engine_code: Optional[EngineCode] = None
    message: str = ""
    chunk_size: int = 16384
    
    @classmethod
    def timeout(cls, message: str = "") -> "MockResponse":
        return cls(engine_code=EngineCode.OPERATION_TIMEDOUT, message=message)


@dataclass(frozen=True)
class MockRequest:
    """A request observed by MockConnection."""
    method: str
    url: str
    body: Optional[bytes] = None


class MockConnection(Connection):
    """Connection replaying scripted responses in order."""
    
    def __init__(
        self,
        handler: ReportingHandler,
        responses: Optional[List[MockResponse]] = None,
        max_response_chars: int = MAX_RESPONSE_CHARACTERS,
    ) -> None:
        super().__init__(handler)
        self._responses: Deque[MockResponse] = deque(responses or [])
        self._max_response_chars = max_response_chars
        self.requests: List[MockRequest] = []
        self.closed = False
    
    def queue(self, response: MockResponse) -> None:
        self._responses.append(response)
    
    def get(self, url: str) -> Tuple[Result, bytes]:
        if not url:
            return log_failure(self._handler, Result(ResultCode.INVALID_ARG, "url cannot be empty")), b""
        
        self.requests.append(MockRequest("GET", url))
        return self._respond()
    
    def post(self, url: str, body: Body) -> Tuple[Result, bytes]:
        if not url:
            return log_failure(self._handler, Result(ResultCode.INVALID_ARG, "url cannot be empty")), b""
        
        if isinstance(body, str):
            data = body.encode("utf-8")
        elif isinstance(body, (bytes, bytearray)):
            data = bytes(body)
        else:
            return log_failure(
                self._handler, Result(ResultCode.INVALID_ARG, "body must be str or bytes")
            ), b""
        
        self.requests.append(MockRequest("POST", url, data))
        return self._respond()
    
    def _respond(self) -> Tuple[Result, bytes]:
        if not self._responses:
            return log_failure(
                self._handler,
                Result(ResultCode.CONNECTION_UNEXPECTED_ERROR, "No scripted response left"),
            ), b""
        
        response = self._responses.popleft()
        if response.engine_code is not None:
            return log_failure(
                self._handler, engine_code_to_result(response.engine_code, response.message)
            ), b""
        
        received = bytearray()
        for start in range(0, len(response.body), response.chunk_size):
            chunk = response.body[start:start + response.chunk_size]
            if len(received) + len(chunk) > self._max_response_chars:
                return log_failure(
                    self._handler,
                    engine_code_to_result(
                        EngineCode.WRITE_ERROR,
                        f"Response exceeded {self._max_response_chars} characters",
                    ),
                ), b""
            received.extend(chunk)
        
        result = http_status_to_result(response.status)
        if result.is_failure:
            return log_failure(self._handler, result), b""
        return result, bytes(received)
    
    @property
    def pending(self) -> int:
        return len(self._responses)
    
    def close(self) -> None:
        self.closed = True


class MockConnectionManager(ConnectionManager):
    """Hands out MockConnections, each replaying its own copy of the script."""
    
    def __init__(
        self,
        handler: ReportingHandler,
        responses: Optional[List[MockResponse]] = None,
        setup_failure: Optional[Result] = None,
    ) -> None:
        super().__init__(handler)
        self._responses = list(responses or [])
        self._setup_failure = setup_failure
        self.connections: List[MockConnection] = []
    
    def make_connection(self) -> Tuple[Result, Optional[Connection]]:
        if self._setup_failure is not None:
            return log_failure(self._handler, self._setup_failure), None
        
        connection = MockConnection(self._handler, self._responses)
        self.connections.append(connection)
        return Result.ok(), connection
