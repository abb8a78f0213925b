"""
Connections to the content-fulfillment service.
"""

from .connection import Connection, ConnectionManager
from .engine import (
    HttpHeader,
    TransportConnection,
    TransportConnectionManager,
    engine_code_to_result,
    http_status_to_result,
)
from .guards import ErrorBuffer, HeaderList
from .mock import MockConnection, MockConnectionManager, MockRequest, MockResponse
from .session import ERROR_BUFFER_SIZE, EngineCode, TransportSession, describe

__all__ = [
    "Connection",
    "ConnectionManager",
    "HttpHeader",
    "TransportConnection",
    "TransportConnectionManager",
    "engine_code_to_result",
    "http_status_to_result",
    "ErrorBuffer",
    "HeaderList",
    "MockConnection",
    "MockConnectionManager",
    "MockRequest",
    "MockResponse",
    "ERROR_BUFFER_SIZE",
    "EngineCode",
    "TransportSession",
    "describe",
]
