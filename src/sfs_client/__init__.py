"""
sfs_client - Client transport for the content-fulfillment service

Issues GET and POST requests to the service and reports every outcome,
transport failures and HTTP status codes alike, as a Result.
"""

__version__ = "0.1.0"
__author__ = "Developer"
__email__ = "dev@example.com"

# Import main components for easy access
from .result import Result, ResultCode, to_string
from .exceptions import SFSError, SFSException, SessionError
from .reporting import LogData, LogSeverity, LoggingCallback, ReportingHandler
from .applicability import ApplicabilityDetails, Architecture
from .config import ConnectionConfig, MAX_RESPONSE_CHARACTERS
from .connection import (
    Connection,
    ConnectionManager,
    TransportConnection,
    TransportConnectionManager,
    MockConnection,
    MockConnectionManager,
    MockResponse,
)

__all__ = [
    "Result",
    "ResultCode",
    "to_string",
    "SFSError",
    "SFSException",
    "SessionError",
    "LogData",
    "LogSeverity",
    "LoggingCallback",
    "ReportingHandler",
    "ApplicabilityDetails",
    "Architecture",
    "ConnectionConfig",
    "MAX_RESPONSE_CHARACTERS",
    "Connection",
    "ConnectionManager",
    "TransportConnection",
    "TransportConnectionManager",
    "MockConnection",
    "MockConnectionManager",
    "MockResponse",
]
