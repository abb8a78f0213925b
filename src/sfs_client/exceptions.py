"""
Custom exceptions for sfs_client.

Exceptions never cross the public Connection interface. They are used
internally by the transport session and for fatal construction
failures, which the connection manager converts back into a Result.
"""

from typing import Optional

from .result import Result


class SFSError(Exception):
    """Base exception for all sfs_client errors."""
    
    def __init__(self, message: str, cause: Optional[Exception] = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause


class SFSException(SFSError):
    """Raised when an object cannot be constructed into a usable state."""
    
    def __init__(self, result: Result, cause: Optional[Exception] = None) -> None:
        super().__init__(str(result), cause)
        self.result = result


class SessionError(SFSError):
    """Raised by a transport session primitive that rejected its input."""
    
    def __init__(self, engine_code: int, message: str, cause: Optional[Exception] = None) -> None:
        super().__init__(f"Session error: {message}", cause)
        self.engine_code = engine_code
        self.reason = message
