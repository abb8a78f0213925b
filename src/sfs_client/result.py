"""
Result type for sfs_client.

Every fallible public operation returns a Result instead of raising.
A Result carries a code from a closed taxonomy and an optional
diagnostic message. The message is meant for humans and logs only.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


class ResultCode(Enum):
    """Closed set of outcome codes."""
    OK = "Ok"
    INVALID_ARG = "InvalidArg"
    CONNECTION_SETUP_FAILED = "ConnectionSetupFailed"
    CONNECTION_UNEXPECTED_ERROR = "ConnectionUnexpectedError"
    HTTP_TIMEOUT = "HttpTimeout"
    HTTP_BAD_REQUEST = "HttpBadRequest"
    HTTP_NOT_FOUND = "HttpNotFound"
    HTTP_SERVICE_NOT_AVAILABLE = "HttpServiceNotAvailable"
    HTTP_UNEXPECTED = "HttpUnexpected"


def to_string(code: ResultCode) -> str:
    """Get the display name of a result code."""
    return code.value


@dataclass(frozen=True, eq=False)
class Result:
    """
    Immutable outcome of an operation.
    
    Comparing against a bare ResultCode compares codes only, so
    ``result == ResultCode.OK`` is the usual success test.
    """
    
    code: ResultCode
    message: Optional[str] = None
    
    def __post_init__(self) -> None:
        if not isinstance(self.code, ResultCode):
            raise ValueError("code must be a ResultCode")
        
        if self.message is not None and not isinstance(self.message, str):
            raise ValueError("message must be a string or None")
    
    @classmethod
    def ok(cls) -> "Result":
        """Create a successful Result."""
        return cls(ResultCode.OK)
    
    @property
    def is_success(self) -> bool:
        return self.code is ResultCode.OK
    
    @property
    def is_failure(self) -> bool:
        return self.code is not ResultCode.OK
    
    def __bool__(self) -> bool:
        return self.is_success
    
    def __eq__(self, other: object) -> bool:
        if isinstance(other, ResultCode):
            return self.code is other
        if isinstance(other, Result):
            return self.code is other.code and self.message == other.message
        return NotImplemented
    
    def __ne__(self, other: object) -> bool:
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result
    
    def __hash__(self) -> int:
        return hash((self.code, self.message))
    
    def __str__(self) -> str:
        if self.message:
            return f"{to_string(self.code)}: {self.message}"
        return to_string(self.code)


ResultLike = Union[Result, ResultCode]
