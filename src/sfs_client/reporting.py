"""
Reporting facilities for sfs_client.

The ReportingHandler is the logging collaborator of the library. It
delivers one structured LogData record per call to a user supplied
callback, synchronously and on the calling thread. When no callback is
registered, records go to the standard ``logging`` module instead.
"""

import logging
import os
import sys
import time
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from typing_extensions import Protocol

from .result import Result, to_string

logger = logging.getLogger(__name__)


class LogSeverity(Enum):
    """Severity of a log record."""
    INFO = "Info"
    WARNING = "Warning"
    ERROR = "Error"
    VERBOSE = "Verbose"


_LEVELS = {
    LogSeverity.INFO: logging.INFO,
    LogSeverity.WARNING: logging.WARNING,
    LogSeverity.ERROR: logging.ERROR,
    LogSeverity.VERBOSE: logging.DEBUG,
}


@dataclass(frozen=True)
class LogData:
    """A single structured log record."""

    severity: LogSeverity
    message: str
    file: str
    line: int
    function: str
    time: float


class LoggingCallback(Protocol):
    """Callable receiving log records. Must not block or reenter the library."""

    def __call__(self, data: LogData) -> None:
        ...


class ReportingHandler:
    """
    Dispatches log records to the registered callback.

    The handler does not serialize calls. If one callback is shared by
    handlers used from several threads, the callback must be safe for
    concurrent invocation.
    """

    def __init__(self, callback: Optional[LoggingCallback] = None) -> None:
        self._callback = callback

    def set_logging_callback(self, callback: Optional[LoggingCallback]) -> None:
        """
        Register the callback that receives log records.

        Args:
            callback: The callback, or None to fall back to the logging module
        """
        self._callback = callback

    @property
    def has_callback(self) -> bool:
        return self._callback is not None

    def log(self, severity: LogSeverity, message: str, stacklevel: int = 1) -> None:
        """
        Emit one record attributed to the caller's source location.

        Args:
            severity: Severity of the record
            message: Human readable message
            stacklevel: How many frames above the caller to attribute the
                        record to (1 means the direct caller)
        """
        frame = sys._getframe(stacklevel)
        data = LogData(
            severity=severity,
            message=message,
            file=os.path.basename(frame.f_code.co_filename),
            line=frame.f_lineno,
            function=frame.f_code.co_name,
            time=time.time(),
        )

        if self._callback is None:
            logger.log(
                _LEVELS[severity],
                f"[{data.severity.value}] {data.file}:{data.line} {data.message}",
            )
            return

        self._callback(data)


def log_failure(handler: ReportingHandler, result: Result) -> Result:
    """
    Log a failed result at error severity and hand it back.

    The record carries the same message the caller receives, so logs
    and returned errors stay consistent.
    """
    handler.log(LogSeverity.ERROR, _describe(result), stacklevel=2)
    return result


def log_if_failed(handler: ReportingHandler, result: Result) -> None:
    """Log a result only if it failed. Used on cleanup paths."""
    if result.is_failure:
        handler.log(LogSeverity.WARNING, _describe(result), stacklevel=2)


def _describe(result: Result) -> str:
    return result.message or to_string(result.code)
