"""
Scoped resource guards bound to one request.

HeaderList and ErrorBuffer are context managers. Leaving the ``with``
block releases what they hold exactly once, on every exit path.
"""

import re
from types import TracebackType
from typing import List, Optional, Tuple, Type

from ..exceptions import SFSException, SessionError
from ..reporting import ReportingHandler, log_failure, log_if_failed
from ..result import Result, ResultCode
from .session import ERROR_BUFFER_SIZE, TransportSession

# RFC 7230 token and field-value
_HEADER_NAME = re.compile(rb"^[!#$%&'*+\-.^_`|~0-9A-Za-z]+$")
_HEADER_VALUE = re.compile(rb"^[\t\x20-\x7e\x80-\xff]*$")


class HeaderList:
    """
    Ordered list of request headers owned by one request.

    Entries are kept as ``"Name: Value"`` strings, in insertion order.
    """

    def __init__(self) -> None:
        self._entries: Optional[List[str]] = []
        self._fields: List[Tuple[bytes, bytes]] = []
        self._session: Optional[TransportSession] = None
        self.release_count = 0

    def add(self, name: str, value: str) -> Result:
        """
        Append one header.

        Args:
            name: Header name
            value: Header value

        Returns:
            Ok, or ConnectionSetupFailed if the entry is not a valid header
            or the list was already released
        """
        if self._entries is None:
            return Result(ResultCode.CONNECTION_SETUP_FAILED, "Header list was already released")

        try:
            raw_name = name.encode("ascii")
            raw_value = value.strip().encode("latin-1")
        except (AttributeError, UnicodeError):
            return Result(ResultCode.CONNECTION_SETUP_FAILED, "Failed to add header to HeaderList")

        if not _HEADER_NAME.match(raw_name) or not _HEADER_VALUE.match(raw_value):
            return Result(ResultCode.CONNECTION_SETUP_FAILED, "Failed to add header to HeaderList")

        self._entries.append(f"{name}: {value.strip()}")
        self._fields.append((raw_name, raw_value))
        return Result.ok()

    def attach(self, session: TransportSession) -> None:
        """Attach the list to a session's next transfers."""
        session.set_headers(self)
        self._session = session

    @property
    def entries(self) -> List[str]:
        return list(self._entries or [])

    @property
    def fields(self) -> List[Tuple[bytes, bytes]]:
        """Headers as (name, value) byte pairs, as sent on the wire."""
        return list(self._fields)

    @property
    def released(self) -> bool:
        return self._entries is None

    def release(self) -> None:
        """Free the list and detach it from its session. Idempotent."""
        if self._entries is None:
            return

        session = self._session
        if session is not None and not session.is_closed and session.headers is self:
            session.set_headers(None)

        self._entries = None
        self._fields = []
        self._session = None
        self.release_count += 1

    def __len__(self) -> int:
        return len(self._entries or [])

    def __enter__(self) -> "HeaderList":
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_value: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> None:
        self.release()


class ErrorBuffer:
    """
    Diagnostic buffer bound to a session for the duration of one call.

    Binding happens on construction. A session that refuses the buffer is
    misconfigured, so that failure raises SFSException. Unbinding happens
    on scope exit; failures there are logged and otherwise ignored since
    nothing more can be done during cleanup.
    """

    def __init__(self, session: TransportSession, handler: ReportingHandler) -> None:
        self._session = session
        self._handler = handler
        self._buffer = bytearray(ERROR_BUFFER_SIZE)
        self._bound = False

        try:
            session.bind_error_buffer(self._buffer)
        except SessionError as e:
            result = log_failure(
                handler,
                Result(ResultCode.CONNECTION_SETUP_FAILED, "Failed to set up error buffer"),
            )
            raise SFSException(result, e)

        self._bound = True

    def text(self) -> str:
        """Get the NUL-terminated content, or "" if nothing was written."""
        end = self._buffer.find(0)
        if end == -1:
            end = len(self._buffer)
        return self._buffer[:end].decode("utf-8", "replace")

    @property
    def is_bound(self) -> bool:
        return self._bound

    def unbind(self) -> Result:
        if not self._bound:
            return Result.ok()
        self._bound = False

        try:
            self._session.bind_error_buffer(None)
        except SessionError:
            return Result(ResultCode.CONNECTION_SETUP_FAILED, "Failed to unset error buffer")
        return Result.ok()

    def __enter__(self) -> "ErrorBuffer":
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_value: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> None:
        log_if_failed(self._handler, self.unbind())
