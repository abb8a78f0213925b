"""
Network-backed Connection for sfs_client.

TransportConnection owns one TransportSession for its whole lifetime
and translates session outcomes and HTTP status codes into Results.
"""

import logging
from enum import Enum
from typing import Optional, Tuple

from ..config import ConnectionConfig
from ..exceptions import SFSException, SessionError
from ..network import NetworkBackend
from ..reporting import ReportingHandler, log_failure
from ..result import Result, ResultCode
from .connection import Body, Connection, ConnectionManager
from .guards import ErrorBuffer, HeaderList
from .session import WRITE_ABORT, EngineCode, TransportSession, describe

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Transport error"


class HttpHeader(Enum):
    """Request headers set by the connection."""
    CONTENT_TYPE = "Content-Type"


_STATUS_RESULTS = {
    400: (ResultCode.HTTP_BAD_REQUEST, "400 Bad Request"),
    404: (ResultCode.HTTP_NOT_FOUND, "404 Not Found"),
    # Method not allowed is reported in the same class as a bad request
    405: (ResultCode.HTTP_BAD_REQUEST, "405 Method Not Allowed"),
    503: (ResultCode.HTTP_SERVICE_NOT_AVAILABLE, "503 Service Unavailable"),
}


def http_status_to_result(status: int) -> Result:
    """
    Map an HTTP status code to a Result.
    
    Only 200 is a success. Codes without a dedicated mapping become
    HttpUnexpected with the numeric code in the message.
    """
    if status == 200:
        return Result.ok()
    
    mapped = _STATUS_RESULTS.get(status)
    if mapped is None:
        return Result(ResultCode.HTTP_UNEXPECTED, f"Unexpected HTTP code {status}")
    return Result(*mapped)


def engine_code_to_result(code: EngineCode, diagnostic: str = "") -> Result:
    """
    Map a failed transfer to a Result.
    
    Args:
        code: Engine code reported by the session
        diagnostic: Text from the error buffer, used verbatim when not empty
    """
    if code is EngineCode.OPERATION_TIMEDOUT:
        result_code = ResultCode.HTTP_TIMEOUT
    else:
        result_code = ResultCode.CONNECTION_UNEXPECTED_ERROR
    
    message = diagnostic or f"{GENERIC_ERROR_MESSAGE}: {describe(code)}"
    return Result(result_code, message)


class TransportConnection(Connection):
    """
    Connection performing real HTTP/1.1 exchanges.
    
    The session is created and configured on construction. Failing to
    do so is fatal: the constructor logs and raises SFSException, which
    TransportConnectionManager turns into a Result.
    """
    
    def __init__(
        self,
        handler: ReportingHandler,
        config: Optional[ConnectionConfig] = None,
        backend: Optional[NetworkBackend] = None,
    ) -> None:
        """
        Initialize the connection.
        
        Args:
            handler: Receives failure records
            config: Connection settings (defaults used if None)
            backend: Network backend for the session (real sockets if None)
        
        Raises:
            SFSException: If the session cannot be created or configured
        """
        super().__init__(handler)
        self._config = config if config is not None else ConnectionConfig()
        self._session: Optional[TransportSession] = None
        
        try:
            session = TransportSession(backend)
        except OSError as e:
            raise self._fatal("Failed to init transport session", e)
        
        try:
            session.set_timeout(self._config.timeout)
            session.set_verify_tls(self._config.verify_tls)
            session.set_read_chunk_size(self._config.read_chunk_size)
        except SessionError as e:
            session.close()
            raise self._fatal(f"Failed to set up transport session: {e.reason}", e)
        
        self._session = session
        logger.debug("Transport connection initialized")
        
        # TODO: attach the authentication token and correlation vector headers
        # once the service defines them.
    
    def get(self, url: str) -> Tuple[Result, bytes]:
        if not url:
            return log_failure(self._handler, Result(ResultCode.INVALID_ARG, "url cannot be empty")), b""
        
        try:
            session = self._require_session()
            session.set_method_get()
            session.set_headers(None)
        except SessionError as e:
            return self._setup_failed(e), b""
        
        return self._perform(session, url)
    
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
        
        with HeaderList() as headers:
            result = headers.add(HttpHeader.CONTENT_TYPE.value, "application/json")
            if result.is_failure:
                return log_failure(self._handler, result), b""
            
            try:
                session = self._require_session()
                session.set_method_post(data)
                headers.attach(session)
            except SessionError as e:
                return self._setup_failed(e), b""
            
            return self._perform(session, url)
    
    def _perform(self, session: TransportSession, url: str) -> Tuple[Result, bytes]:
        try:
            session.set_url(url)
        except SessionError as e:
            return self._setup_failed(e), b""
        
        response = bytearray()
        try:
            with ErrorBuffer(session, self._handler) as error_buffer:
                try:
                    session.set_write_callback(self._write_callback)
                    session.set_write_target(response)
                except SessionError as e:
                    return self._setup_failed(e), b""
                
                try:
                    code = session.perform()
                finally:
                    session.set_write_target(None)
                
                if code is not EngineCode.OK:
                    return log_failure(
                        self._handler, engine_code_to_result(code, error_buffer.text())
                    ), b""
        except SFSException as e:
            return e.result, b""
        
        # TODO: retry on timeouts and 503 once a retry policy is defined,
        # with a way for callers to opt out.
        
        try:
            status = session.response_code()
        except SessionError as e:
            return log_failure(
                self._handler,
                Result(ResultCode.CONNECTION_UNEXPECTED_ERROR, f"Failed to read response code: {e.reason}"),
            ), b""
        
        result = http_status_to_result(status)
        if result.is_failure:
            return log_failure(self._handler, result), b""
        
        return result, bytes(response)
    
    def _write_callback(self, chunk: bytes, target: bytearray) -> int:
        # Check before appending so we never buffer past the cap
        if len(target) + len(chunk) > self._config.max_response_chars:
            return WRITE_ABORT
        
        target.extend(chunk)
        return len(chunk)
    
    def _require_session(self) -> TransportSession:
        if self._session is None:
            raise SessionError(EngineCode.BAD_FUNCTION_ARGUMENT, "Connection is closed")
        return self._session
    
    def _setup_failed(self, error: SessionError) -> Result:
        return log_failure(
            self._handler,
            Result(ResultCode.CONNECTION_SETUP_FAILED, f"Transport setup failed: {error.reason}"),
        )
    
    def _fatal(self, message: str, cause: Exception) -> SFSException:
        result = log_failure(self._handler, Result(ResultCode.CONNECTION_SETUP_FAILED, message))
        return SFSException(result, cause)
    
    @property
    def session(self) -> Optional[TransportSession]:
        return self._session
    
    @property
    def config(self) -> ConnectionConfig:
        return self._config
    
    def close(self) -> None:
        if self._session is not None:
            self._session.close()
            self._session = None


class TransportConnectionManager(ConnectionManager):
    """Creates TransportConnections sharing one configuration and backend."""
    
    def __init__(
        self,
        handler: ReportingHandler,
        config: Optional[ConnectionConfig] = None,
        backend: Optional[NetworkBackend] = None,
    ) -> None:
        super().__init__(handler)
        self._config = config
        self._backend = backend
    
    def make_connection(self) -> Tuple[Result, Optional[Connection]]:
        try:
            connection = TransportConnection(self._handler, self._config, self._backend)
        except SFSException as e:
            return e.result, None
        return Result.ok(), connection
