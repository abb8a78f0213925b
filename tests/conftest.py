"""
Pytest configuration for sfs_client tests.

This file contains shared fixtures and configuration
for all tests in the project.
"""

from typing import Dict, List, Optional

import pytest

from sfs_client.config import ConnectionConfig
from sfs_client.connection import TransportConnection
from sfs_client.network import MockNetworkBackend
from sfs_client.reporting import LogData, ReportingHandler

REASONS: Dict[int, str] = {
    200: "OK",
    400: "Bad Request",
    404: "Not Found",
    405: "Method Not Allowed",
    500: "Internal Server Error",
    503: "Service Unavailable",
}


def http_response(
    status: int = 200,
    body: bytes = b"",
    headers: Optional[List[bytes]] = None,
    chunked: bool = False,
) -> bytes:
    """Build raw HTTP/1.1 response bytes."""
    lines = [f"HTTP/1.1 {status} {REASONS.get(status, 'Unknown')}".encode()]
    lines.extend(headers or [])
    if chunked:
        lines.append(b"Transfer-Encoding: chunked")
        payload = b"".join(
            b"%x\r\n%s\r\n" % (len(body[i:i + 4096]), body[i:i + 4096])
            for i in range(0, len(body), 4096)
        ) + b"0\r\n\r\n"
    else:
        lines.append(b"Content-Length: %d" % len(body))
        payload = body
    return b"\r\n".join(lines) + b"\r\n\r\n" + payload


class RecordingCallback:
    """Logging callback keeping every record it receives."""

    def __init__(self) -> None:
        self.records: List[LogData] = []

    def __call__(self, data: LogData) -> None:
        self.records.append(data)

    @property
    def messages(self) -> List[str]:
        return [record.message for record in self.records]


@pytest.fixture
def log_records():
    """Recording logging callback."""
    return RecordingCallback()


@pytest.fixture
def handler(log_records):
    """Reporting handler delivering to the recording callback."""
    return ReportingHandler(log_records)


@pytest.fixture
def backend():
    """Scripted network backend."""
    return MockNetworkBackend()


@pytest.fixture
def config():
    """Connection configuration with a short timeout."""
    return ConnectionConfig(timeout=2.0)


@pytest.fixture
def connection(handler, config, backend):
    """Transport connection running over the scripted backend."""
    conn = TransportConnection(handler, config, backend)
    yield conn
    conn.close()
