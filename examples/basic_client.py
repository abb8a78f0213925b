"""
Basic client example using sfs_client.

This example demonstrates how to obtain a connection from a
connection manager, issue GET and POST requests, and route the
library's log records to the logging module through a callback.
"""

import logging
import sys

from sfs_client import (
    ConnectionConfig,
    LogData,
    LogSeverity,
    ReportingHandler,
    TransportConnectionManager,
)

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

SEVERITY_LEVELS = {
    LogSeverity.INFO: logging.INFO,
    LogSeverity.WARNING: logging.WARNING,
    LogSeverity.ERROR: logging.ERROR,
    LogSeverity.VERBOSE: logging.DEBUG,
}


def log_callback(data: LogData) -> None:
    """Forward library records to this module's logger."""
    logger.log(
        SEVERITY_LEVELS[data.severity],
        f"{data.file}:{data.line} ({data.function}) {data.message}",
    )


def main(base_url: str) -> int:
    handler = ReportingHandler(log_callback)
    manager = TransportConnectionManager(handler, ConnectionConfig(timeout=10.0))

    result, connection = manager.make_connection()
    if not result:
        logger.error(f"Could not create connection: {result}")
        return 1

    with connection:
        logger.info("Making GET request...")
        result, body = connection.get(f"{base_url}/get")
        logger.info(f"GET result: {result}")
        if result:
            logger.info(f"Response body length: {len(body)} bytes")

        logger.info("Making POST request with a JSON body...")
        result, body = connection.post(f"{base_url}/post", '{"TargetingAttributes": {}}')
        logger.info(f"POST result: {result}")
        if result:
            logger.info(f"Response body length: {len(body)} bytes")

        # Statuses other than 200 come back as failed results
        result, _ = connection.get(f"{base_url}/status/404")
        logger.info(f"Missing resource result: {result}")

    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1] if len(sys.argv) > 1 else "http://httpbin.org"))
