"""HTTP server for exposing Prometheus metrics.

prometheus_client serves /metrics from its own daemon thread, so the
operator event loop is never blocked by scrapes.
"""

import logging
from prometheus_client import start_http_server

logger = logging.getLogger(__name__)

DEFAULT_METRICS_PORT = 8000


def init_metrics_server(port: int = None) -> int:
    """Start the metrics server.

    Args:
        port: Port to listen on, 8000 when not given.

    Returns:
        The port the server listens on.
    """
    if port is None:
        port = DEFAULT_METRICS_PORT
    try:
        start_http_server(port)
    except OSError as e:
        logger.error(f"Failed to start metrics server on port {port}: {e}")
        raise
    logger.info(f"Metrics available at http://0.0.0.0:{port}/metrics")
    return port
