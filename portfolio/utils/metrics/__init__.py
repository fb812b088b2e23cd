"""
Prometheus metrics definitions.

All metrics are re-exported here:

    from portfolio.utils.metrics import http_requests_total
    from portfolio.utils.metrics import ws_connections_active
"""

from portfolio.utils.metrics.http import (
    http_request_duration_seconds,
    http_requests_in_progress,
    http_requests_total,
)
from portfolio.utils.metrics.websocket import (
    ws_connections_active,
    ws_connections_total,
    ws_message_processing_duration_seconds,
    ws_messages_dropped_total,
    ws_messages_received_total,
    ws_messages_sent_total,
    ws_send_failures_total,
)

__all__ = [
    # HTTP metrics
    "http_request_duration_seconds",
    "http_requests_in_progress",
    "http_requests_total",
    # WebSocket metrics
    "ws_connections_active",
    "ws_connections_total",
    "ws_message_processing_duration_seconds",
    "ws_messages_dropped_total",
    "ws_messages_received_total",
    "ws_messages_sent_total",
    "ws_send_failures_total",
]
