"""
Prometheus metrics for WebSocket connection monitoring.

Covers connection lifecycle, inbound/outbound message counts, dropped
messages and per-recipient send failures.
"""

from prometheus_client import Counter, Gauge, Histogram

from portfolio.utils.metrics._helpers import _get_or_create

# WebSocket Connection Metrics
ws_connections_active = _get_or_create(
    Gauge, "ws_connections_active", "Number of active WebSocket connections"
)

ws_connections_total = _get_or_create(
    Counter,
    "ws_connections_total",
    "Total WebSocket connections",
    ["status"],  # accepted, replaced
)

# Message Metrics
ws_messages_received_total = _get_or_create(
    Counter, "ws_messages_received_total", "Total WebSocket messages received"
)

ws_messages_dropped_total = _get_or_create(
    Counter,
    "ws_messages_dropped_total",
    "Inbound WebSocket messages dropped before reaching a handler",
    ["reason"],  # malformed, unknown_type
)

ws_messages_sent_total = _get_or_create(
    Counter, "ws_messages_sent_total", "Total WebSocket messages sent"
)

ws_send_failures_total = _get_or_create(
    Counter,
    "ws_send_failures_total",
    "WebSocket sends that could not be delivered",
    ["reason"],  # not_found, write_error
)

ws_message_processing_duration_seconds = _get_or_create(
    Histogram,
    "ws_message_processing_duration_seconds",
    "WebSocket message processing duration in seconds",
    ["type"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
)
