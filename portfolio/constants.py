"""
Application-level constants for hardcoded protocol behavior.

These values define the wire protocol and internal limits and are not
meant to be changed through environment variables. For configurable
values see portfolio/settings.py.
"""

# ============================================================================
# WebSocket Protocol Constants
# ============================================================================

# Envelope type used for server informational messages (welcome on connect)
INFO_MESSAGE_TYPE = "info"

# Action name carried by structured error results
ERROR_ACTION = "error"

# Message returned when an entity id does not resolve to a record
ID_NOT_FOUND_MESSAGE = "Id not found"

# Message returned by HTTP delete on success
RECORD_DELETED_MESSAGE = "Record Deleted"

# Upper bound on characters of a raw frame echoed into logs
LOG_PAYLOAD_PREVIEW_CHARS = 200


# ============================================================================
# Logging
# ============================================================================

# Maximum serialized size of one structured log line
MAX_LOG_SIZE_BYTES = 65536
