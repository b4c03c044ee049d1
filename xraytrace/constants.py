"""Constants used by the xraytrace SDK.

This module defines default values, tracer identification and the wire
constants shared by the segment model and the daemon transport.
"""

# Re-export SpanAttributes for convenience
from xraytrace.span_attributes import SpanAttributes

# =============================================================================
# SDK Identification
# =============================================================================

XRAYTRACE_TRACER_NAME = "xraytrace-sdk"
"""OpenTelemetry tracer/instrumentation scope name for xraytrace spans."""

SDK_VERSION = "0.1.0"
"""SDK version. Should match pyproject.toml version."""

# =============================================================================
# Default Values
# =============================================================================

DEFAULT_SERVICE_NAME = "unknown_service"
"""Default logical service name used for root segments."""

DEFAULT_DAEMON_HOST = "127.0.0.1"
"""Default address of the local X-Ray daemon."""

DEFAULT_DAEMON_PORT = 2000
"""Default UDP port of the local X-Ray daemon."""

DEFAULT_MAX_QUEUE_SIZE = 2048
"""Default capacity of the export queue before new segments are dropped."""

DEFAULT_FLUSH_TIMEOUT = 5.0
"""Default seconds to wait for queued segments on an explicit flush."""

# =============================================================================
# Wire Format
# =============================================================================

DAEMON_HEADER = b'{"format":"json","version":1}\n'
"""Protocol header prepended to every datagram sent to the daemon."""

TRACE_HEADER_NAME = "X-Amzn-Trace-Id"
"""HTTP header carrying the inbound trace context."""

__all__ = [
    "SpanAttributes",
    "XRAYTRACE_TRACER_NAME",
    "SDK_VERSION",
    "DEFAULT_SERVICE_NAME",
    "DEFAULT_DAEMON_HOST",
    "DEFAULT_DAEMON_PORT",
    "DEFAULT_MAX_QUEUE_SIZE",
    "DEFAULT_FLUSH_TIMEOUT",
    "DAEMON_HEADER",
    "TRACE_HEADER_NAME",
]
