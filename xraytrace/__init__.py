"""xraytrace - OpenTelemetry spans exported as AWS X-Ray segments.

Every span that belongs to an X-Ray trace is sent to the local X-Ray daemon
twice: once as an in-progress document when it starts and once with its
``end_time`` when it ends. Spans outside any X-Ray trace produce nothing.

Basic Usage:
    import xraytrace
    from xraytrace import observe

    # Initialize (reads XRAYTRACE_SERVICE_NAME / AWS_XRAY_DAEMON_ADDRESS from env)
    xraytrace.initialize(service_name="checkout-service")

    # A root span starts a trace; nested spans become subsegments
    @observe(name="checkout", root=True, annotations={"tier": "gold"})
    def checkout(cart):
        return charge(cart)

    @observe()
    def charge(cart):
        ...

Continuing an inbound request:
    with xraytrace.start_segment("handle", headers=request.headers):
        handle(request)

Session Management:
    from openinference.instrumentation import using_attributes

    with using_attributes(session_id="conv-123", user_id="user-456"):
        # session.id and user.id land in segment metadata
        checkout(cart)
"""

from xraytrace.client import XRayClient
from xraytrace.context import get_current_segment_id, get_current_trace_id
from xraytrace.decorators import observe, start_segment
from xraytrace.errors import TransportError, XRayTraceError
from xraytrace.update import update_current_span

# Re-export using_attributes from OpenInference for convenience
from openinference.instrumentation import using_attributes

__version__ = "0.1.0"

# =============================================================================
# Global Singleton Client
# =============================================================================
_client: XRayClient | None = None


def initialize(
    service_name: str | None = None,
    daemon_address: str | None = None,
    max_queue_size: int | None = None,
    enabled: bool | None = None,
) -> XRayClient:
    """Initialize the global xraytrace client.

    Call this once at application startup before using any tracing. Calling
    it again shuts down the previous client first.

    Args:
        service_name: Name used for root segments. Defaults to
            XRAYTRACE_SERVICE_NAME env var.
        daemon_address: Daemon "host:port". Defaults to AWS_XRAY_DAEMON_ADDRESS
            env var, then 127.0.0.1:2000.
        max_queue_size: Segments held for sending before new ones are dropped.
        enabled: Whether tracing is enabled. Defaults to XRAYTRACE_ENABLED env
            var, then True.

    Returns:
        The XRayClient instance.

    Raises:
        TransportError: If the daemon socket cannot be set up.

    Example:
        import xraytrace
        xraytrace.initialize()  # Reads from env vars
    """
    global _client
    if _client is not None:
        _client.shutdown()
    _client = XRayClient(
        service_name=service_name,
        daemon_address=daemon_address,
        max_queue_size=max_queue_size,
        enabled=enabled,
    )
    return _client


def get_client() -> XRayClient | None:
    """Get the global xraytrace client (internal use)."""
    return _client


def flush() -> None:
    """Wait for queued segments to be sent."""
    if _client:
        _client.flush()


def shutdown() -> None:
    """Shutdown the SDK. Segments still queued are discarded."""
    if _client:
        _client.shutdown()


__all__ = [
    # Core
    "initialize",
    "flush",
    "shutdown",
    "observe",
    "start_segment",
    "XRayClient",
    # Errors
    "XRayTraceError",
    "TransportError",
    # Context utilities
    "get_current_trace_id",
    "get_current_segment_id",
    # Update functions
    "update_current_span",
    # OpenInference (re-exported for convenience)
    "using_attributes",
]
