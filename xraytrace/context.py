"""Context utilities for accessing the current X-Ray trace/segment ids.

These functions read the active OpenTelemetry span and look up what the
segment layer resolved for it.
"""

from opentelemetry import trace

from xraytrace.model import format_span_id


def get_current_trace_id() -> str | None:
    """Get the X-Ray trace id of the current span.

    Returns:
        The ``1-xxxxxxxx-xxxxxxxxxxxxxxxxxxxxxxxx`` trace id, or None if there
        is no active span or it does not belong to an X-Ray trace.

    Example:
        with start_segment("job"):
            logger.info("trace %s", get_current_trace_id())
    """
    from xraytrace import get_client

    span = trace.get_current_span()
    client = get_client()
    if client is None or client.layer is None:
        return None
    if span and span.get_span_context().is_valid:
        return client.layer.trace_id_for(span.get_span_context().span_id)
    return None


def get_current_segment_id() -> str | None:
    """Get the segment id (16 hex digits) of the current span."""
    span = trace.get_current_span()
    if span and span.get_span_context().is_valid:
        return format_span_id(span.get_span_context().span_id)
    return None
