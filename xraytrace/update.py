"""Functions to enrich the current span with metadata and annotations.

Values set here are merged into the span's segment when the span ends and
show up in the completed document.
"""

import logging
from typing import Any

from opentelemetry import trace

from xraytrace.span_attributes import SpanAttributes
from xraytrace.utils import set_span_attribute

logger = logging.getLogger(__name__)


def update_current_span(
    *,
    metadata: dict[str, Any] | None = None,
    annotations: dict[str, Any] | None = None,
) -> None:
    """Update the current active span with additional fields.

    Args:
        metadata: Opaque key/value pairs; each key becomes a metadata entry.
        annotations: Indexed key/value pairs the backend can filter on.
            Keep values to strings, numbers and booleans.

    Example:
        @observe()
        def charge(cart):
            result = gateway.charge(cart.total)
            xraytrace.update_current_span(
                annotations={"gateway": result.provider},
                metadata={"receipt": result.receipt},
            )
            return result
    """
    span = trace.get_current_span()

    if span is None or not span.is_recording():
        logger.debug("update_current_span: No active recording span found.")
        return

    for key, value in (metadata or {}).items():
        set_span_attribute(span, key, value)

    for key, value in (annotations or {}).items():
        set_span_attribute(span, SpanAttributes.annotation(key), value)
