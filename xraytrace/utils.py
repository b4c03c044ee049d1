"""Shared utilities for the xraytrace SDK."""

import json
import time
from typing import Any

from opentelemetry import trace


def epoch_seconds(timestamp: float | None = None) -> float:
    """Return seconds since the Unix epoch, clamped to 0 for earlier clocks."""
    if timestamp is None:
        timestamp = time.time()
    return max(timestamp, 0.0)


def serialize_value(value: Any) -> Any:
    """Serialize a value for a segment document.

    Recursively converts complex objects to JSON-serializable types.
    """
    if value is None:
        return None
    if isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, (list, tuple)):
        return [serialize_value(v) for v in value]
    if isinstance(value, dict):
        return {str(k): serialize_value(v) for k, v in value.items()}
    # For complex objects, convert to string representation
    try:
        return str(value)
    except Exception:
        return f"<{type(value).__name__}>"


def _homogeneous_primitives(values: list | tuple) -> bool:
    kinds = {type(v) for v in values}
    return len(kinds) == 1 and kinds <= {str, int, float, bool}


def to_attribute_value(value: Any) -> Any:
    """Convert a value to something OpenTelemetry accepts as an attribute.

    Primitives and sequences of one primitive type pass through; anything
    else is serialized to a JSON string.
    """
    if isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, (list, tuple)) and _homogeneous_primitives(value):
        # OTel supports sequences of one primitive type natively
        return list(value)
    return json.dumps(serialize_value(value))


def set_span_attribute(span: trace.Span, key: str, value: Any) -> None:
    """Set a span attribute, serializing complex types to JSON.

    Does nothing if value is None or span is not recording.
    """
    if value is None:
        return
    if not span.is_recording():
        return

    span.set_attribute(key, to_attribute_value(value))
