"""Span attribute keys reserved by the xraytrace SDK.

These keys decide how an OpenTelemetry attribute lands in a segment document:
the trace id attribute becomes the document's ``trace_id``, keys under the
annotation prefix become indexed annotations, and everything else is metadata.
"""


class SpanAttributes:
    """Reserved span attribute keys."""

    # =========================================================================
    # Trace Context
    # =========================================================================
    TRACE_ID = "xray.trace_id"

    # =========================================================================
    # Segment Document Routing
    # =========================================================================
    ANNOTATION_PREFIX = "xray.annotations."
    METADATA_INPUT = "xray.input"
    METADATA_OUTPUT = "xray.output"

    # =========================================================================
    # Code Location (OpenTelemetry semantic conventions)
    # =========================================================================
    CODE_FILEPATH = "code.filepath"
    CODE_LINENO = "code.lineno"
    CODE_FUNCTION = "code.function"

    @classmethod
    def annotation(cls, key: str) -> str:
        """Return the attribute key that routes ``key`` into annotations."""
        return f"{cls.ANNOTATION_PREFIX}{key}"
