"""OpenTelemetry span processor feeding the segment layer.

This module defines the XRaySpanProcessor class, which turns OpenTelemetry
span callbacks into the lifecycle events understood by ``SegmentLayer``:

- ``on_start`` -> ``SpanCreated`` with the attributes given at span start
- ``on_end``   -> ``SpanRecorded`` with the final attributes, then
  ``SpanClosed`` and ``SpanTornDown``

Attributes set between start and end are therefore merged into the
completed segment only.
"""

import logging
from typing import Optional

from opentelemetry.context import Context
from opentelemetry.sdk.trace import ReadableSpan, Span, SpanProcessor

from xraytrace.layer import (
    SegmentLayer,
    SpanClosed,
    SpanCreated,
    SpanRecorded,
    SpanTornDown,
)
from xraytrace.span_attributes import SpanAttributes
from xraytrace.transport.pipeline import ExportPipeline

logger = logging.getLogger(__name__)


class XRaySpanProcessor(SpanProcessor):
    """OpenTelemetry span processor that exports spans as X-Ray segments."""

    def __init__(self, layer: SegmentLayer, pipeline: ExportPipeline):
        self._layer = layer
        self._pipeline = pipeline

    @property
    def layer(self) -> SegmentLayer:
        return self._layer

    def on_start(self, span: Span, parent_context: Optional[Context] = None) -> None:
        attributes = dict(span.attributes or {})
        parent = span.parent
        scope = span.instrumentation_scope

        self._layer.on_create(
            SpanCreated(
                span_id=span.context.span_id,
                name=span.name,
                parent_id=parent.span_id if parent is not None else None,
                fields=attributes,
                target=scope.name if scope is not None else None,
                file=attributes.get(SpanAttributes.CODE_FILEPATH),
                line=attributes.get(SpanAttributes.CODE_LINENO),
            )
        )

    def on_end(self, span: ReadableSpan) -> None:
        span_id = span.context.span_id
        end_time = span.end_time / 1e9 if span.end_time is not None else None

        self._layer.on_record(SpanRecorded(span_id, dict(span.attributes or {})))
        self._layer.on_close(SpanClosed(span_id, end_time))
        self._layer.on_teardown(SpanTornDown(span_id))

    def shutdown(self) -> None:
        self._pipeline.shutdown()
        logger.debug("XRaySpanProcessor shutdown")

    def force_flush(self, timeout_millis: int = 30000) -> bool:
        return self._pipeline.flush(timeout_millis / 1000)
