"""Translate span lifecycle events into segment documents.

The host span runtime reports what happens to its spans through the typed
events below. ``SegmentLayer`` reacts to them:

    SpanCreated  -> resolve trace id, build segment, export in-progress copy
    SpanRecorded -> merge new fields into the segment (no export)
    SpanClosed   -> stamp end_time, export completed copy
    SpanTornDown -> forget the span

A span whose trace id cannot be resolved gets no segment, and later events
for it are ignored.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Protocol

from xraytrace.model import Kind, Segment, classify_fields, format_span_id
from xraytrace.span_attributes import SpanAttributes
from xraytrace.state import SpanState, SpanStateTable

logger = logging.getLogger(__name__)


# =============================================================================
# Lifecycle Events
# =============================================================================


@dataclass(frozen=True)
class SpanCreated:
    span_id: int
    name: str
    parent_id: int | None = None
    fields: Mapping[str, Any] = field(default_factory=dict)
    target: str | None = None
    file: str | None = None
    line: int | None = None


@dataclass(frozen=True)
class SpanRecorded:
    span_id: int
    fields: Mapping[str, Any]


@dataclass(frozen=True)
class SpanClosed:
    span_id: int
    end_time: float | None = None


@dataclass(frozen=True)
class SpanTornDown:
    span_id: int


class SpanListener:
    """Receiver of span lifecycle events. All handlers default to no-ops."""

    def on_create(self, event: SpanCreated) -> None:
        pass

    def on_record(self, event: SpanRecorded) -> None:
        pass

    def on_close(self, event: SpanClosed) -> None:
        pass

    def on_teardown(self, event: SpanTornDown) -> None:
        pass


class SegmentSink(Protocol):
    def enqueue(self, segment: Segment) -> bool: ...


# =============================================================================
# Trace Context Resolution
# =============================================================================


def resolve_trace_id(
    state: SpanState,
    fields: Mapping[str, Any],
    table: SpanStateTable,
) -> str | None:
    """Determine the trace id of a newly created span.

    A trace id field on the span itself wins. Otherwise the nearest ancestor
    with a cached trace id supplies it. The result is cached on ``state``.
    """
    if is_trace_root(fields):
        state.trace_id = fields[SpanAttributes.TRACE_ID]
        return state.trace_id

    for ancestor in table.ancestors(state.span_id):
        if ancestor.trace_id is not None:
            state.trace_id = ancestor.trace_id
            return ancestor.trace_id

    return None


def is_trace_root(fields: Mapping[str, Any]) -> bool:
    """A span is a trace root when it declares its own trace id."""
    trace_id = fields.get(SpanAttributes.TRACE_ID)
    return isinstance(trace_id, str) and bool(trace_id)


# =============================================================================
# Segment Layer
# =============================================================================


class SegmentLayer(SpanListener):
    """Builds, updates and exports one segment per traced span."""

    def __init__(self, service_name: str, sink: SegmentSink):
        self.service_name = service_name
        self._sink = sink
        self._table = SpanStateTable()

    @property
    def table(self) -> SpanStateTable:
        return self._table

    def on_create(self, event: SpanCreated) -> None:
        state = self._table.create(event.span_id, event.parent_id)

        trace_id = resolve_trace_id(state, event.fields, self._table)
        if trace_id is None:
            logger.debug(f"No trace id for span {event.name!r}; skipping segment")
            return

        segment = self._build_segment(event, trace_id)
        with state.lock:
            state.segment = segment
            snapshot = segment.snapshot()
        self._sink.enqueue(snapshot)

    def on_record(self, event: SpanRecorded) -> None:
        state = self._table.get(event.span_id)
        if state is None:
            return

        metadata, annotations = classify_fields(event.fields)
        with state.lock:
            if state.segment is not None:
                state.segment.merge(metadata, annotations)

    def on_close(self, event: SpanClosed) -> None:
        state = self._table.get(event.span_id)
        if state is None:
            return

        with state.lock:
            segment = state.segment
            if segment is None or not segment.complete(event.end_time):
                return
            snapshot = segment.snapshot()
        self._sink.enqueue(snapshot)

    def on_teardown(self, event: SpanTornDown) -> None:
        self._table.remove(event.span_id)

    def segment_for(self, span_id: int) -> Segment | None:
        """Return a copy of the span's current segment, if it has one."""
        state = self._table.get(span_id)
        if state is None:
            return None
        with state.lock:
            return state.segment.snapshot() if state.segment is not None else None

    def trace_id_for(self, span_id: int) -> str | None:
        state = self._table.get(span_id)
        return state.trace_id if state else None

    def _build_segment(self, event: SpanCreated, trace_id: str) -> Segment:
        root = is_trace_root(event.fields)
        metadata, annotations = classify_fields(event.fields)

        metadata.add(
            "tracing",
            {"target": event.target, "file": event.file, "line": event.line},
        )
        if root:
            annotations.add("name", event.name)

        return Segment(
            name=self.service_name if root else event.name,
            id=format_span_id(event.span_id),
            trace_id=trace_id,
            parent_id=(
                format_span_id(event.parent_id)
                if event.parent_id is not None
                else None
            ),
            kind=Kind.SEGMENT if root else Kind.SUBSEGMENT,
            metadata=metadata,
            annotations=annotations,
        )
