"""Per-span state owned by the exporter.

Each live span gets one ``SpanState`` holding the two things segment
building needs: the resolved trace id (cached so descendants can find it)
and the segment document. Entries are added when a span is created and
removed when it is torn down.
"""

import threading
from dataclasses import dataclass, field
from typing import Iterator

from xraytrace.model import Segment


@dataclass
class SpanState:
    """State attached to a single live span.

    ``lock`` must be held while reading or mutating ``segment``.
    """

    span_id: int
    parent_id: int | None = None
    trace_id: str | None = None
    segment: Segment | None = None
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)


class SpanStateTable:
    """Thread-safe map of span id to ``SpanState``."""

    def __init__(self):
        self._states: dict[int, SpanState] = {}
        self._lock = threading.Lock()

    def create(self, span_id: int, parent_id: int | None = None) -> SpanState:
        state = SpanState(span_id=span_id, parent_id=parent_id)
        with self._lock:
            self._states[span_id] = state
        return state

    def get(self, span_id: int) -> SpanState | None:
        with self._lock:
            return self._states.get(span_id)

    def remove(self, span_id: int) -> SpanState | None:
        with self._lock:
            return self._states.pop(span_id, None)

    def ancestors(self, span_id: int) -> Iterator[SpanState]:
        """Yield the proper ancestors of a span, nearest first.

        The walk stops at the first parent id without a live entry.
        """
        state = self.get(span_id)
        parent_id = state.parent_id if state else None
        while parent_id is not None:
            parent = self.get(parent_id)
            if parent is None:
                return
            yield parent
            parent_id = parent.parent_id

    def __len__(self) -> int:
        with self._lock:
            return len(self._states)

    def __contains__(self, span_id: int) -> bool:
        with self._lock:
            return span_id in self._states
