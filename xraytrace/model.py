"""Segment document model.

A segment is the document the X-Ray daemon ingests for one unit of work.
Trace roots produce segments; every other span produces a subsegment that
points at its parent through ``parent_id``.

Wire shape (one JSON object per datagram):

    {
      "name": "checkout",
      "id": "00000000000004d2",
      "start_time": 1554577450.123,
      "trace_id": "1-5ca8f82a-000102030405060708090a0b",
      "parent_id": "000000000000162e",   # absent for roots
      "type": "subsegment",              # absent for roots
      "metadata": {...},
      "annotations": {...},
      "in_progress": true                # or "end_time": <float>
    }
"""

from enum import Enum
from typing import Any, Mapping

from pydantic import BaseModel, Field, RootModel, model_serializer

from xraytrace.span_attributes import SpanAttributes
from xraytrace.utils import epoch_seconds, serialize_value


class Kind(str, Enum):
    """Whether a document is a top-level segment or a nested subsegment."""

    SEGMENT = "segment"
    SUBSEGMENT = "subsegment"


class Fields(RootModel[dict[str, Any]]):
    """A JSON object whose keys merge last-writer-wins."""

    root: dict[str, Any] = Field(default_factory=dict)

    def add(self, key: str, value: Any) -> None:
        self.root[str(key)] = serialize_value(value)

    def update(self, other: "Fields") -> None:
        """Shallow merge: keys in ``other`` overwrite, unrelated keys persist."""
        self.root.update(other.root)

    def __getitem__(self, key: str) -> Any:
        return self.root[key]

    def __contains__(self, key: object) -> bool:
        return key in self.root

    def __len__(self) -> int:
        return len(self.root)


class Metadata(Fields):
    """Opaque, non-indexed key/value pairs."""


class Annotations(Fields):
    """Indexed key/value pairs the backend can filter on."""


def classify_fields(fields: Mapping[str, Any]) -> tuple[Metadata, Annotations]:
    """Partition span fields into metadata and annotations.

    Keys under ``SpanAttributes.ANNOTATION_PREFIX`` become annotations with the
    prefix stripped. The trace id key is dropped since it is already the
    document's ``trace_id``. Everything else is metadata.
    """
    metadata = Metadata()
    annotations = Annotations()
    prefix = SpanAttributes.ANNOTATION_PREFIX

    for key, value in fields.items():
        if key == SpanAttributes.TRACE_ID:
            continue
        if key.startswith(prefix):
            annotations.add(key[len(prefix):], value)
        else:
            metadata.add(key, value)

    return metadata, annotations


def format_span_id(span_id: int) -> str:
    """Render a 64-bit span id as 16 lowercase hex digits."""
    return format(span_id, "016x")


class Segment(BaseModel):
    """A segment or subsegment document.

    ``end_time`` is None while the span is open, which renders as
    ``"in_progress": true``. Completing sets it exactly once.
    """

    name: str
    id: str
    trace_id: str
    start_time: float = Field(default_factory=epoch_seconds)
    parent_id: str | None = None
    kind: Kind = Kind.SUBSEGMENT
    metadata: Metadata = Field(default_factory=Metadata)
    annotations: Annotations = Field(default_factory=Annotations)
    end_time: float | None = None

    @property
    def in_progress(self) -> bool:
        return self.end_time is None

    def merge(self, metadata: Metadata, annotations: Annotations) -> None:
        """Merge newly recorded fields without touching the lifecycle state."""
        self.metadata.update(metadata)
        self.annotations.update(annotations)

    def complete(self, end_time: float | None = None) -> bool:
        """Stamp ``end_time`` and move to the completed state.

        Returns False (and keeps the first ``end_time``) if the segment was
        already completed.
        """
        if self.end_time is not None:
            return False
        self.end_time = max(epoch_seconds(end_time), self.start_time)
        return True

    def snapshot(self) -> "Segment":
        """Return an independent copy safe to hand to another thread."""
        return self.model_copy(deep=True)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json")

    def to_json(self) -> bytes:
        return self.model_dump_json().encode("utf-8")

    @model_serializer(mode="wrap")
    def _serialize_document(self, handler) -> dict[str, Any]:
        fields = handler(self)

        document = {
            "name": fields["name"],
            "id": fields["id"],
            "start_time": fields["start_time"],
            "trace_id": fields["trace_id"],
        }
        if self.parent_id is not None:
            document["parent_id"] = fields["parent_id"]
        if self.kind is Kind.SUBSEGMENT:
            document["type"] = Kind.SUBSEGMENT.value
        document["metadata"] = fields["metadata"]
        document["annotations"] = fields["annotations"]

        if self.end_time is None:
            document["in_progress"] = True
        else:
            document["end_time"] = fields["end_time"]
        return document
