"""Utilities for generating and parsing X-Ray trace ids.

An X-Ray trace id has the form ``1-<8 hex>-<24 hex>``: the version literal
``1``, the Unix time of the trace origin in seconds, and a 96-bit random
identifier.

Inbound requests carry the trace context in the ``X-Amzn-Trace-Id`` header:

    X-Amzn-Trace-Id: Root=1-5759e988-bd862e3fe1be46a994272793;Parent=53995c3f42cd8ad8;Sampled=1
"""

import random
import time
from dataclasses import dataclass
from enum import Enum
from typing import Mapping

from xraytrace.constants import TRACE_HEADER_NAME

ROOT_KEY = "Root"
PARENT_KEY = "Parent"
SAMPLED_KEY = "Sampled"

_random = random.SystemRandom()


def new() -> str:
    """Generate a fresh X-Ray trace id."""
    epoch = max(int(time.time()), 0)
    return f"1-{epoch:08x}-{_random.getrandbits(96):024x}"


class SamplingDecision(str, Enum):
    """Sampling decision carried by the trace header."""

    SAMPLED = "1"
    NOT_SAMPLED = "0"
    REQUESTED = "?"
    UNKNOWN = ""

    @classmethod
    def from_str(cls, value: str) -> "SamplingDecision":
        for decision in (cls.SAMPLED, cls.NOT_SAMPLED, cls.REQUESTED):
            if value == decision.value:
                return decision
        return cls.UNKNOWN


@dataclass(frozen=True)
class TraceHeader:
    """Parsed contents of an ``X-Amzn-Trace-Id`` header."""

    root: str
    parent: str | None = None
    sampled: SamplingDecision = SamplingDecision.UNKNOWN

    def to_header(self) -> str:
        """Render the header value for an outbound request."""
        parts = [f"{ROOT_KEY}={self.root}"]
        if self.parent is not None:
            parts.append(f"{PARENT_KEY}={self.parent}")
        if self.sampled is not SamplingDecision.UNKNOWN:
            parts.append(f"{SAMPLED_KEY}={self.sampled.value}")
        return ";".join(parts)


def parse_header(value: str) -> TraceHeader | None:
    """Parse an X-Ray trace header value.

    Returns None when the value has no ``Root`` entry, an entry without
    ``=``, or any key other than ``Root``, ``Parent`` and ``Sampled``.
    """
    root = None
    parent = None
    sampled = SamplingDecision.UNKNOWN

    entries = value.strip().split(";")
    # A single trailing separator is allowed
    if entries[-1] == "":
        entries.pop()

    for entry in entries:
        key, sep, val = entry.strip().partition("=")
        if not sep:
            return None
        key = key.strip()
        val = val.strip()
        if key == ROOT_KEY:
            root = val
        elif key == PARENT_KEY:
            parent = val
        elif key == SAMPLED_KEY:
            sampled = SamplingDecision.from_str(val)
        else:
            return None

    if root is None:
        return None
    return TraceHeader(root=root, parent=parent, sampled=sampled)


def from_headers(headers: Mapping[str, str]) -> TraceHeader | None:
    """Extract the trace context from a mapping of HTTP headers.

    Header names are matched case-insensitively.
    """
    wanted = TRACE_HEADER_NAME.lower()
    for name, value in headers.items():
        if name.lower() == wanted:
            return parse_header(value)
    return None
