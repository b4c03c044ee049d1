"""Test utilities for xraytrace SDK tests."""

import json
import socket

from xraytrace.constants import DAEMON_HEADER
from xraytrace.model import Segment


def reset_xraytrace() -> None:
    """Reset xraytrace global state between tests."""
    import xraytrace

    if xraytrace.get_client():
        xraytrace.shutdown()
    xraytrace._client = None


class ListSink:
    """Segment sink that keeps every enqueued snapshot."""

    def __init__(self):
        self.segments: list[Segment] = []

    def enqueue(self, segment: Segment) -> bool:
        self.segments.append(segment)
        return True


class RecordingSender:
    """Sender callable that records payloads, optionally failing on some."""

    def __init__(self, fail_on: set[int] | None = None):
        self.payloads: list[bytes] = []
        self.calls = 0
        self._fail_on = fail_on or set()

    def __call__(self, payload: bytes) -> int:
        self.calls += 1
        if self.calls in self._fail_on:
            raise OSError("simulated send failure")
        self.payloads.append(payload)
        return len(payload)

    def documents(self) -> list[dict]:
        return [json.loads(p) for p in self.payloads]


class FakeDaemon:
    """UDP socket on localhost standing in for the X-Ray daemon."""

    def __init__(self):
        self.sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        self.sock.bind(("127.0.0.1", 0))
        self.sock.settimeout(2.0)

    @property
    def port(self) -> int:
        return self.sock.getsockname()[1]

    @property
    def address(self) -> str:
        return f"127.0.0.1:{self.port}"

    def recv_raw(self) -> bytes:
        data, _ = self.sock.recvfrom(65535)
        return data

    def recv_document(self) -> dict:
        data = self.recv_raw()
        assert data.startswith(DAEMON_HEADER)
        assert data.endswith(b"\n")
        return json.loads(data[len(DAEMON_HEADER):-1])

    def close(self) -> None:
        self.sock.close()
