"""Trace id generation and X-Amzn-Trace-Id header parsing."""

import re
from unittest.mock import patch

from xraytrace import trace_id
from xraytrace.trace_id import SamplingDecision, TraceHeader, from_headers, parse_header

TRACE_ID_PATTERN = re.compile(r"^1-[0-9a-f]{8}-[0-9a-f]{24}$")


def test_new_trace_id_format():
    """Test generated trace ids match the X-Ray format."""
    for _ in range(200):
        assert TRACE_ID_PATTERN.match(trace_id.new())


def test_new_trace_id_embeds_epoch_seconds():
    """Test the middle part is the current time in hex."""
    with patch("xraytrace.trace_id.time.time", return_value=1554577450.9):
        value = trace_id.new()

    assert value.split("-")[1] == "5ca8f82a"


def test_new_trace_id_clamps_pre_epoch_clock():
    with patch("xraytrace.trace_id.time.time", return_value=-10.0):
        value = trace_id.new()

    assert value.split("-")[1] == "00000000"


def test_new_trace_ids_are_unique():
    assert len({trace_id.new() for _ in range(1000)}) == 1000


def test_parse_full_header():
    """Test Root, Parent and Sampled are all extracted."""
    header = parse_header("Root=1-abc-def;Parent=123;Sampled=1")

    assert header == TraceHeader(
        root="1-abc-def", parent="123", sampled=SamplingDecision.SAMPLED
    )


def test_parse_root_only():
    header = parse_header("Root=1-5759e988-bd862e3fe1be46a994272793")

    assert header.root == "1-5759e988-bd862e3fe1be46a994272793"
    assert header.parent is None
    assert header.sampled is SamplingDecision.UNKNOWN


def test_parse_sampling_decisions():
    assert parse_header("Root=r;Sampled=0").sampled is SamplingDecision.NOT_SAMPLED
    assert parse_header("Root=r;Sampled=?").sampled is SamplingDecision.REQUESTED
    assert parse_header("Root=r;Sampled=yes").sampled is SamplingDecision.UNKNOWN


def test_parse_tolerates_whitespace_and_trailing_separator():
    header = parse_header("  Root = 1-abc-def ; Parent= 53995c3f42cd8ad8;")

    assert header.root == "1-abc-def"
    assert header.parent == "53995c3f42cd8ad8"


def test_parse_unknown_key_fails():
    """Test any unrecognized key rejects the whole header."""
    assert parse_header("Root=1-abc-def;Parent=123;Self=1-xyz") is None
    assert parse_header("Lineage=a;Root=1-abc-def") is None


def test_parse_requires_root():
    assert parse_header("Parent=123;Sampled=1") is None
    assert parse_header("") is None


def test_parse_entry_without_value_fails():
    assert parse_header("Root=1-abc-def;Parent") is None


def test_header_round_trip_rendering():
    header = TraceHeader(root="1-abc-def", parent="123", sampled=SamplingDecision.SAMPLED)

    assert header.to_header() == "Root=1-abc-def;Parent=123;Sampled=1"
    assert TraceHeader(root="1-abc-def").to_header() == "Root=1-abc-def"


def test_from_headers_is_case_insensitive():
    headers = {"content-type": "application/json", "x-amzn-trace-id": "Root=1-abc-def"}

    assert from_headers(headers).root == "1-abc-def"


def test_from_headers_missing_header():
    assert from_headers({"Host": "example.com"}) is None
