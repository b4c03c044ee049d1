"""Daemon transport client: framing, connection and error mapping."""

import socket
from unittest.mock import MagicMock, patch

import pytest

from xraytrace.constants import DAEMON_HEADER
from xraytrace.errors import TransportError
from xraytrace.transport.daemon import (
    ConnectedDaemonClient,
    DaemonClient,
    parse_daemon_address,
)
from tests.utils import FakeDaemon


@pytest.fixture
def daemon():
    d = FakeDaemon()
    yield d
    d.close()


def test_send_frames_one_datagram(daemon):
    """Test header + payload + newline arrive as one datagram."""
    payload = b'{"hello": "world"}'

    with DaemonClient(daemon.port).connect() as client:
        written = client.send(payload)

    assert written == len(DAEMON_HEADER) + len(payload) + 1
    assert daemon.recv_raw() == DAEMON_HEADER + payload + b"\n"


def test_header_constant():
    assert DAEMON_HEADER == b'{"format":"json","version":1}\n'


def test_default_port():
    assert DaemonClient().port == 2000
    assert DaemonClient().host == "127.0.0.1"


def test_connect_binds_ephemeral_port(daemon):
    with DaemonClient(daemon.port).connect() as client:
        host, port = client.local_address

    assert port != 0


def test_connect_failure_raises_transport_error():
    with patch("xraytrace.transport.daemon.socket.socket") as mock_socket:
        mock_socket.return_value.connect.side_effect = OSError("unreachable")

        with pytest.raises(TransportError) as exc_info:
            DaemonClient(2000).connect()

    assert isinstance(exc_info.value.__cause__, OSError)
    mock_socket.return_value.close.assert_called_once()


def test_socket_creation_failure_raises_transport_error():
    with patch(
        "xraytrace.transport.daemon.socket.socket", side_effect=OSError("no sockets")
    ):
        with pytest.raises(TransportError):
            DaemonClient(2000).connect()


def test_send_failure_raises_transport_error():
    sock = MagicMock(spec=socket.socket)
    sock.send.side_effect = OSError("message too long")
    client = ConnectedDaemonClient(sock)

    with pytest.raises(TransportError):
        client.send(b"{}")

    sock.send.assert_called_once_with(DAEMON_HEADER + b"{}\n")


@pytest.mark.parametrize(
    "address, expected",
    [
        ("127.0.0.1:2000", ("127.0.0.1", 2000)),
        ("xray-daemon:3000", ("xray-daemon", 3000)),
        ("2001", ("127.0.0.1", 2001)),
        (":2002", ("127.0.0.1", 2002)),
    ],
)
def test_parse_daemon_address(address, expected):
    assert parse_daemon_address(address) == expected


def test_parse_daemon_address_rejects_bad_port():
    with pytest.raises(ValueError):
        parse_daemon_address("localhost:http")
    with pytest.raises(ValueError):
        parse_daemon_address("localhost:70000")
