"""UDP client for the local X-Ray daemon.

The daemon listens for datagrams of the form::

    {"format":"json","version":1}\\n<segment document>\\n

``DaemonClient`` only knows where the daemon is; ``connect()`` returns a
``ConnectedDaemonClient`` that owns the socket and can send.
"""

import logging
import socket

from xraytrace.constants import DAEMON_HEADER, DEFAULT_DAEMON_HOST, DEFAULT_DAEMON_PORT
from xraytrace.errors import TransportError

logger = logging.getLogger(__name__)


def parse_daemon_address(address: str) -> tuple[str, int]:
    """Parse ``host:port`` or ``port`` into a (host, port) pair.

    Raises:
        ValueError: If the port is not an integer in 0-65535.
    """
    host, sep, port = address.strip().rpartition(":")
    if not sep:
        host = DEFAULT_DAEMON_HOST
    port_number = int(port)
    if not 0 <= port_number <= 65535:
        raise ValueError(f"Daemon port out of range: {port_number}")
    return host or DEFAULT_DAEMON_HOST, port_number


class DaemonClient:
    """Disconnected daemon client holding only the target address."""

    def __init__(self, port: int = DEFAULT_DAEMON_PORT, host: str = DEFAULT_DAEMON_HOST):
        self.host = host
        self.port = port

    def connect(self) -> "ConnectedDaemonClient":
        """Bind a local datagram socket and associate it with the daemon.

        Raises:
            TransportError: If the socket cannot be created, bound or connected.
        """
        try:
            sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        except OSError as e:
            raise TransportError(f"Failed to create daemon socket: {e}") from e

        try:
            # Let the OS pick the local address and port
            sock.bind(("0.0.0.0", 0))
            sock.connect((self.host, self.port))
        except OSError as e:
            sock.close()
            raise TransportError(
                f"Failed to connect to daemon at {self.host}:{self.port}: {e}"
            ) from e

        logger.debug(f"Connected to X-Ray daemon at {self.host}:{self.port}")
        return ConnectedDaemonClient(sock)


class ConnectedDaemonClient:
    """Daemon client with a socket whose default peer is the daemon."""

    def __init__(self, sock: socket.socket):
        self._sock = sock

    @property
    def local_address(self) -> tuple[str, int]:
        return self._sock.getsockname()

    def send(self, payload: bytes) -> int:
        """Send one framed segment document as a single datagram.

        Returns:
            Number of bytes written, header and trailing newline included.

        Raises:
            TransportError: If the OS rejects the write.
        """
        try:
            return self._sock.send(DAEMON_HEADER + payload + b"\n")
        except OSError as e:
            raise TransportError(f"Failed to send segment to daemon: {e}") from e

    def close(self) -> None:
        self._sock.close()

    def __enter__(self) -> "ConnectedDaemonClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
