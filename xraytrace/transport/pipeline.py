"""Bounded, best-effort export of segment snapshots.

Producers (span lifecycle handlers on any thread) call ``enqueue``, which
never blocks: when the queue is full the new snapshot is dropped. A single
background thread drains the queue in FIFO order, serializes each snapshot
and hands the bytes to the sender. Send failures are logged at debug level
and not retried. Stopping the pipeline discards whatever is still queued.
"""

import logging
import queue
import threading
from typing import Callable

from xraytrace.constants import DEFAULT_MAX_QUEUE_SIZE
from xraytrace.model import Segment

logger = logging.getLogger(__name__)

Sender = Callable[[bytes], object]

_POLL_INTERVAL = 0.1


class ExportPipeline:
    """Queue plus single consumer thread feeding a sender callable."""

    def __init__(
        self,
        sender: Sender,
        max_queue_size: int = DEFAULT_MAX_QUEUE_SIZE,
        start: bool = True,
    ):
        """Initialize the pipeline.

        Args:
            sender: Called with each serialized segment, e.g.
                ``ConnectedDaemonClient.send``.
            max_queue_size: Snapshots held before new ones are dropped.
            start: Whether to start the consumer thread right away.
        """
        if max_queue_size < 1:
            raise ValueError("max_queue_size must be at least 1")

        self._sender = sender
        self._queue: queue.Queue[Segment] = queue.Queue(maxsize=max_queue_size)
        self._stopped = threading.Event()
        self._thread: threading.Thread | None = None

        # Counters and pending count are guarded by _idle
        self._idle = threading.Condition()
        self._pending = 0
        self.sent = 0
        self.failed = 0
        self.dropped = 0

        if start:
            self.start()

    @property
    def max_queue_size(self) -> int:
        return self._queue.maxsize

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def qsize(self) -> int:
        return self._queue.qsize()

    def start(self) -> None:
        """Start the consumer thread. Safe to call more than once."""
        if self.running or self._stopped.is_set():
            return
        self._thread = threading.Thread(
            target=self._run, name="xraytrace-export", daemon=True
        )
        self._thread.start()

    def enqueue(self, segment: Segment) -> bool:
        """Queue a snapshot for export without blocking.

        Returns:
            False if the snapshot was dropped (queue full or pipeline stopped).
        """
        if self._stopped.is_set():
            return False

        with self._idle:
            try:
                self._queue.put_nowait(segment)
            except queue.Full:
                self.dropped += 1
                logger.debug(f"Export queue full; dropped segment {segment.id}")
                return False
            self._pending += 1
        return True

    def flush(self, timeout: float | None = None) -> bool:
        """Wait until every snapshot queued so far has been handled.

        Returns:
            True if the queue drained before the timeout.
        """
        with self._idle:
            return self._idle.wait_for(lambda: self._pending == 0, timeout)

    def shutdown(self) -> None:
        """Stop the consumer. Snapshots still queued are discarded."""
        self._stopped.set()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout=_POLL_INTERVAL * 10)
        self._thread = None

        with self._idle:
            while True:
                try:
                    self._queue.get_nowait()
                except queue.Empty:
                    break
            self._pending = 0
            self._idle.notify_all()

    def _run(self) -> None:
        while not self._stopped.is_set():
            try:
                segment = self._queue.get(timeout=_POLL_INTERVAL)
            except queue.Empty:
                continue

            if self._stopped.is_set():
                break
            ok = self._export(segment)

            with self._idle:
                if ok:
                    self.sent += 1
                else:
                    self.failed += 1
                self._pending = max(self._pending - 1, 0)
                self._idle.notify_all()

    def _export(self, segment: Segment) -> bool:
        try:
            self._sender(segment.to_json())
        except Exception as e:
            logger.debug(f"Failed to export segment {segment.id}: {e}")
            return False
        return True
