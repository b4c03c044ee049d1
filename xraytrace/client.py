"""xraytrace client."""

import atexit
import logging
import os

from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider

from xraytrace.constants import (
    DEFAULT_DAEMON_HOST,
    DEFAULT_DAEMON_PORT,
    DEFAULT_FLUSH_TIMEOUT,
    DEFAULT_MAX_QUEUE_SIZE,
    DEFAULT_SERVICE_NAME,
)
from xraytrace.env import (
    AWS_XRAY_DAEMON_ADDRESS,
    XRAYTRACE_DEBUG,
    XRAYTRACE_ENABLED,
    XRAYTRACE_MAX_QUEUE_SIZE,
    XRAYTRACE_SERVICE_NAME,
)
from xraytrace.layer import SegmentLayer
from xraytrace.transport.daemon import (
    ConnectedDaemonClient,
    DaemonClient,
    parse_daemon_address,
)
from xraytrace.transport.pipeline import ExportPipeline
from xraytrace.transport.span_processor import XRaySpanProcessor

logger = logging.getLogger(__name__)

_FALSE_VALUES = ("false", "0", "no", "off")


def _env_flag(name: str) -> bool | None:
    value = os.environ.get(name, "").lower()
    if not value:
        return None
    return value not in _FALSE_VALUES


class XRayClient:
    """Main client for sending segments to the X-Ray daemon.

    The client connects to the daemon, starts the export pipeline and
    installs an OpenTelemetry TracerProvider whose span processor turns
    every span into a segment document.
    """

    def __init__(
        self,
        service_name: str | None = None,
        daemon_address: str | None = None,
        max_queue_size: int | None = None,
        enabled: bool | None = None,
        set_global_provider: bool = True,
    ):
        """Initialize the client.

        Args:
            service_name: Name used for root segments. Falls back to
                XRAYTRACE_SERVICE_NAME env var, then "unknown_service".
            daemon_address: Daemon address as "host:port". Falls back to
                AWS_XRAY_DAEMON_ADDRESS env var, then 127.0.0.1:2000.
            max_queue_size: Export queue capacity. Falls back to
                XRAYTRACE_MAX_QUEUE_SIZE env var, then 2048.
            enabled: Whether tracing is enabled. Falls back to XRAYTRACE_ENABLED env var.
            set_global_provider: Install the TracerProvider as the global
                OpenTelemetry provider.

        Malformed env var values are logged and replaced by the default.

        Raises:
            ValueError: If ``daemon_address`` is not a valid address.
            TransportError: If the daemon socket cannot be set up.
        """
        # Resolve config with env var fallbacks
        self.service_name = (
            service_name or os.environ.get(XRAYTRACE_SERVICE_NAME) or DEFAULT_SERVICE_NAME
        )

        self.daemon_host, self.daemon_port = DEFAULT_DAEMON_HOST, DEFAULT_DAEMON_PORT
        if daemon_address:
            self.daemon_host, self.daemon_port = parse_daemon_address(daemon_address)
        elif os.environ.get(AWS_XRAY_DAEMON_ADDRESS):
            env_address = os.environ[AWS_XRAY_DAEMON_ADDRESS]
            try:
                self.daemon_host, self.daemon_port = parse_daemon_address(env_address)
            except ValueError as e:
                logger.warning(
                    f"Ignoring {AWS_XRAY_DAEMON_ADDRESS}={env_address!r} ({e}); "
                    f"using {DEFAULT_DAEMON_HOST}:{DEFAULT_DAEMON_PORT}"
                )

        if max_queue_size is None:
            max_queue_size = DEFAULT_MAX_QUEUE_SIZE
            env_size = os.environ.get(XRAYTRACE_MAX_QUEUE_SIZE)
            if env_size:
                try:
                    max_queue_size = int(env_size)
                except ValueError:
                    logger.warning(
                        f"Ignoring {XRAYTRACE_MAX_QUEUE_SIZE}={env_size!r}; "
                        f"using {DEFAULT_MAX_QUEUE_SIZE}"
                    )
        self.max_queue_size = max_queue_size

        if enabled is None:
            enabled = _env_flag(XRAYTRACE_ENABLED)
            enabled = True if enabled is None else enabled
        self._enabled = enabled

        if _env_flag(XRAYTRACE_DEBUG):
            logging.getLogger("xraytrace").setLevel(logging.DEBUG)

        self._set_global_provider = set_global_provider
        self._connection: ConnectedDaemonClient | None = None
        self._pipeline: ExportPipeline | None = None
        self._layer: SegmentLayer | None = None
        self._span_processor: XRaySpanProcessor | None = None
        self._provider: TracerProvider | None = None
        self._initialized = False

        if self._enabled:
            self._initialize()

    def _initialize(self) -> None:
        """Connect to the daemon and wire the pipeline into a TracerProvider."""
        if self._initialized:
            return

        self._connection = DaemonClient(self.daemon_port, self.daemon_host).connect()
        self._pipeline = ExportPipeline(
            self._connection.send, max_queue_size=self.max_queue_size
        )
        self._layer = SegmentLayer(self.service_name, self._pipeline)
        self._span_processor = XRaySpanProcessor(self._layer, self._pipeline)

        self._provider = TracerProvider()
        self._provider.add_span_processor(self._span_processor)

        # Set as global provider so plain OpenTelemetry code is traced too
        if self._set_global_provider:
            trace.set_tracer_provider(self._provider)

        # Register shutdown handler
        atexit.register(self.shutdown)

        self._initialized = True
        logger.debug(
            f"xraytrace client initialized for service {self.service_name!r} "
            f"(daemon {self.daemon_host}:{self.daemon_port})"
        )

    @property
    def enabled(self) -> bool:
        """Check if tracing is enabled."""
        return self._enabled

    @property
    def layer(self) -> SegmentLayer | None:
        return self._layer

    @property
    def pipeline(self) -> ExportPipeline | None:
        return self._pipeline

    @property
    def span_processor(self) -> XRaySpanProcessor | None:
        """Get the span processor for OTel integration."""
        return self._span_processor

    @property
    def tracer_provider(self) -> TracerProvider | None:
        return self._provider

    def flush(self, timeout: float = DEFAULT_FLUSH_TIMEOUT) -> bool:
        """Wait for queued segments to be sent."""
        if self._pipeline:
            return self._pipeline.flush(timeout)
        return True

    def shutdown(self) -> None:
        """Stop exporting. Segments still queued are discarded."""
        if self._span_processor:
            self._span_processor.shutdown()
            self._span_processor = None

        if self._connection:
            self._connection.close()
            self._connection = None

        self._pipeline = None
        self._provider = None
        self._initialized = False
        logger.debug("xraytrace client shutdown")
