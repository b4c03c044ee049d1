"""Exceptions raised by the xraytrace SDK."""


class XRayTraceError(Exception):
    """Base class for xraytrace errors."""


class TransportError(XRayTraceError):
    """Raised when the daemon socket cannot be set up or written to.

    The underlying ``OSError`` is chained as ``__cause__``.
    """
