"""Decorator-based instrumentation using OpenTelemetry."""

import contextlib
import functools
import inspect
import logging
from typing import Any, Callable, Iterator, Mapping, TypeVar

from openinference.instrumentation import get_attributes_from_context
from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

from xraytrace import trace_id as trace_ids
from xraytrace.constants import SDK_VERSION, XRAYTRACE_TRACER_NAME, SpanAttributes
from xraytrace.utils import serialize_value, set_span_attribute, to_attribute_value

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def _get_tracer() -> trace.Tracer:
    """Tracer from the active client's provider, else the global one."""
    from xraytrace import get_client

    client = get_client()
    if client is not None and client.tracer_provider is not None:
        return client.tracer_provider.get_tracer(XRAYTRACE_TRACER_NAME, SDK_VERSION)
    return trace.get_tracer(XRAYTRACE_TRACER_NAME, SDK_VERSION)


def _start_attributes(
    trace_id: str | None,
    annotations: Mapping[str, Any] | None,
    metadata: Mapping[str, Any] | None,
    func: Callable | None = None,
) -> dict[str, Any]:
    """Attributes that must be present when the span starts.

    The segment is built from these, so the trace id, annotations and code
    location have to be known up front.
    """
    attributes: dict[str, Any] = {}

    try:
        for key, value in get_attributes_from_context():
            attributes[key] = value
    except Exception as e:
        logger.debug(f"Failed to get context attributes: {e}")

    if func is not None:
        code = getattr(func, "__code__", None)
        if code is not None:
            attributes[SpanAttributes.CODE_FILEPATH] = code.co_filename
            attributes[SpanAttributes.CODE_LINENO] = code.co_firstlineno
        attributes[SpanAttributes.CODE_FUNCTION] = func.__qualname__

    for key, value in (metadata or {}).items():
        attributes[key] = to_attribute_value(value)
    for key, value in (annotations or {}).items():
        attributes[SpanAttributes.annotation(key)] = to_attribute_value(value)

    if trace_id:
        attributes[SpanAttributes.TRACE_ID] = trace_id
    return attributes


def observe(
    name: str | None = None,
    root: bool = False,
    trace_id: str | None = None,
    annotations: dict[str, Any] | None = None,
    metadata: dict[str, Any] | None = None,
    capture_input: bool = True,
    capture_output: bool = True,
) -> Callable[[F], F]:
    """Decorator to run a function inside a span exported as a (sub)segment.

    Args:
        name: Span name. Defaults to function name.
        root: Start a new trace. A fresh trace id is generated on every call
            unless ``trace_id`` is given.
        trace_id: Explicit X-Ray trace id; makes the span a trace root.
        annotations: Static indexed annotations.
        metadata: Static metadata.
        capture_input: Whether to capture function arguments.
        capture_output: Whether to capture return value.

    Returns:
        Decorated function.

    Example:
        @observe(name="checkout", root=True, annotations={"tier": "gold"})
        def checkout(cart):
            return charge(cart)

        @observe()
        def charge(cart):
            ...
    """
    if trace_id is not None and not trace_id:
        logger.warning("Empty trace_id passed to observe(); ignoring it.")
        trace_id = None

    def decorator(func: F) -> F:
        span_name = name or func.__name__

        def start_attributes() -> dict[str, Any]:
            span_trace_id = trace_id or (trace_ids.new() if root else None)
            return _start_attributes(span_trace_id, annotations, metadata, func)

        if inspect.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                with _get_tracer().start_as_current_span(
                    span_name, attributes=start_attributes()
                ) as span:
                    if capture_input:
                        _set_input(span, args, kwargs, func)

                    try:
                        result = await func(*args, **kwargs)
                        if capture_output and result is not None:
                            _set_output(span, result)
                        return result
                    except Exception as e:
                        span.set_status(Status(StatusCode.ERROR, str(e)))
                        span.record_exception(e)
                        raise

            return async_wrapper  # type: ignore

        else:

            @functools.wraps(func)
            def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
                with _get_tracer().start_as_current_span(
                    span_name, attributes=start_attributes()
                ) as span:
                    if capture_input:
                        _set_input(span, args, kwargs, func)

                    try:
                        result = func(*args, **kwargs)
                        if capture_output and result is not None:
                            _set_output(span, result)
                        return result
                    except Exception as e:
                        span.set_status(Status(StatusCode.ERROR, str(e)))
                        span.record_exception(e)
                        raise

            return sync_wrapper  # type: ignore

    return decorator


@contextlib.contextmanager
def start_segment(
    name: str,
    trace_id: str | None = None,
    headers: Mapping[str, str] | None = None,
    annotations: dict[str, Any] | None = None,
    metadata: dict[str, Any] | None = None,
) -> Iterator[trace.Span]:
    """Open a span that starts a new segment.

    The trace id comes from ``trace_id``, else from an ``X-Amzn-Trace-Id``
    entry in ``headers``, else a fresh one is generated.

    Example:
        with start_segment("handle_request", headers=request.headers):
            handle(request)
    """
    if not trace_id and headers is not None:
        header = trace_ids.from_headers(headers)
        if header is not None:
            trace_id = header.root
    if not trace_id:
        trace_id = trace_ids.new()

    attributes = _start_attributes(trace_id, annotations, metadata)
    with _get_tracer().start_as_current_span(name, attributes=attributes) as span:
        yield span


def _set_input(span: trace.Span, args: tuple, kwargs: dict, func: Callable) -> None:
    try:
        input_data = _capture_args(args, kwargs, func)
        set_span_attribute(span, SpanAttributes.METADATA_INPUT, input_data)
    except Exception as e:
        logger.debug(f"Failed to capture input: {e}")


def _set_output(span: trace.Span, result: Any) -> None:
    """Set output attribute on span."""
    try:
        output_data = {"result": serialize_value(result)}
        set_span_attribute(span, SpanAttributes.METADATA_OUTPUT, output_data)
    except Exception as e:
        logger.debug(f"Failed to capture output: {e}")


def _capture_args(args: tuple, kwargs: dict, func: Callable) -> dict[str, Any]:
    """Capture function arguments as a dictionary."""
    sig = inspect.signature(func)
    bound = sig.bind(*args, **kwargs)
    bound.apply_defaults()
    return {k: serialize_value(v) for k, v in bound.arguments.items()}
