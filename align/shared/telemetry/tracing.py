"""Helpers for adding detail to the current OpenTelemetry span"""
from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode


def get_tracer(name: str) -> trace.Tracer:
    """
    Get tracer for creating custom spans

    Usage:
        tracer = get_tracer(__name__)
        with tracer.start_as_current_span("operation_name"):
            # Your code here
            pass
    """
    return trace.get_tracer(name)


def add_span_attributes(**attributes):
    """
    Add attributes to the current span

    Usage:
        add_span_attributes(session_kind="vent", fallback=True)
    """
    span = trace.get_current_span()
    if span:
        for key, value in attributes.items():
            span.set_attribute(key, value)


def add_span_event(name: str, attributes: dict | None = None):
    """
    Add an event to the current span

    Usage:
        add_span_event("fallback_used", {"reason": "timeout"})
    """
    span = trace.get_current_span()
    if span:
        span.add_event(name, attributes=attributes or {})


def set_span_error(exception: Exception):
    """Mark the current span as error and record the exception"""
    span = trace.get_current_span()
    if span:
        span.set_status(Status(StatusCode.ERROR, str(exception)))
        span.record_exception(exception)


def get_trace_id() -> str | None:
    """
    Get the current trace ID

    Returns:
        Trace ID as hex string or None if no active span
    """
    span = trace.get_current_span()
    if span:
        trace_id = span.get_span_context().trace_id
        if trace_id:
            return format(trace_id, "032x")  # Convert to 32-char hex string
    return None
