"""
Tracing for formval validation runs, built on the OpenAI Agents SDK tracer.

Every ``Form.validate()`` call opens a trace; the pipeline records one custom
span per field and one per executed step. Only local processors are
installed: ``setup_tracing()`` replaces the SDK's default remote exporter, so
nothing leaves the process.

Example:
    >>> from formval.tracing import setup_tracing
    >>> setup_tracing(console=True, verbose=True)
    >>> # Now every validation run prints its trace
"""

import json
from collections.abc import AsyncGenerator, Iterator
from contextlib import asynccontextmanager, contextmanager
from datetime import datetime
from typing import Any

from agents import set_tracing_disabled, trace
from agents.tracing import (
    Span,
    Trace,
    TracingProcessor,
    custom_span,
    get_current_trace,
    set_trace_processors,
)
from agents.tracing.processor_interface import TracingExporter
from agents.tracing.processors import BatchTraceProcessor


def _duration_ms(span: Span[Any]) -> float | None:
    if not span.started_at or not span.ended_at:
        return None
    started = datetime.fromisoformat(span.started_at)
    ended = datetime.fromisoformat(span.ended_at)
    return (ended - started).total_seconds() * 1000


class ConsoleTracingProcessor(TracingProcessor):
    """
    A simple tracing processor that prints traces to the console.

    Useful for development and debugging.
    """

    def __init__(self, verbose: bool = False):
        self.verbose = verbose

    def on_trace_start(self, trace: Trace) -> None:
        print(f"\n[TRACE START] {trace.name} (ID: {trace.trace_id[:8]}...)")

    def on_trace_end(self, trace: Trace) -> None:
        print(f"[TRACE END] {trace.name}")

    def on_span_start(self, span: Span[Any]) -> None:
        pass

    def on_span_end(self, span: Span[Any]) -> None:
        if self.verbose:
            data = span.span_data.export()
            duration = _duration_ms(span)
            timing = f" ({duration:.2f} ms)" if duration is not None else ""
            print(f"  ├─ [SPAN] {data.get('name')} {data.get('data')}{timing}")

    def shutdown(self) -> None:
        pass

    def force_flush(self) -> None:
        pass


class JsonLinesExporter(TracingExporter):
    """Appends every exported trace and span as one JSON line."""

    def __init__(self, file_path: str = "traces.jsonl"):
        self.file_path = file_path

    def export(self, items: list[Trace | Span[Any]]) -> None:
        lines = []
        for item in items:
            record = item.export()
            if record:
                lines.append(json.dumps(record, default=repr))
        if not lines:
            return
        with open(self.file_path, "a") as f:
            f.write("\n".join(lines) + "\n")


class FileTracingProcessor(BatchTraceProcessor):
    """
    Writes traces and spans to a JSON-lines file.

    Items are queued and written from the SDK's background export thread, so
    validation never waits on the file. Call ``flush_tracing()`` to write
    everything queued so far.
    """

    def __init__(self, file_path: str = "traces.jsonl"):
        super().__init__(exporter=JsonLinesExporter(file_path))
        self.file_path = file_path


_processors: list[TracingProcessor] = []
_enabled = False


def _install() -> None:
    set_trace_processors(list(_processors))
    set_tracing_disabled(not is_tracing_enabled())


def setup_tracing(
    enabled: bool = True,
    console: bool = True,
    verbose: bool = False,
    file_path: str | None = None,
) -> None:
    """
    Configure tracing for formval.

    Args:
        enabled: Whether tracing is enabled.
        console: Whether to print traces to console.
        verbose: Whether to print every span.
        file_path: Optional file path to write traces to.
    """
    global _enabled
    for processor in _processors:
        processor.shutdown()
    _processors.clear()

    _enabled = enabled
    if enabled:
        if console:
            _processors.append(ConsoleTracingProcessor(verbose=verbose))
        if file_path:
            _processors.append(FileTracingProcessor(file_path=file_path))

    _install()


def add_trace_processor(processor: TracingProcessor) -> None:
    """Register an extra processor and switch tracing on."""
    global _enabled
    _processors.append(processor)
    _enabled = True
    _install()


def disable_tracing() -> None:
    """Disable all tracing."""
    global _enabled
    _enabled = False
    set_tracing_disabled(True)


def enable_tracing() -> None:
    """Enable tracing with the processors already registered."""
    global _enabled
    _enabled = True
    _install()


def flush_tracing() -> None:
    """Hand everything buffered so far to the processors' outputs."""
    for processor in _processors:
        processor.force_flush()


def is_tracing_enabled() -> bool:
    return _enabled and bool(_processors)


@asynccontextmanager
async def traced_operation(
    name: str,
    metadata: dict | None = None,
) -> AsyncGenerator[Trace | None, None]:
    """
    Context manager for tracing one operation, e.g. a form validation.

    Example:
        >>> async with traced_operation("form_validation"):
        ...     result = await form.validate()
    """
    if not is_tracing_enabled():
        yield None
        return

    # Trace metadata is exported as strings.
    tags = {key: str(value) for key, value in (metadata or {}).items() if value is not None}
    with trace(name, metadata=tags) as current:
        yield current


@contextmanager
def span(name: str, **data: Any) -> Iterator[Span[Any] | None]:
    """
    Record a custom span inside the current trace; a no-op outside of one.

    The span's ``span_data.data`` dict may be updated before the block ends.
    """
    if not is_tracing_enabled() or get_current_trace() is None:
        yield None
        return

    with custom_span(name, data=dict(data)) as current:
        yield current
