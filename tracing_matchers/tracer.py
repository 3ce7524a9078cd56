"""An in-memory tracer which records every span it starts, for use in tests."""

from __future__ import annotations as _annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any

from .exceptions import UserError

__all__ = 'LogEntry', 'Span', 'Tracer'


def _now() -> datetime:
    return datetime.now(tz=timezone.utc)


def _utc(instant: datetime | None) -> datetime:
    """Default to now, and read naive datetimes as UTC so every recorded instant is comparable."""
    if instant is None:
        return _now()
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant


@dataclass(frozen=True)
class LogEntry:
    """A timestamped set of fields logged on a span."""

    timestamp: datetime
    fields: Mapping[str, Any]


class Span:
    """A span recorded by [`Tracer`][tracing_matchers.tracer.Tracer].

    Baggage set on a span is visible on every span started as its child afterwards.
    """

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------
    def __init__(self, operation_name: str, parent: Span | None = None, start_time: datetime | None = None):
        self._operation_name = operation_name
        self._parent = parent
        self._start_time = _utc(start_time)
        self._end_time: datetime | None = None
        self._tags: dict[str, Any] = {}
        self._logs: list[LogEntry] = []
        self._baggage: dict[str, Any] = dict(parent.baggage) if parent is not None else {}

    # -------------------------------------------------------------------------
    # Recording
    # -------------------------------------------------------------------------
    def set_tag(self, key: str, value: Any) -> Span:
        self._tags[key] = value
        return self

    def set_baggage_item(self, key: str, value: Any) -> Span:
        self._baggage[key] = value
        return self

    def log(self, timestamp: datetime | None = None, **fields: Any) -> Span:
        """Record a log entry with the given fields, e.g. `span.log(event='retry', attempt=2)`."""
        self._logs.append(LogEntry(timestamp=_utc(timestamp), fields=fields))
        return self

    def finish(self, end_time: datetime | None = None) -> Span:
        if self._end_time is not None:
            raise UserError(f'Span {self._operation_name!r} has already been finished')
        self._end_time = _utc(end_time)
        return self

    # -------------------------------------------------------------------------
    # Read-only view
    # -------------------------------------------------------------------------
    @property
    def operation_name(self) -> str:
        return self._operation_name

    @property
    def parent(self) -> Span | None:
        return self._parent

    @property
    def in_progress(self) -> bool:
        return self._end_time is None

    @property
    def start_time(self) -> datetime:
        return self._start_time

    @property
    def end_time(self) -> datetime | None:
        return self._end_time

    @property
    def tags(self) -> Mapping[str, Any]:
        return MappingProxyType(self._tags)

    @property
    def logs(self) -> list[LogEntry]:
        return list(self._logs)

    @property
    def baggage(self) -> Mapping[str, Any]:
        return MappingProxyType(self._baggage)

    def __repr__(self) -> str:
        return f'<Span operation_name={self._operation_name!r} in_progress={self.in_progress}>'


@dataclass
class Tracer:
    """Records spans in the order they were started."""

    spans: list[Span] = field(default_factory=list)

    def start_span(
        self, operation_name: str, *, child_of: Span | None = None, start_time: datetime | None = None
    ) -> Span:
        """Start and record a new span.

        Args:
            operation_name: The name of the unit of work.
            child_of: The parent span, if any.
            start_time: Overrides the start time, defaults to now.

        Returns:
            The new span, in progress until `finish()` is called on it.
        """
        if child_of is not None and not isinstance(child_of, Span):
            raise UserError(f'`child_of` must be a Span, got {type(child_of).__name__}')
        span = Span(operation_name, parent=child_of, start_time=start_time)
        self.spans.append(span)
        return span

    @property
    def finished_spans(self) -> list[Span]:
        return [span for span in self.spans if not span.in_progress]

    def spans_named(self, operation_name: str) -> list[Span]:
        return [span for span in self.spans if span.operation_name == operation_name]

    def clear(self) -> None:
        self.spans.clear()
