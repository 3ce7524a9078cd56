"""The read-only view of recorded spans that matchers query.

Any tracer can be asserted against as long as its spans expose these attributes; the in-memory
[`Tracer`][tracing_matchers.tracer.Tracer] is one such implementation.
"""

from __future__ import annotations as _annotations

from collections.abc import Iterable, Mapping, Sequence
from datetime import datetime
from typing import Any, Union

from typing_extensions import Protocol, TypeAlias, runtime_checkable

__all__ = 'LogEntryLike', 'SpanLike', 'SpanSource', 'SpanCollection', 'all_spans', 'spans_named'


class LogEntryLike(Protocol):
    @property
    def fields(self) -> Mapping[str, Any]: ...


class SpanLike(Protocol):
    """A recorded span, as seen by a matcher."""

    @property
    def operation_name(self) -> str: ...

    @property
    def in_progress(self) -> bool: ...

    @property
    def tags(self) -> Mapping[str, Any]: ...

    @property
    def logs(self) -> Sequence[LogEntryLike]: ...

    @property
    def baggage(self) -> Mapping[str, Any]: ...

    @property
    def parent(self) -> SpanLike | None: ...

    @property
    def start_time(self) -> datetime: ...

    @property
    def end_time(self) -> datetime | None: ...


@runtime_checkable
class SpanSource(Protocol):
    """Anything holding recorded spans in creation order, typically a tracer."""

    @property
    def spans(self) -> Sequence[SpanLike]: ...


SpanCollection: TypeAlias = Union[SpanSource, Iterable[SpanLike]]


def all_spans(source: SpanCollection) -> list[SpanLike]:
    """Return every span of a tracer or iterable of spans, in collection order."""
    if isinstance(source, SpanSource):
        return list(source.spans)
    return list(source)


def spans_named(spans: Iterable[SpanLike], operation_name: str) -> list[SpanLike]:
    return [span for span in spans if span.operation_name == operation_name]
