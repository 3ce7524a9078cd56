from __future__ import annotations as _annotations

from collections.abc import Mapping
from typing import Any

import logfire_api
from pydantic import TypeAdapter, ValidationError

from . import rendering
from ._utils import UNSPECIFIED
from .exceptions import UserError
from .predicates import Payload, PredicateKind, PredicateSet, SpanState, evaluate
from .settings import DEFAULT_SETTINGS, MatcherSettings, merge_matcher_settings
from .spans import SpanCollection, SpanLike, all_spans, spans_named

__all__ = 'HaveSpan', 'have_span', 'assert_that', 'assert_that_not'

_logfire = logfire_api.Logfire(otel_scope='tracing-matchers')

_mapping_adapter = TypeAdapter(dict[str, Any])


def _operation_name(method: str, operation_name: Any) -> str:
    if not isinstance(operation_name, str) or not operation_name:
        raise UserError(f'`{method}` expects a non-empty operation name, got {operation_name!r}')
    return operation_name


def _mapping_payload(method: str, args: tuple[Any, ...], kwargs: dict[str, Any]) -> Payload:
    """Normalise the `()`, `(key, value)`, `(mapping)` and `(**fields)` call forms into one payload."""
    if not args and not kwargs:
        return UNSPECIFIED

    if len(args) == 2:
        mapping: dict[Any, Any] = {args[0]: args[1]}
    elif len(args) == 1:
        if not isinstance(args[0], Mapping):
            raise UserError(f'`{method}` expects a key and a value, or a mapping, got only {args[0]!r}')
        mapping = dict(args[0])
    elif not args:
        mapping = {}
    else:
        raise UserError(f'`{method}` expects a key and a value, or a mapping, got {len(args)} positional arguments')
    mapping.update(kwargs)

    if not mapping:
        raise UserError(f'`{method}` expects at least one key, call it without arguments to match any value')
    try:
        return _mapping_adapter.validate_python(mapping, strict=True)
    except ValidationError as e:
        raise UserError(f'`{method}` expects string keys: {e}') from e


class HaveSpan:
    """Asserts that a tracer recorded a span satisfying every configured condition.

    Conditions are added by chaining, and are only evaluated when [`matches`][tracing_matchers.matcher.HaveSpan.matches]
    is called:

    ```py
    from tracing_matchers import Tracer, assert_that, have_span

    tracer = Tracer()
    tracer.start_span('checkout').set_tag('user', 'alice').finish()

    assert_that(tracer, have_span('checkout').with_tag('user', 'alice').finished())
    ```

    Setting the same kind of condition twice keeps the last one, e.g. `.in_progress().finished()` asks for a
    finished span.
    """

    def __init__(self, operation_name: str | None = None, *, settings: MatcherSettings | None = None):
        if operation_name is not None:
            _operation_name('have_span', operation_name)
        self._operation_name = operation_name
        self._predicates = PredicateSet()
        self._settings = merge_matcher_settings(DEFAULT_SETTINGS, settings)
        self._spans: list[SpanLike] | None = None
        self._matched: SpanLike | None = None

    @property
    def operation_name(self) -> str | None:
        return self._operation_name

    @property
    def predicates(self) -> PredicateSet:
        return self._predicates

    @property
    def matched_span(self) -> SpanLike | None:
        """The first span which satisfied every condition during the last evaluation."""
        return self._matched

    # -------------------------------------------------------------------------
    # Lifecycle state
    # -------------------------------------------------------------------------
    def in_progress(self) -> HaveSpan:
        self._predicates.set(PredicateKind.STATE, SpanState.IN_PROGRESS)
        return self

    def started(self) -> HaveSpan:
        """Alias of [`in_progress`][tracing_matchers.matcher.HaveSpan.in_progress]."""
        return self.in_progress()

    def finished(self) -> HaveSpan:
        self._predicates.set(PredicateKind.STATE, SpanState.FINISHED)
        return self

    # -------------------------------------------------------------------------
    # Tags, logs and baggage
    # -------------------------------------------------------------------------
    def with_tag(self, *args: Any, **kwargs: Any) -> HaveSpan:
        """Require any tag when called without arguments, otherwise every given tag.

        `with_tag('tag', 'value')`, `with_tag({'tag': 'value'})` and `with_tag(tag='value')` are equivalent.
        """
        self._predicates.set(PredicateKind.TAG, _mapping_payload('with_tag', args, kwargs))
        return self

    def with_tags(self, *args: Any, **kwargs: Any) -> HaveSpan:
        self._predicates.set(PredicateKind.TAG, _mapping_payload('with_tags', args, kwargs))
        return self

    def with_log(self, *args: Any, **kwargs: Any) -> HaveSpan:
        """Require any log entry when called without arguments, otherwise one entry containing every given field."""
        self._predicates.set(PredicateKind.LOG, _mapping_payload('with_log', args, kwargs))
        return self

    def with_logs(self, *args: Any, **kwargs: Any) -> HaveSpan:
        self._predicates.set(PredicateKind.LOG, _mapping_payload('with_logs', args, kwargs))
        return self

    def with_baggage(self, *args: Any, **kwargs: Any) -> HaveSpan:
        self._predicates.set(PredicateKind.BAGGAGE, _mapping_payload('with_baggage', args, kwargs))
        return self

    # -------------------------------------------------------------------------
    # Relationships
    # -------------------------------------------------------------------------
    def with_parent(self) -> HaveSpan:
        self._predicates.set(PredicateKind.PARENT)
        return self

    def child_of(self, operation_name: str) -> HaveSpan:
        self._predicates.set(PredicateKind.PARENT, _operation_name('child_of', operation_name))
        return self

    def following_after(self, operation_name: str) -> HaveSpan:
        """Require the span to start no earlier than a finished span named `operation_name` ended."""
        self._predicates.set(PredicateKind.FOLLOWS, _operation_name('following_after', operation_name))
        return self

    # -------------------------------------------------------------------------
    # Assertion protocol
    # -------------------------------------------------------------------------
    def matches(self, source: SpanCollection) -> bool:
        """Evaluate every condition against the spans of a tracer, or an iterable of spans."""
        spans = all_spans(source)
        candidates = spans if self._operation_name is None else spans_named(spans, self._operation_name)
        self._spans = spans
        self._matched = evaluate(self._predicates, candidates, spans)
        _logfire.debug(
            'evaluated {expected}: {matched}',
            expected=rendering.expected_clause(self._operation_name, self._predicates),
            spans=len(spans),
            candidates=len(candidates),
            matched=self._matched is not None,
        )
        return self._matched is not None

    def description(self) -> str:
        return rendering.description(self._operation_name, self._predicates)

    def failure_message(self) -> str:
        return rendering.failure_message(self._operation_name, self._predicates, self._evaluated(), self._settings)

    def failure_message_when_negated(self) -> str:
        self._evaluated()
        return rendering.negated_failure_message(self._operation_name, self._predicates, self._matched)

    def _evaluated(self) -> list[SpanLike]:
        if self._spans is None:
            raise UserError('The matcher has not been evaluated yet, call `matches()` first')
        return self._spans

    def __repr__(self) -> str:
        return f'<HaveSpan {self.description()!r}>'


def have_span(operation_name: str | None = None, *, settings: MatcherSettings | None = None) -> HaveSpan:
    """Start building a span matcher, optionally only considering spans named `operation_name`.

    Args:
        operation_name: The exact operation name of the span, any name matches if omitted.
        settings: Overrides for how failure diagnostics are rendered.
    """
    return HaveSpan(operation_name, settings=settings)


def assert_that(source: SpanCollection, matcher: HaveSpan) -> SpanLike:
    """Assert `matcher` matches a span of `source`, returning the matched span.

    Raises:
        AssertionError: With the matcher's failure message if no span matches.
    """
    if not matcher.matches(source):
        raise AssertionError(matcher.failure_message())
    assert matcher.matched_span is not None
    return matcher.matched_span


def assert_that_not(source: SpanCollection, matcher: HaveSpan) -> None:
    """Assert no span of `source` matches `matcher`."""
    if matcher.matches(source):
        raise AssertionError(matcher.failure_message_when_negated())
