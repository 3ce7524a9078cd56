"""Rendering of matcher descriptions and failure diagnostics.

Every message is built from [`render_clauses`][tracing_matchers.rendering.render_clauses], so the description of an
assertion and its failure message always describe the same conditions, differing only in their prefix.
"""

from __future__ import annotations as _annotations

from collections.abc import Sequence

from ._utils import is_specified, quote, render_mapping, render_value
from .predicates import Predicate, PredicateKind, PredicateSet, SpanState, unmet_predicates
from .settings import DEFAULT_SETTINGS, MatcherSettings
from .spans import SpanLike, spans_named

__all__ = (
    'render_predicate',
    'render_clauses',
    'expected_clause',
    'description',
    'failure_message',
    'negated_failure_message',
    'render_span',
)

DESCRIPTION_PREFIX = 'should have '
FAILURE_PREFIX = 'expected '
NEGATED_FAILURE_PREFIX = 'expected not '

_NOUNS = {
    PredicateKind.TAG: 'tags',
    PredicateKind.LOG: 'log entry',
    PredicateKind.BAGGAGE: 'baggage',
}


def render_predicate(predicate: Predicate) -> str:
    """Render the clause for a single predicate, e.g. `with tags {"tag"=>"value"}`."""
    kind, payload = predicate.kind, predicate.payload
    if kind is PredicateKind.STATE:
        return 'started' if payload is SpanState.IN_PROGRESS else 'finished'
    elif kind in _NOUNS:
        clause = f'with {_NOUNS[kind]}'
        return f'{clause} {render_mapping(payload)}' if is_specified(payload) else clause  # type: ignore[arg-type]
    elif kind is PredicateKind.PARENT:
        if is_specified(payload):
            return f'with a span with operation name {quote(payload)} as the parent'  # type: ignore[arg-type]
        return 'with a parent'
    else:
        return f'follow after a span with operation name {quote(payload)}'  # type: ignore[arg-type]


def render_clauses(operation_name: str | None, predicates: PredicateSet) -> list[str]:
    """Render the clauses describing a matcher, in canonical order.

    The lifecycle state comes first as an adjective, then the noun, the operation name and the remaining
    predicates in [`PredicateKind`][tracing_matchers.predicates.PredicateKind] order.
    """
    clauses: list[str] = []
    rest: list[str] = []
    for predicate in predicates.canonical():
        (clauses if predicate.kind is PredicateKind.STATE else rest).append(render_predicate(predicate))
    clauses.append('span')
    if operation_name is not None:
        clauses.append(f'with operation name {quote(operation_name)}')
    return clauses + rest


def expected_clause(operation_name: str | None, predicates: PredicateSet) -> str:
    return 'a ' + ' '.join(render_clauses(operation_name, predicates))


def description(operation_name: str | None, predicates: PredicateSet) -> str:
    return DESCRIPTION_PREFIX + expected_clause(operation_name, predicates)


def render_span(span: SpanLike) -> str:
    """Summarise a span for suggestions, e.g. `Span(operation_name=test, in_progress=true, parent=none)`."""
    parent = span.parent.operation_name if span.parent is not None else 'none'
    return f'Span(operation_name={span.operation_name}, in_progress={render_value(span.in_progress)}, parent={parent})'


def _truncated(lines: list[str], limit: int | None) -> list[str]:
    if limit is None or len(lines) <= limit:
        return lines
    return lines[:limit] + [f'... and {len(lines) - limit} more']


def _block(title: str, lines: list[str]) -> str:
    return '\n'.join([f'\n  {title}:', *(f'    - {line}' for line in lines)])


def failure_message(
    operation_name: str | None,
    predicates: PredicateSet,
    spans: Sequence[SpanLike],
    settings: MatcherSettings | None = None,
) -> str:
    """Render the diagnostic for a matcher that found no matching span in `spans`.

    Besides the expected clause, this explains why nothing qualified: when no span carries the requested
    operation name every recorded span is suggested, otherwise the candidates are ranked by how few
    conditions they miss.
    """
    settings = settings or DEFAULT_SETTINGS
    message = FAILURE_PREFIX + expected_clause(operation_name, predicates)
    if not spans:
        return message + ', but no spans were recorded'

    if operation_name is None:
        candidates = list(spans)
    else:
        candidates = spans_named(spans, operation_name)
        if not candidates:
            suggestions = _truncated([render_span(span) for span in spans], settings.get('max_suggestions'))
            return message + f', but no span has operation name {quote(operation_name)}' + _block(
                'suggestions', suggestions
            )

    message += ', but no span satisfied every condition'
    if not settings.get('include_candidates', True):
        return message

    # `sorted` is stable, so candidates missing the same number of conditions stay in collection order
    ranked = sorted(
        ((span, unmet_predicates(predicates, span, spans)) for span in candidates),
        key=lambda pair: len(pair[1]),
    )
    lines = [
        f'{render_span(span)}: unmet {", ".join(render_predicate(predicate) for predicate in unmet)}'
        if unmet
        else f'{render_span(span)}: matches'
        for span, unmet in ranked
    ]
    return message + _block('closest candidates', _truncated(lines, settings.get('max_candidates', 3)))


def negated_failure_message(operation_name: str | None, predicates: PredicateSet, matched: SpanLike | None) -> str:
    message = NEGATED_FAILURE_PREFIX + expected_clause(operation_name, predicates)
    if matched is not None:
        message += f', but found {render_span(matched)}'
    return message
