from __future__ import annotations as _annotations

import pytest
from inline_snapshot import snapshot

from tracing_matchers import Tracer
from tracing_matchers._utils import UNSPECIFIED, render_mapping, render_value
from tracing_matchers.predicates import Predicate, PredicateKind, PredicateSet, SpanState
from tracing_matchers.rendering import (
    description,
    expected_clause,
    failure_message,
    negated_failure_message,
    render_clauses,
    render_predicate,
    render_span,
)


@pytest.mark.parametrize(
    'predicate,clause',
    [
        pytest.param(Predicate(PredicateKind.STATE, SpanState.IN_PROGRESS), 'started', id='in-progress'),
        pytest.param(Predicate(PredicateKind.STATE, SpanState.FINISHED), 'finished', id='finished'),
        pytest.param(Predicate(PredicateKind.TAG), 'with tags', id='any-tag'),
        pytest.param(Predicate(PredicateKind.LOG, {'event': 'test'}), 'with log entry {"event"=>"test"}', id='log'),
        pytest.param(Predicate(PredicateKind.BAGGAGE, UNSPECIFIED), 'with baggage', id='any-baggage'),
        pytest.param(Predicate(PredicateKind.PARENT), 'with a parent', id='any-parent'),
        pytest.param(
            Predicate(PredicateKind.PARENT, 'P'), 'with a span with operation name "P" as the parent', id='parent'
        ),
        pytest.param(Predicate(PredicateKind.FOLLOWS, 'F'), 'follow after a span with operation name "F"', id='follows'),
    ],
)
def test_render_predicate(predicate: Predicate, clause: str):
    assert render_predicate(predicate) == clause


def test_mapping_literals():
    assert render_mapping({'tag': 'value'}) == '{"tag"=>"value"}'
    assert render_mapping({'b': 1, 'a': None, 'c': True}) == '{"a"=>null, "b"=>1, "c"=>true}'
    assert render_value('quote "me"') == '"quote \\"me\\""'


def test_clauses_follow_canonical_order():
    predicates = PredicateSet()
    predicates.set(PredicateKind.FOLLOWS, 'F')
    predicates.set(PredicateKind.BAGGAGE, {'b': 'v'})
    predicates.set(PredicateKind.STATE, SpanState.FINISHED)
    predicates.set(PredicateKind.TAG, {'t': 'v'})

    assert render_clauses('X', predicates) == [
        'finished',
        'span',
        'with operation name "X"',
        'with tags {"t"=>"v"}',
        'with baggage {"b"=>"v"}',
        'follow after a span with operation name "F"',
    ]
    assert expected_clause(None, PredicateSet()) == 'a span'
    assert description(None, PredicateSet()) == 'should have a span'


def test_render_span(tracer: Tracer):
    root = tracer.start_span('root').finish()
    child = tracer.start_span('child', child_of=root)

    assert render_span(root) == 'Span(operation_name=root, in_progress=false, parent=none)'
    assert render_span(child) == 'Span(operation_name=child, in_progress=true, parent=root)'


def test_failure_message_without_spans():
    predicates = PredicateSet()
    predicates.set(PredicateKind.LOG)
    assert failure_message('X', predicates, []) == snapshot(
        'expected a span with operation name "X" with log entry, but no spans were recorded'
    )


def test_failure_message_candidates_default_limit(tracer: Tracer):
    for _ in range(5):
        tracer.start_span('X')
    predicates = PredicateSet()
    predicates.set(PredicateKind.TAG)

    assert failure_message('X', predicates, tracer.spans, {'max_candidates': None}).count('unmet with tags') == 5
    assert failure_message('X', predicates, tracer.spans).count('unmet with tags') == 3
    assert failure_message('X', predicates, tracer.spans).endswith('- ... and 2 more')


def test_negated_failure_message(tracer: Tracer):
    span = tracer.start_span('X')
    assert negated_failure_message('X', PredicateSet(), span) == snapshot(
        'expected not a span with operation name "X", but found Span(operation_name=X, in_progress=true, parent=none)'
    )
    assert negated_failure_message(None, PredicateSet(), None) == 'expected not a span'
