from __future__ import annotations as _annotations

from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Union

from typing_extensions import TypeAlias

from ._utils import UNSPECIFIED, Unspecified, is_specified
from .spans import SpanLike

__all__ = (
    'PredicateKind',
    'SpanState',
    'Predicate',
    'PredicateSet',
    'evaluate',
    'satisfies',
    'unmet_predicates',
)


class PredicateKind(str, Enum):
    """The kinds of condition a span may be asked to satisfy.

    Members are declared in the order their clauses are rendered.
    """

    STATE = 'state'
    TAG = 'tag'
    LOG = 'log'
    BAGGAGE = 'baggage'
    PARENT = 'parent'
    FOLLOWS = 'follows'


class SpanState(str, Enum):
    IN_PROGRESS = 'in_progress'
    FINISHED = 'finished'


Payload: TypeAlias = Union[SpanState, Mapping[str, Any], str, Unspecified]


@dataclass(frozen=True)
class Predicate:
    kind: PredicateKind
    payload: Payload = UNSPECIFIED


class PredicateSet:
    """At most one predicate per kind, remembering the order kinds were first set in."""

    def __init__(self):
        self._by_kind: dict[PredicateKind, Predicate] = {}

    def set(self, kind: PredicateKind, payload: Payload = UNSPECIFIED) -> None:
        """Set the predicate for `kind`, replacing any previous one."""
        self._by_kind[kind] = Predicate(kind, payload)

    def has_kind(self, kind: PredicateKind) -> bool:
        return kind in self._by_kind

    def get(self, kind: PredicateKind) -> Payload | None:
        predicate = self._by_kind.get(kind)
        return predicate.payload if predicate is not None else None

    def canonical(self) -> list[Predicate]:
        """Return the predicates in rendering order, regardless of the order they were set in."""
        return [self._by_kind[kind] for kind in PredicateKind if kind in self._by_kind]

    def __iter__(self) -> Iterator[Predicate]:
        return iter(list(self._by_kind.values()))

    def __len__(self) -> int:
        return len(self._by_kind)

    def __repr__(self) -> str:
        return f'PredicateSet({list(self)!r})'


# -------------------------------------------------------------------------
# Evaluation, one function per predicate kind
# -------------------------------------------------------------------------
def _same_value(actual: Any, expected: Any) -> bool:
    # types must agree too, a span tagged `True` does not satisfy a required `1`
    return type(actual) is type(expected) and actual == expected


def _contains(mapping: Mapping[str, Any], required: Mapping[str, Any]) -> bool:
    return all(key in mapping and _same_value(mapping[key], value) for key, value in required.items())


def _check_state(payload: Payload, span: SpanLike, spans: Sequence[SpanLike]) -> bool:
    if payload is SpanState.IN_PROGRESS:
        return span.in_progress
    return not span.in_progress


def _check_tag(payload: Payload, span: SpanLike, spans: Sequence[SpanLike]) -> bool:
    if is_specified(payload):
        return _contains(span.tags, payload)
    return bool(span.tags)


def _check_log(payload: Payload, span: SpanLike, spans: Sequence[SpanLike]) -> bool:
    if is_specified(payload):
        return any(_contains(entry.fields, payload) for entry in span.logs)
    return bool(span.logs)


def _check_baggage(payload: Payload, span: SpanLike, spans: Sequence[SpanLike]) -> bool:
    if is_specified(payload):
        return _contains(span.baggage, payload)
    return bool(span.baggage)


def _check_parent(payload: Payload, span: SpanLike, spans: Sequence[SpanLike]) -> bool:
    parent = span.parent
    if parent is None:
        return False
    return not is_specified(payload) or parent.operation_name == payload


def _check_follows(payload: Payload, span: SpanLike, spans: Sequence[SpanLike]) -> bool:
    # the preceding span is looked up in the whole collection, not just the candidates
    for other in spans:
        if other is span or other.operation_name != payload or other.end_time is None:
            continue
        if span.start_time >= other.end_time:
            return True
    return False


_CHECKS: dict[PredicateKind, Callable[[Payload, SpanLike, Sequence[SpanLike]], bool]] = {
    PredicateKind.STATE: _check_state,
    PredicateKind.TAG: _check_tag,
    PredicateKind.LOG: _check_log,
    PredicateKind.BAGGAGE: _check_baggage,
    PredicateKind.PARENT: _check_parent,
    PredicateKind.FOLLOWS: _check_follows,
}


def satisfies(predicate: Predicate, span: SpanLike, spans: Sequence[SpanLike]) -> bool:
    """Check a single predicate against a single span; `spans` is the whole recorded collection."""
    return _CHECKS[predicate.kind](predicate.payload, span, spans)


def unmet_predicates(predicates: PredicateSet, span: SpanLike, spans: Sequence[SpanLike]) -> list[Predicate]:
    """Return the predicates `span` fails, in rendering order."""
    return [predicate for predicate in predicates.canonical() if not satisfies(predicate, span, spans)]


def evaluate(predicates: PredicateSet, candidates: Sequence[SpanLike], spans: Sequence[SpanLike]) -> SpanLike | None:
    """Return the first candidate satisfying every predicate, or `None` if there is none."""
    for candidate in candidates:
        if all(satisfies(predicate, candidate, spans) for predicate in predicates):
            return candidate
    return None
