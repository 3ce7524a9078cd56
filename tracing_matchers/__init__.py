"""Fluent assertions about the spans recorded by a tracer.

```py
from tracing_matchers import Tracer, assert_that, have_span

tracer = Tracer()
parent = tracer.start_span('Parent Operation Name')
tracer.start_span('Child Operation Name', child_of=parent).set_tag('tag', 'value').finish()

assert_that(tracer, have_span('Child Operation Name').with_tag('tag', 'value').child_of('Parent Operation Name'))
```
"""

from .exceptions import UserError
from .matcher import HaveSpan, assert_that, assert_that_not, have_span
from .predicates import PredicateKind, SpanState
from .settings import MatcherSettings
from .tracer import LogEntry, Span, Tracer

__all__ = (
    'have_span',
    'assert_that',
    'assert_that_not',
    'HaveSpan',
    'MatcherSettings',
    'PredicateKind',
    'SpanState',
    'Tracer',
    'Span',
    'LogEntry',
    'UserError',
)
