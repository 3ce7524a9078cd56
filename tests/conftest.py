from __future__ import annotations as _annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import pytest

from tracing_matchers import Span, Tracer
from tracing_matchers.pytest_plugin import tracer  # noqa: F401  # also registered by the pytest11 entry point once installed

__all__ = 'at', 'Environment', 'PREVIOUS', 'IN_PROGRESS', 'FINISHED', 'PARENT', 'CHILD'

PREVIOUS = 'previous'
IN_PROGRESS = 'in progress'
FINISHED = 'finished'
PARENT = 'Parent Operation Name'
CHILD = 'Child Operation Name'

_EPOCH = datetime(2024, 1, 1, tzinfo=timezone.utc)


def at(seconds: float) -> datetime:
    """A fixed instant, so ordering between spans never depends on the clock."""
    return _EPOCH + timedelta(seconds=seconds)


@dataclass
class Environment:
    tracer: Tracer
    previous: Span
    in_progress: Span
    finished: Span
    parent: Span
    child: Span


@pytest.fixture
def environment(tracer: Tracer) -> Environment:
    """A tracer holding one span of every shape the matchers care about.

    The child is tagged, logged, carries baggage, is parented and starts after `previous` finished.
    """
    previous = tracer.start_span(PREVIOUS, start_time=at(0)).finish(at(1))
    in_progress = tracer.start_span(IN_PROGRESS, start_time=at(2))
    finished = tracer.start_span(FINISHED, start_time=at(3)).finish(at(4))

    parent = tracer.start_span(PARENT, start_time=at(5))
    child = tracer.start_span(CHILD, child_of=parent, start_time=at(6))
    child.set_tag('tag', 'value')
    child.set_baggage_item('baggage_item', 'value')
    child.log(event='test', field1='value')
    child.finish(at(7))
    parent.finish(at(8))

    return Environment(tracer, previous, in_progress, finished, parent, child)
