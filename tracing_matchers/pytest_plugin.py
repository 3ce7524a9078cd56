"""Pytest fixtures, registered through the `pytest11` entry point."""

from __future__ import annotations as _annotations

from collections.abc import Iterator

import pytest

from .tracer import Tracer


@pytest.fixture
def tracer() -> Iterator[Tracer]:
    """A fresh in-memory tracer, discarded after the test."""
    tracer = Tracer()
    yield tracer
    tracer.clear()
