from __future__ import annotations as _annotations

from typing_extensions import TypedDict

__all__ = 'MatcherSettings', 'DEFAULT_SETTINGS', 'merge_matcher_settings'


class MatcherSettings(TypedDict, total=False):
    """Settings to configure how a span matcher renders its failure diagnostics.

    Evaluation is never affected by these settings, only the length of the failure message.
    """

    max_suggestions: int | None
    """The maximum number of recorded spans listed when no span has the requested operation name.

    `None` lists every recorded span.
    """

    max_candidates: int | None
    """The maximum number of near-miss spans listed when candidates exist but none satisfies every condition.

    `None` lists every candidate.
    """

    include_candidates: bool
    """Whether to list near-miss spans at all."""


DEFAULT_SETTINGS: MatcherSettings = {
    'max_suggestions': None,
    'max_candidates': 3,
    'include_candidates': True,
}


def merge_matcher_settings(base: MatcherSettings | None, overrides: MatcherSettings | None) -> MatcherSettings | None:
    """Merge two sets of matcher settings, preferring the overrides.

    A common use case is: merge_matcher_settings(DEFAULT_SETTINGS, <per-assertion settings>)
    """
    if base and overrides:
        return base | overrides
    else:
        return base or overrides
