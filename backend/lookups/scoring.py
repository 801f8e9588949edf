"""Heuristic risk scores for lookup profiles.

Both scores are bounded integers 0-100, higher = riskier:

- suspicion: how likely an actor is browsing records they have no business
  seeing (third-party share, target diversity, single-day bursts, unresolved
  lookups)
- exposure: how widely a subject's record has been viewed (distinct viewers
  weigh much more than raw volume)
"""

from __future__ import annotations

import math
from typing import Iterable


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def clamp_score(value: float) -> int:
    """Round to the nearest integer (halves up) and clamp to [0, 100]."""
    return max(0, min(100, _round_half_up(value)))


def burst_points(max_events_per_day: int) -> int:
    if max_events_per_day > 10:
        return 10
    if max_events_per_day > 5:
        return 5
    return 0


def volume_points(total_accesses: int) -> int:
    if total_accesses > 10:
        return 15
    if total_accesses > 5:
        return 10
    if total_accesses > 2:
        return 5
    return 0


def suspicion_score(
    other_pct: float,
    distinct_subject_count: int,
    events_per_day: Iterable[int],
    unknown_count: int,
) -> int:
    """Suspicion score for one actor.

    Args:
        other_pct: Share of third-party lookups, 0-100.
        distinct_subject_count: Known subjects the actor looked up.
        events_per_day: Lookup counts per active calendar day.
        unknown_count: Lookups of unresolved identities.
    """
    max_per_day = max(events_per_day, default=0)
    score = (
        other_pct / 10
        + min(distinct_subject_count * 2, 20)
        + burst_points(max_per_day)
        + unknown_count * 0.5
    )
    return clamp_score(score)


def exposure_score(other_access_pct: float, distinct_actor_count: int, total_accesses: int) -> int:
    """Exposure score for one subject."""
    score = (
        other_access_pct / 10
        + min(distinct_actor_count * 5, 50)
        + volume_points(total_accesses)
    )
    return clamp_score(score)
