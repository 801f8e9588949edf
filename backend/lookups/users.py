"""Per-user behavior profiles.

Folds lookup events into one UserProfile per querying user (actor_id),
scored with the suspicion heuristic and ranked riskiest first.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

from .parser import LookupEvent, chronological_bounds
from .scoring import suspicion_score

log = logging.getLogger("recibowatch.lookups.users")


@dataclass(frozen=True)
class UserProfile:
    """Lookup behavior of a single user over the uploaded dataset."""

    actor_id: str
    actor_badge_number: str
    actor_national_id: str
    actor_name: str
    total: int = 0
    self_count: int = 0
    other_count: int = 0
    unknown_count: int = 0
    # Third-party lookups only; own record and unresolved identities excluded
    distinct_subjects: Tuple[str, ...] = ()
    first_seen: str = ""
    last_seen: str = ""
    events_per_day: Dict[str, int] = field(default_factory=dict)
    avg_per_active_day: float = 0.0
    other_pct: float = 0.0
    suspicion_score: int = 0

    @property
    def distinct_subject_count(self) -> int:
        return len(self.distinct_subjects)

    @property
    def active_days(self) -> int:
        return len(self.events_per_day)

    @property
    def max_events_per_day(self) -> int:
        return max(self.events_per_day.values(), default=0)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "actor_id": self.actor_id,
            "actor_badge_number": self.actor_badge_number,
            "actor_national_id": self.actor_national_id,
            "actor_name": self.actor_name,
            "total": self.total,
            "self_count": self.self_count,
            "other_count": self.other_count,
            "unknown_count": self.unknown_count,
            "distinct_subjects": list(self.distinct_subjects),
            "distinct_subject_count": self.distinct_subject_count,
            "first_seen": self.first_seen,
            "last_seen": self.last_seen,
            "active_days": self.active_days,
            "events_per_day": dict(self.events_per_day),
            "avg_per_active_day": round(self.avg_per_active_day, 2),
            "other_pct": round(self.other_pct, 1),
            "suspicion_score": self.suspicion_score,
        }


class _UserAccumulator:
    """Mutable running totals for one actor; lives only inside aggregate_users."""

    def __init__(self, first: LookupEvent):
        self.first = first
        self.events: List[LookupEvent] = []
        self.counts: Dict[str, int] = defaultdict(int)
        self.subjects: set = set()
        self.per_day: Dict[str, int] = defaultdict(int)

    def add(self, ev: LookupEvent) -> None:
        self.events.append(ev)
        self.counts[ev.kind] += 1
        self.per_day[ev.day] += 1
        if ev.kind == "other":
            self.subjects.add(ev.subject_label)

    def build(self) -> UserProfile:
        total = len(self.events)
        other = self.counts["other"]
        first_seen, last_seen = chronological_bounds(self.events)
        per_day = dict(sorted(self.per_day.items()))
        # Every actor has at least one event, hence at least one active day.
        other_pct = other / total * 100
        subjects = tuple(sorted(self.subjects))
        return UserProfile(
            actor_id=self.first.actor_id,
            actor_badge_number=self.first.actor_badge_number,
            actor_national_id=self.first.actor_national_id,
            actor_name=self.first.actor_name,
            total=total,
            self_count=self.counts["self"],
            other_count=other,
            unknown_count=self.counts["unknown"],
            distinct_subjects=subjects,
            first_seen=first_seen,
            last_seen=last_seen,
            events_per_day=per_day,
            avg_per_active_day=total / len(per_day),
            other_pct=other_pct,
            suspicion_score=suspicion_score(
                other_pct, len(subjects), per_day.values(), self.counts["unknown"],
            ),
        )


def aggregate_users(events: List[LookupEvent]) -> List[UserProfile]:
    """Build one profile per actor, sorted by suspicion score (highest first).

    Ties keep the order in which actors were first encountered.
    """
    acc: Dict[str, _UserAccumulator] = {}
    for ev in events:
        if ev.actor_id not in acc:
            acc[ev.actor_id] = _UserAccumulator(ev)
        acc[ev.actor_id].add(ev)

    profiles = [a.build() for a in acc.values()]
    profiles.sort(key=lambda p: p.suspicion_score, reverse=True)
    log.debug("Aggregated %d events into %d user profiles", len(events), len(profiles))
    return profiles
