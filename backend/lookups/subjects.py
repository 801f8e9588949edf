"""Per-subject exposure profiles.

One SubjectProfile per looked-up national ID. Lookups of unresolved
identities are left out entirely: they have no reliable key to group on.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

from .parser import LookupEvent, chronological_bounds
from .scoring import exposure_score

log = logging.getLogger("recibowatch.lookups.subjects")


@dataclass(frozen=True)
class SubjectProfile:
    national_id: str
    last_name: str
    first_name: str
    total: int = 0
    self_accesses: int = 0
    other_accesses: int = 0
    # Users other than the record owner
    distinct_actors: Tuple[str, ...] = ()
    first_access: str = ""
    last_access: str = ""
    other_access_pct: float = 0.0
    exposure_score: int = 0

    @property
    def distinct_actor_count(self) -> int:
        return len(self.distinct_actors)

    @property
    def label(self) -> str:
        return f"{self.last_name} {self.first_name}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "national_id": self.national_id,
            "last_name": self.last_name,
            "first_name": self.first_name,
            "total": self.total,
            "self_accesses": self.self_accesses,
            "other_accesses": self.other_accesses,
            "distinct_actors": list(self.distinct_actors),
            "distinct_actor_count": self.distinct_actor_count,
            "first_access": self.first_access,
            "last_access": self.last_access,
            "other_access_pct": round(self.other_access_pct, 1),
            "exposure_score": self.exposure_score,
        }


def _build_profile(events: List[LookupEvent]) -> SubjectProfile:
    head = events[0]
    total = len(events)
    self_accesses = sum(1 for ev in events if ev.is_self_lookup)
    other_accesses = total - self_accesses
    actors = tuple(sorted({ev.actor_label for ev in events if not ev.is_self_lookup}))
    first_access, last_access = chronological_bounds(events)
    other_pct = other_accesses / total * 100
    return SubjectProfile(
        national_id=head.subject_national_id,
        last_name=head.subject_last_name,
        first_name=head.subject_first_name,
        total=total,
        self_accesses=self_accesses,
        other_accesses=other_accesses,
        distinct_actors=actors,
        first_access=first_access,
        last_access=last_access,
        other_access_pct=other_pct,
        exposure_score=exposure_score(other_pct, len(actors), total),
    )


def aggregate_subjects(events: List[LookupEvent]) -> List[SubjectProfile]:
    """Build one profile per known subject, sorted by exposure (highest first)."""
    grouped: Dict[str, List[LookupEvent]] = {}
    skipped_unknown = 0
    for ev in events:
        if ev.is_unknown_subject:
            skipped_unknown += 1
            continue
        grouped.setdefault(ev.subject_national_id, []).append(ev)

    profiles = [_build_profile(evs) for evs in grouped.values()]
    profiles.sort(key=lambda p: p.exposure_score, reverse=True)
    log.debug(
        "Aggregated %d events into %d subject profiles (%d unknown-subject events excluded)",
        len(events), len(profiles), skipped_unknown,
    )
    return profiles
