"""Dataset-level summary of an uploaded lookup log."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

from .parser import LookupEvent
from .subjects import SubjectProfile
from .users import UserProfile


@dataclass
class DatasetSummary:
    total_records: int = 0
    unique_users: int = 0
    own_lookups: int = 0
    other_lookups: int = 0
    unknown_lookups: int = 0
    unique_subjects: int = 0
    day_count: int = 0
    first_date: str = ""
    last_date: str = ""
    most_active_date: str = ""
    most_active_count: int = 0
    high_risk_users: List[UserProfile] = field(default_factory=list)
    high_exposure_subjects: List[SubjectProfile] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_records": self.total_records,
            "unique_users": self.unique_users,
            "own_lookups": self.own_lookups,
            "other_lookups": self.other_lookups,
            "unknown_lookups": self.unknown_lookups,
            "unique_subjects": self.unique_subjects,
            "day_count": self.day_count,
            "first_date": self.first_date,
            "last_date": self.last_date,
            "most_active_date": self.most_active_date,
            "most_active_count": self.most_active_count,
            "high_risk_users": [u.actor_id for u in self.high_risk_users],
            "high_exposure_subjects": [s.national_id for s in self.high_exposure_subjects],
        }


def summarize(
    events: List[LookupEvent],
    users: List[UserProfile],
    subjects: List[SubjectProfile],
    high_risk_threshold: int = 70,
) -> DatasetSummary:
    """Headline numbers for the summary panel.

    The most active date is the first date (in event order) reaching the
    highest count.
    """
    s = DatasetSummary(total_records=len(events))
    s.unique_users = len({ev.actor_id for ev in events})
    s.unique_subjects = len({ev.subject_national_id for ev in events if not ev.is_unknown_subject})

    per_day: Dict[str, int] = {}
    for ev in events:
        kind = ev.kind
        if kind == "unknown":
            s.unknown_lookups += 1
        elif kind == "self":
            s.own_lookups += 1
        else:
            s.other_lookups += 1
        # Undated events count as records but never as days
        if ev.epoch is not None:
            per_day[ev.day] = per_day.get(ev.day, 0) + 1

    if per_day:
        dates = sorted(per_day)
        s.day_count = len(dates)
        s.first_date = dates[0]
        s.last_date = dates[-1]
        for day, count in per_day.items():
            if count > s.most_active_count:
                s.most_active_date = day
                s.most_active_count = count

    s.high_risk_users = [u for u in users if u.suspicion_score >= high_risk_threshold]
    s.high_exposure_subjects = [p for p in subjects if p.exposure_score >= high_risk_threshold]
    return s
