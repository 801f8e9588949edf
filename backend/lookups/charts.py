"""Chart and timeline data generators for the lookup analysis UI.

Produces JSON-serializable data for Chart.js rendering:
- Activity by day of week (stacked bar)
- Activity by hour of day (stacked bar)
- Lookup type distribution (pie)
- Top users / top subjects by volume (horizontal bar)
- Day/hour timeline groups and per-user lookup groups
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from .parser import TIMESTAMP_FORMAT, LookupEvent
from .subjects import SubjectProfile
from .users import UserProfile

if TYPE_CHECKING:
    from .pipeline import LookupAnalysis

# Sunday first, matching the order used in the reports
DAY_NAMES = ["Domingo", "Lunes", "Martes", "Miércoles", "Jueves", "Viernes", "Sábado"]

_KIND_SERIES = [
    ("self", "Propias", "#4ade80"),
    ("other", "Ajenas", "#f87171"),
    ("unknown", "Desconocidas", "#facc15"),
]


def _event_datetime(ev: LookupEvent) -> Optional[datetime]:
    if ev.epoch is None:
        return None
    return datetime.strptime(ev.timestamp, TIMESTAMP_FORMAT)


def _empty_bucket() -> Dict[str, int]:
    return {"total": 0, "self": 0, "other": 0, "unknown": 0}


def _stacked_datasets(buckets: List[Dict[str, int]]) -> List[Dict[str, Any]]:
    return [
        {
            "label": label,
            "data": [b[kind] for b in buckets],
            "backgroundColor": color,
            "stack": "lookups",
        }
        for kind, label, color in _KIND_SERIES
    ]


def generate_all_charts(analysis: "LookupAnalysis") -> Dict[str, Any]:
    """Generate all chart datasets for an analysis.

    Returns dict with keys: activity_by_weekday, activity_by_hour,
    lookup_types, top_users, top_subjects, timeline
    """
    return {
        "activity_by_weekday": activity_by_weekday(analysis.events),
        "activity_by_hour": activity_by_hour(analysis.events),
        "lookup_types": lookup_type_distribution(analysis.events),
        "top_users": top_users(analysis.users),
        "top_subjects": top_subjects(analysis.subjects),
        "timeline": timeline(analysis.events, mode="day"),
    }


def activity_by_weekday(events: List[LookupEvent]) -> Dict[str, Any]:
    """Lookups per day of week; only days with activity are listed."""
    buckets: Dict[int, Dict[str, int]] = {}
    for ev in events:
        dt = _event_datetime(ev)
        if dt is None:
            continue
        dow = (dt.weekday() + 1) % 7  # Sunday = 0
        bucket = buckets.setdefault(dow, _empty_bucket())
        bucket["total"] += 1
        bucket[ev.kind] += 1

    order = sorted(buckets)
    rows = [buckets[d] for d in order]
    return {
        "type": "bar",
        "labels": [DAY_NAMES[d] for d in order],
        "datasets": _stacked_datasets(rows),
        "totals": [b["total"] for b in rows],
    }


def activity_by_hour(events: List[LookupEvent]) -> Dict[str, Any]:
    """Lookups per hour of day, always 24 buckets."""
    rows = [_empty_bucket() for _ in range(24)]
    for ev in events:
        dt = _event_datetime(ev)
        if dt is None:
            continue
        rows[dt.hour]["total"] += 1
        rows[dt.hour][ev.kind] += 1

    return {
        "type": "bar",
        "labels": [f"{h}:00" for h in range(24)],
        "datasets": _stacked_datasets(rows),
        "totals": [b["total"] for b in rows],
    }


def lookup_type_distribution(events: List[LookupEvent]) -> Dict[str, Any]:
    """Own vs third-party vs unknown lookups (pie chart)."""
    counts = _empty_bucket()
    for ev in events:
        counts[ev.kind] += 1

    return {
        "type": "pie",
        "labels": [label for _, label, _ in _KIND_SERIES],
        "datasets": [{
            "data": [counts[kind] for kind, _, _ in _KIND_SERIES],
            "backgroundColor": [color for _, _, color in _KIND_SERIES],
        }],
    }


def top_users(users: List[UserProfile], limit: int = 10) -> Dict[str, Any]:
    """Most active users by total lookups (horizontal bar chart)."""
    ranked = sorted(users, key=lambda u: u.total, reverse=True)[:limit]
    return {
        "type": "bar",
        "labels": [u.actor_name for u in ranked],
        "datasets": [
            {"label": "Propias", "data": [u.self_count for u in ranked], "backgroundColor": "#4ade80"},
            {"label": "Ajenas", "data": [u.other_count for u in ranked], "backgroundColor": "#f87171"},
            {"label": "Desconocidas", "data": [u.unknown_count for u in ranked], "backgroundColor": "#facc15"},
        ],
        "options": {"indexAxis": "y"},
    }


def top_subjects(subjects: List[SubjectProfile], limit: int = 10) -> Dict[str, Any]:
    """Most accessed records by total accesses (horizontal bar chart)."""
    ranked = sorted(subjects, key=lambda s: s.total, reverse=True)[:limit]
    return {
        "type": "bar",
        "labels": [s.label for s in ranked],
        "datasets": [
            {"label": "Propios", "data": [s.self_accesses for s in ranked], "backgroundColor": "#4ade80"},
            {"label": "Ajenos", "data": [s.other_accesses for s in ranked], "backgroundColor": "#f87171"},
        ],
        "options": {"indexAxis": "y"},
    }


def timeline(
    events: List[LookupEvent],
    mode: str = "day",
    actor_id: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """Group lookups by day (``YYYY-MM-DD``) or hour (``YYYY-MM-DD HH:00``).

    Args:
        events: Parsed events.
        mode: "day" or "hour".
        actor_id: Restrict to one user's lookups.

    Returns:
        Groups in ascending time order.
    """
    if mode not in ("day", "hour"):
        raise ValueError(f"Unknown timeline mode: {mode!r}")

    groups: Dict[str, Dict[str, Any]] = {}
    for ev in events:
        if actor_id is not None and ev.actor_id != actor_id:
            continue
        dt = _event_datetime(ev)
        if dt is None:
            continue
        key = dt.strftime("%Y-%m-%d") if mode == "day" else dt.strftime("%Y-%m-%d %H:00")

        if key not in groups:
            groups[key] = {"time_key": key, "events": [], "users": set(), **_empty_bucket()}
        g = groups[key]
        g["events"].append(ev.to_dict())
        g["users"].add(ev.actor_id)
        g["total"] += 1
        g[ev.kind] += 1

    result = []
    for key in sorted(groups):
        g = groups[key]
        g["unique_users"] = len(g.pop("users"))
        result.append(g)
    return result


def user_lookup_groups(events: List[LookupEvent], actor_id: str) -> List[Dict[str, Any]]:
    """One user's lookups grouped by subject national ID.

    Own record first, unknown identities last, the rest by lookup count.
    """
    groups: Dict[str, Dict[str, Any]] = {}
    mine = sorted(
        (ev for ev in events if ev.actor_id == actor_id),
        key=lambda e: (e.epoch is not None, e.epoch or 0),
        reverse=True,
    )
    for ev in mine:
        if ev.subject_national_id not in groups:
            groups[ev.subject_national_id] = {
                "national_id": ev.subject_national_id,
                "last_name": ev.subject_last_name,
                "first_name": ev.subject_first_name,
                "is_unknown": ev.is_unknown_subject,
                "is_self": ev.kind == "self",
                "lookups": [],
            }
        groups[ev.subject_national_id]["lookups"].append(ev.to_dict())

    return sorted(
        groups.values(),
        key=lambda g: (not g["is_self"], g["is_unknown"], -len(g["lookups"])),
    )
