"""Search, sort and pagination for the profile tables.

Pure functions over already-computed profiles; re-running them never
changes the analysis.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, List, Sequence, TypeVar

from .subjects import SubjectProfile
from .users import UserProfile

T = TypeVar("T")


@dataclass
class Page:
    items: List[Any] = field(default_factory=list)
    page: int = 1
    per_page: int = 10
    total_pages: int = 0
    total_items: int = 0

    @property
    def first_index(self) -> int:
        """1-based position of the first item, 0 for an empty page."""
        return (self.page - 1) * self.per_page + 1 if self.items else 0

    @property
    def last_index(self) -> int:
        return self.first_index + len(self.items) - 1 if self.items else 0


def search_users(users: Sequence[UserProfile], term: str) -> List[UserProfile]:
    """Match by name (case-insensitive) or by national ID, user ID or badge number."""
    term = (term or "").strip()
    if not term:
        return list(users)
    lowered = term.lower()
    return [
        u for u in users
        if lowered in u.actor_name.lower()
        or term in u.actor_national_id
        or term in u.actor_id
        or term in u.actor_badge_number
    ]


def search_subjects(subjects: Sequence[SubjectProfile], term: str) -> List[SubjectProfile]:
    """Match by first/last name (case-insensitive) or national ID."""
    term = (term or "").strip()
    if not term:
        return list(subjects)
    lowered = term.lower()
    return [
        s for s in subjects
        if lowered in s.first_name.lower()
        or lowered in s.last_name.lower()
        or term in s.national_id
    ]


def sort_profiles(rows: Sequence[T], field_name: str, descending: bool = True) -> List[T]:
    """Stable sort by any profile attribute; strings compare case-insensitively."""
    if rows and not hasattr(rows[0], field_name):
        raise ValueError(f"Cannot sort by unknown field: {field_name!r}")

    def key(row: T) -> Any:
        value = getattr(row, field_name)
        if isinstance(value, str):
            return value.casefold()
        if isinstance(value, (tuple, list, dict)):
            return len(value)
        return value

    return sorted(rows, key=key, reverse=descending)


def paginate(rows: Sequence[T], page: int = 1, per_page: int = 10) -> Page:
    """Slice rows into a page; out-of-range page numbers are clamped."""
    if per_page < 1:
        raise ValueError("per_page must be at least 1")
    total = len(rows)
    total_pages = math.ceil(total / per_page)
    page = max(1, min(page, max(total_pages, 1)))
    start = (page - 1) * per_page
    return Page(
        items=list(rows[start:start + per_page]),
        page=page,
        per_page=per_page,
        total_pages=total_pages,
        total_items=total,
    )
