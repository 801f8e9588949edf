"""Lookup analysis pipeline.

text -> parse -> user profiles + subject profiles -> summary

Runs synchronously over one whole document; every call starts from
scratch, nothing is kept between uploads.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..settings import Settings
from .parser import LookupEvent, parse_lookup_log
from .reader import read_lookup_file
from .subjects import SubjectProfile, aggregate_subjects
from .summary import DatasetSummary, summarize
from .users import UserProfile, aggregate_users

log = logging.getLogger("recibowatch.lookups.pipeline")


@dataclass
class LookupAnalysis:
    events: List[LookupEvent] = field(default_factory=list)
    users: List[UserProfile] = field(default_factory=list)
    subjects: List[SubjectProfile] = field(default_factory=list)
    summary: DatasetSummary = field(default_factory=DatasetSummary)

    @property
    def has_data(self) -> bool:
        return bool(self.events)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "has_data": self.has_data,
            "summary": self.summary.to_dict(),
            "events": [ev.to_dict() for ev in self.events],
            "users": [u.to_dict() for u in self.users],
            "subjects": [s.to_dict() for s in self.subjects],
        }


def run_lookup_analysis(text: str, settings: Optional[Settings] = None) -> LookupAnalysis:
    """Parse a lookup log and build both profile rankings.

    An empty or unrecognized document yields an analysis with
    ``has_data == False``; it never raises for malformed content.
    """
    settings = settings or Settings()
    t0 = time.monotonic()

    events = parse_lookup_log(text, unknown_sentinel=settings.unknown_sentinel)
    users = aggregate_users(events)
    subjects = aggregate_subjects(events)
    summary = summarize(events, users, subjects, high_risk_threshold=settings.high_risk_threshold)

    if not events:
        log.warning("No lookup records recognized in document (%d chars)", len(text or ""))
    else:
        log.info(
            "Lookup analysis: %d events, %d users, %d subjects, %d high-risk users (%.1f ms)",
            len(events), len(users), len(subjects), len(summary.high_risk_users),
            (time.monotonic() - t0) * 1000,
        )
    return LookupAnalysis(events=events, users=users, subjects=subjects, summary=summary)


def analyze_file(path: Union[str, Path], settings: Optional[Settings] = None) -> LookupAnalysis:
    """Read a log file and analyze it. Raises LookupFileError on I/O problems."""
    return run_lookup_analysis(read_lookup_file(path), settings=settings)
