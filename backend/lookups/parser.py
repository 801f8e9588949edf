"""Payroll lookup log parser.

Turns the plain-text audit log exported by the payroll system into a flat
list of LookupEvent, newest first.

Log layout (one block per querying user, blocks separated by ``---``):

  Pkusuario: 12 - Legajo: 4410 - DNI: 30111222 - Nombre: GOMEZ MARIA
  DNI: 30111222 - Apellido: GOMEZ - Nombre: MARIA - Fecha: 03/02/2024 09:15:00
  DNI: 28999888 - Apellido: PEREZ - Nombre: LUIS - Fecha: 03/02/2024 09:17:41
  ---

Malformed input never raises: a block with a bad header line is dropped
whole, a bad detail line is dropped alone, and a bad date is carried
through verbatim.
"""

from __future__ import annotations

import calendar
import logging
import re
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

log = logging.getLogger("recibowatch.lookups.parser")

# Name the source system writes when it could not resolve an identity.
# Literal, case-sensitive match; any other spelling counts as a known subject.
UNKNOWN_SENTINEL = "Desconocido"

SEGMENT_SEPARATOR = "---"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
DEFAULT_TIME = "00:00:00"

_HEADER_RE = re.compile(r"Pkusuario: (\d+) - Legajo: (\d+) - DNI: (\d+) - Nombre: (.+)")
_DETAIL_RE = re.compile(r"DNI: (\d+) - Apellido: (.+) - Nombre: (.+) - Fecha: (.+)")
_SOURCE_DATE_RE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})(?:\s+(\d{1,2}):(\d{2}):(\d{2}))?$")
_NORMALIZED_DATE_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})(?: (.*))?$")


@dataclass(frozen=True)
class LookupEvent:
    """One consultation of a payroll record."""

    actor_id: str
    actor_badge_number: str
    actor_national_id: str
    actor_name: str
    subject_national_id: str
    subject_last_name: str
    subject_first_name: str
    timestamp: str                # YYYY-MM-DD HH:MM:SS, or the raw value if unparseable
    epoch: Optional[int] = None   # seconds, None when timestamp is unparseable
    is_unknown_subject: bool = False
    is_self_lookup: bool = False

    @property
    def kind(self) -> str:
        """unknown | self | other (unknown wins over self)."""
        if self.is_unknown_subject:
            return "unknown"
        if self.is_self_lookup:
            return "self"
        return "other"

    @property
    def day(self) -> str:
        return self.timestamp.split(" ")[0]

    @property
    def subject_label(self) -> str:
        return f"{self.subject_last_name} {self.subject_first_name} ({self.subject_national_id})"

    @property
    def actor_label(self) -> str:
        return f"{self.actor_name} ({self.actor_national_id})"

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["kind"] = self.kind
        return d


def normalize_date(raw: str) -> str:
    """Convert ``DD/MM/YYYY[ HH:MM:SS]`` to ``YYYY-MM-DD HH:MM:SS``.

    Values that do not look like a source date, or name an impossible
    calendar date, are returned unchanged.
    """
    value = raw.strip()
    m = _SOURCE_DATE_RE.match(value)
    if not m:
        return raw
    day, month, year, hour, minute, second = m.groups()
    time_part = f"{int(hour):02d}:{minute}:{second}" if hour is not None else DEFAULT_TIME
    normalized = f"{year}-{int(month):02d}-{int(day):02d} {time_part}"
    try:
        datetime.strptime(normalized, TIMESTAMP_FORMAT)
    except ValueError:
        return raw
    return normalized


def display_date(timestamp: str) -> str:
    """Format a normalized timestamp as ``DD/MM/YYYY HH:MM:SS`` for humans."""
    m = _NORMALIZED_DATE_RE.match(timestamp or "")
    if not m:
        return timestamp
    year, month, day, time_part = m.groups()
    return f"{day}/{month}/{year} {time_part or ''}".rstrip()


def timestamp_to_epoch(timestamp: str) -> Optional[int]:
    """Seconds since 1970-01-01 for a normalized timestamp (naive, no TZ)."""
    try:
        dt = datetime.strptime(timestamp, TIMESTAMP_FORMAT)
    except (TypeError, ValueError):
        return None
    return calendar.timegm(dt.timetuple())


def chronological_bounds(events: Iterable[LookupEvent]) -> Tuple[str, str]:
    """(earliest, latest) timestamp of the events.

    Dated events are compared by epoch. Undated timestamps only count when
    nothing else is available and are then compared as plain strings.
    """
    dated: List[LookupEvent] = []
    undated: List[str] = []
    for ev in events:
        if ev.epoch is None:
            undated.append(ev.timestamp)
        else:
            dated.append(ev)
    if dated:
        first = min(dated, key=lambda e: e.epoch)
        last = max(dated, key=lambda e: e.epoch)
        return first.timestamp, last.timestamp
    if undated:
        return min(undated), max(undated)
    return "", ""


def _split_segments(text: str) -> List[List[str]]:
    """Split the log into blocks of non-empty, stripped lines."""
    segments: List[List[str]] = []
    current: List[str] = []
    for line in text.splitlines():
        stripped = line.strip()
        if stripped == SEGMENT_SEPARATOR:
            if current:
                segments.append(current)
            current = []
        elif stripped:
            current.append(stripped)
    if current:
        segments.append(current)
    return segments


def parse_lookup_log(text: str, unknown_sentinel: str = UNKNOWN_SENTINEL) -> List[LookupEvent]:
    """Parse a lookup log into events sorted newest first.

    Args:
        text: Whole document content.
        unknown_sentinel: Subject name marking an unresolved identity.

    Returns:
        List of LookupEvent. Empty when nothing in the document matched,
        which callers must treat as "no data", not as a failure.
    """
    events: List[LookupEvent] = []
    segments = _split_segments(text or "")
    skipped_segments = 0
    skipped_lines = 0

    for seg_idx, lines in enumerate(segments):
        header = _HEADER_RE.search(lines[0])
        if not header:
            skipped_segments += 1
            log.debug("Skipping block %d: unrecognized header %r", seg_idx, lines[0][:80])
            continue

        actor_id, badge, actor_dni, actor_name = header.groups()
        actor_name = actor_name.strip()

        for line in lines[1:]:
            detail = _DETAIL_RE.search(line)
            if not detail:
                skipped_lines += 1
                log.debug("Skipping line in block %d: %r", seg_idx, line[:80])
                continue

            subject_dni, last_name, first_name, raw_date = detail.groups()
            last_name = last_name.strip()
            first_name = first_name.strip()
            timestamp = normalize_date(raw_date.strip())

            events.append(LookupEvent(
                actor_id=actor_id,
                actor_badge_number=badge,
                actor_national_id=actor_dni,
                actor_name=actor_name,
                subject_national_id=subject_dni,
                subject_last_name=last_name,
                subject_first_name=first_name,
                timestamp=timestamp,
                epoch=timestamp_to_epoch(timestamp),
                is_unknown_subject=unknown_sentinel in (last_name, first_name),
                is_self_lookup=actor_dni == subject_dni,
            ))

    # Newest first; undated events sink to the end. sort() is stable.
    events.sort(key=lambda e: (e.epoch is not None, e.epoch or 0), reverse=True)

    log.info(
        "Parsed %d lookup events from %d blocks (%d blocks skipped, %d lines skipped)",
        len(events), len(segments), skipped_segments, skipped_lines,
    )
    return events
