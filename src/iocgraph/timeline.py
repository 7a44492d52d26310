"""Chronological ordering of indicator records.

Timestamps are free text supplied by the extraction layer. Anything that
does not parse sorts after every dated entry, keeping input order, so the
ordering is total and stable regardless of data quality.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TypeVar

from iocgraph.models import IndicatorRecord, require_records

T = TypeVar("T")


def parse_timestamp(value: str | None, formats: Sequence[str] = ()) -> float | None:
    """Parse an event time into POSIX seconds.

    Accepts ISO-8601 with either a space or ``T`` separator and an optional
    ``Z`` or UTC offset, then any extra ``strptime`` formats. Naive times
    are read as UTC.

    Args:
        value: Time text, e.g. ``"2026-02-16 14:30:00"``
        formats: Additional ``strptime`` formats to try after ISO-8601

    Returns:
        Seconds since the epoch, or None if the value does not parse
    """
    if not value:
        return None
    text = value.strip()
    if not text:
        return None

    parsed: datetime | None = None
    iso_text = text[:-1] + "+00:00" if text.endswith(("Z", "z")) else text
    try:
        parsed = datetime.fromisoformat(iso_text)
    except ValueError:
        for fmt in formats:
            try:
                parsed = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue

    if parsed is None:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp()


def sort_chronologically(
    items: Iterable[T],
    time_of: Callable[[T], str],
    formats: Sequence[str] = (),
) -> list[T]:
    """Sort items oldest first by their parsed timestamp.

    Items whose time does not parse go after all dated items. Ties, and the
    undated tail, keep their input order.
    """

    def sort_key(item: T) -> tuple[bool, float]:
        ts = parse_timestamp(time_of(item), formats)
        return (ts is None, ts if ts is not None else 0.0)

    return sorted(items, key=sort_key)


@dataclass
class TimeTimeline:
    """
    Chronological view over a set of indicator records.

    Attributes:
        entries: Records with a parseable time, oldest first
        undated: Records whose time is missing or unparseable, input order
        start: Earliest timestamp (POSIX seconds), None if no entries
        end: Latest timestamp (POSIX seconds), None if no entries
    """

    entries: list[IndicatorRecord] = field(default_factory=list)
    undated: list[IndicatorRecord] = field(default_factory=list)
    start: float | None = None
    end: float | None = None

    @property
    def span(self) -> float:
        """Seconds between the first and last entry."""
        if self.start is None or self.end is None:
            return 0.0
        return self.end - self.start


def build_time_timeline(
    records: Iterable[IndicatorRecord],
    formats: Sequence[str] = (),
) -> TimeTimeline:
    """Order records by event time and split off undated ones.

    Raises:
        TypeError: If ``records`` is not a collection of IndicatorRecord.
    """
    timeline = TimeTimeline()
    dated: list[tuple[float, IndicatorRecord]] = []
    for record in require_records(records):
        ts = parse_timestamp(record.time, formats)
        if ts is None:
            timeline.undated.append(record)
        else:
            dated.append((ts, record))

    dated.sort(key=lambda pair: pair[0])
    timeline.entries = [record for _, record in dated]
    if dated:
        timeline.start = dated[0][0]
        timeline.end = dated[-1][0]
    return timeline
