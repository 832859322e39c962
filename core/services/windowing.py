"""
Daily windowing over symptom entries.

Two deliberately different shapes are offered:

- ``rolling_window`` / ``severity_window``: fixed length, zero-filled, one
  bucket per calendar day ending at the anchor date. Dashboard charts rely on
  always getting the same number of points.
- ``sparse_trend``: variable length, only days that contain entries, with
  per-entry detail. Used by historical trend queries.

The anchor date and the timezone used to cut calendar days are always passed
in by the caller; nothing here reads the wall clock.
"""

from collections import defaultdict
from collections.abc import Iterable
from datetime import UTC, date, datetime, timedelta, tzinfo

import structlog

from core.domain.models import (
    DailyBucket,
    Severity,
    SeverityBucket,
    SymptomEntry,
    TrendDay,
    TrendSymptom,
)
from core.services.severity import SEVERITY_WEIGHTS, average_severity_label, entry_severity

logger = structlog.get_logger(__name__)


def entry_day(created_at: datetime, tz: tzinfo = UTC) -> date:
    """Calendar day of a timestamp in the given timezone."""
    return created_at.astimezone(tz).date()


def window_days(anchor_date: date, size_days: int) -> list[date]:
    """Consecutive ascending days ending at ``anchor_date`` inclusive."""
    if size_days < 1:
        raise ValueError(f"Window size must be at least 1 day, got {size_days}")
    start = anchor_date - timedelta(days=size_days - 1)
    return [start + timedelta(days=offset) for offset in range(size_days)]


def group_by_day(
    entries: Iterable[SymptomEntry], tz: tzinfo = UTC
) -> dict[date, list[SymptomEntry]]:
    grouped: dict[date, list[SymptomEntry]] = defaultdict(list)
    for entry in entries:
        grouped[entry_day(entry.created_at, tz)].append(entry)
    return grouped


def rolling_window(
    entries: Iterable[SymptomEntry],
    anchor_date: date,
    size_days: int,
    tz: tzinfo = UTC,
) -> list[DailyBucket]:
    """
    Build a zero-filled daily window of entry counts and severity scores.

    Always returns exactly ``size_days`` buckets, whether or not any day has data.
    """
    days = window_days(anchor_date, size_days)
    grouped = group_by_day(entries, tz)

    buckets = []
    for day in days:
        day_entries = grouped.get(day, [])
        buckets.append(
            DailyBucket(
                date=day.isoformat(),
                symptoms=len(day_entries),
                severity=sum(SEVERITY_WEIGHTS[entry_severity(e)] for e in day_entries),
            )
        )
    return buckets


def severity_window(
    entries: Iterable[SymptomEntry],
    anchor_date: date,
    size_days: int,
    tz: tzinfo = UTC,
) -> list[SeverityBucket]:
    """Zero-filled per-day mild/moderate/severe counts over the same window shape."""
    days = window_days(anchor_date, size_days)
    grouped = group_by_day(entries, tz)

    buckets = []
    for day in days:
        counts = {severity: 0 for severity in Severity}
        for entry in grouped.get(day, []):
            counts[entry_severity(entry)] += 1
        buckets.append(
            SeverityBucket(
                date=day.isoformat(),
                mild=counts[Severity.MILD],
                moderate=counts[Severity.MODERATE],
                severe=counts[Severity.SEVERE],
            )
        )
    return buckets


def entries_in_window(
    entries: Iterable[SymptomEntry], anchor_date: date, days: int, tz: tzinfo = UTC
) -> list[SymptomEntry]:
    """Entries whose calendar day falls within the trailing ``days`` window."""
    window = window_days(anchor_date, days)
    start, end = window[0], window[-1]
    return [e for e in entries if start <= entry_day(e.created_at, tz) <= end]


def sparse_trend(
    entries: Iterable[SymptomEntry],
    anchor_date: date,
    days: int,
    tz: tzinfo = UTC,
) -> list[TrendDay]:
    """
    Build a historical trend containing only days that have entries.

    Unlike ``rolling_window`` empty days are omitted, so the result length
    varies between 0 and ``days``.
    """
    grouped = group_by_day(entries, tz)

    trend = []
    for day in window_days(anchor_date, days):
        day_entries = grouped.get(day)
        if not day_entries:
            continue
        trend.append(
            TrendDay(
                date=day.isoformat(),
                count=len(day_entries),
                avg_severity=average_severity_label(day_entries),
                symptoms=[
                    TrendSymptom(
                        name=", ".join(entry.symptoms),
                        severity=entry_severity(entry),
                        notes=entry.notes,
                    )
                    for entry in day_entries
                ],
            )
        )

    logger.debug("sparse_trend_built", days=days, active_days=len(trend))
    return trend
