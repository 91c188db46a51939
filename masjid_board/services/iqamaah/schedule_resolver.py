# masjid_board/services/iqamaah/schedule_resolver.py
"""
Projects stored Iqamaah windows onto a calendar month.

Two views are produced: a per-day table with one resolved time per prayer
(a list of times for Jumuah), and the raw windows clipped to the month for
clients that draw ranges themselves. Callers are expected to have removed
expired windows already.
"""

import datetime
from typing import Dict, Any, List, Tuple

from ...utils.constants import PrayerKey, SINGLE_VALUE_PRAYERS, MISSING_TIME, MIN_SCHEDULE_YEAR, MAX_SCHEDULE_YEAR
from ...utils.time_utils import month_bounds, iter_days, format_iso_date
from .domain import IqamaahAggregate, ValidityWindow
from .errors import InvalidPeriod
from .intervals import merge_adjacent_same_time, sort_windows


def month_window(year: Any, month: Any) -> Tuple[datetime.date, datetime.date]:
    """Validates year/month and returns the first and last day of that month."""
    if isinstance(year, bool) or not isinstance(year, int) or not MIN_SCHEDULE_YEAR <= year <= MAX_SCHEDULE_YEAR:
        raise InvalidPeriod("year must be a valid number (e.g., 2026)")
    if isinstance(month, bool) or not isinstance(month, int) or not 1 <= month <= 12:
        raise InvalidPeriod("month must be between 1 and 12")
    return month_bounds(year, month)

def clip_to_window(windows: List[ValidityWindow], window_start: datetime.date,
                   window_end: datetime.date) -> List[ValidityWindow]:
    return [w.clipped(window_start, window_end) for w in windows if w.overlaps(window_start, window_end)]

def resolve_single(windows: List[ValidityWindow], day: datetime.date, missing: str = MISSING_TIME) -> str:
    matches = [w for w in windows if w.contains(day)]
    if not matches:
        return missing
    # The store never keeps overlaps, but if it does the latest-defined window wins.
    return max(matches, key=lambda w: w.start_date).time

def resolve_multi(windows: List[ValidityWindow], day: datetime.date, missing: str = MISSING_TIME) -> List[str]:
    times = sorted(w.time for w in windows if w.contains(day))
    return times or [missing]

def build_month_schedule(aggregate: IqamaahAggregate, year: int, month: int,
                         missing: str = MISSING_TIME) -> List[Dict[str, Any]]:
    """
    Builds one row per day of the month:
    {date, fajr, dhuhr, asr, isha: str, jumuah: [str]}.
    """
    window_start, window_end = month_window(year, month)
    clipped = {prayer: clip_to_window(aggregate.get(prayer), window_start, window_end) for prayer in PrayerKey}

    rows = []
    for day in iter_days(window_start, window_end):
        row = {'date': format_iso_date(day)}
        for prayer in SINGLE_VALUE_PRAYERS:
            row[prayer.value] = resolve_single(clipped[prayer], day, missing)
        row[PrayerKey.JUMUAH.value] = resolve_multi(clipped[PrayerKey.JUMUAH], day, missing)
        rows.append(row)
    return rows

def build_month_ranges(aggregate: IqamaahAggregate, year: int, month: int) -> Dict[str, List[Dict[str, str]]]:
    """Returns, per prayer, the stored windows clipped to the month."""
    window_start, window_end = month_window(year, month)
    ranges = {}
    for prayer in PrayerKey:
        clipped = clip_to_window(aggregate.get(prayer), window_start, window_end)
        ordered = sort_windows(clipped) if prayer.is_multi_value else merge_adjacent_same_time(clipped)
        ranges[prayer.value] = [w.to_dict() for w in ordered]
    return ranges
