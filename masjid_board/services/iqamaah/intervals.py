# masjid_board/services/iqamaah/intervals.py
"""
Interval algebra over Iqamaah validity windows.

All functions here are pure: they take a list of windows and return a new
list, never touching storage. For single-value prayers the results hold the
store invariants: no overlaps, sorted by (start_date, end_date), and no two
contiguous windows sharing a time.
"""

import datetime
from dataclasses import replace
from typing import List, Optional

from ...utils.constants import PrayerKey
from ...utils.time_utils import add_days
from .domain import ValidityWindow


def sort_windows(windows: List[ValidityWindow]) -> List[ValidityWindow]:
    return sorted(windows, key=lambda w: (w.start_date, w.end_date))

def merge_adjacent_same_time(windows: List[ValidityWindow]) -> List[ValidityWindow]:
    """Coalesces date-contiguous windows that carry the same time."""
    if not windows:
        return []

    ordered = sort_windows(windows)
    merged = [ordered[0]]
    for current in ordered[1:]:
        previous = merged[-1]
        if previous.time == current.time and add_days(previous.end_date, 1) == current.start_date:
            merged[-1] = replace(previous, end_date=current.end_date)
            continue
        merged.append(current)
    return merged

def _remainders(window: ValidityWindow, start: datetime.date, end: datetime.date) -> List[ValidityWindow]:
    """The parts of `window` left over once [start, end] is cut out of it."""
    parts = []
    if window.start_date < start:
        parts.append(replace(window, end_date=add_days(start, -1)))
    if window.end_date > end:
        parts.append(replace(window, start_date=add_days(end, 1)))
    return parts

def split_and_replace(existing: List[ValidityWindow], new_window: ValidityWindow) -> List[ValidityWindow]:
    """
    Inserts `new_window` authoritatively: every existing window it touches is
    trimmed to the days outside it, then contiguous same-time windows are merged.
    """
    result = []
    for window in existing:
        if not window.overlaps(new_window.start_date, new_window.end_date):
            result.append(window)
            continue
        result.extend(_remainders(window, new_window.start_date, new_window.end_date))

    result.append(new_window)
    return merge_adjacent_same_time(result)

def insert_window(prayer: PrayerKey, existing: List[ValidityWindow], new_window: ValidityWindow) -> List[ValidityWindow]:
    # Several Jumuah congregations may share a day, so nothing is split there.
    if prayer.is_multi_value:
        return sort_windows(existing + [new_window])
    return split_and_replace(existing, new_window)

def carve(existing: List[ValidityWindow], start: datetime.date, end: datetime.date,
          time_filter: Optional[str] = None) -> List[ValidityWindow]:
    """
    Removes the days [start, end] from every window.
    With a time_filter, only windows carrying exactly that time are cut.
    """
    result = []
    for window in existing:
        if time_filter and window.time != time_filter:
            result.append(window)
            continue
        if not window.overlaps(start, end):
            result.append(window)
            continue
        result.extend(_remainders(window, start, end))
    return merge_adjacent_same_time(result)

def replace_targeted(existing: List[ValidityWindow], new_window: ValidityWindow,
                     old_start: datetime.date, old_end: datetime.date,
                     old_time: Optional[str] = None) -> List[ValidityWindow]:
    """
    Drops every window whose bounds equal [old_start, old_end] (and whose time
    equals old_time, when given), then adds `new_window`. No split, no merge.
    """
    kept = []
    for window in existing:
        same_bounds = window.start_date == old_start and window.end_date == old_end
        if same_bounds and (not old_time or window.time == old_time):
            continue
        kept.append(window)
    return sort_windows(kept + [new_window])

def replace_single(existing: List[ValidityWindow], new_window: ValidityWindow) -> List[ValidityWindow]:
    """
    Swaps exactly one existing window for `new_window`.

    The window containing new_window.start_date is preferred, otherwise the
    first one overlapping it at all. Neighbours are left untouched, so the
    result may still overlap one of them.
    """
    index = next(
        (i for i, w in enumerate(existing) if w.contains(new_window.start_date)),
        None,
    )
    if index is None:
        index = next(
            (i for i, w in enumerate(existing) if w.overlaps(new_window.start_date, new_window.end_date)),
            None,
        )

    remaining = [w for i, w in enumerate(existing) if i != index]
    return sort_windows(remaining + [new_window])

def find_overlaps(windows: List[ValidityWindow]) -> List[tuple]:
    """Returns every pair of overlapping windows, in sorted order."""
    ordered = sort_windows(windows)
    pairs = []
    for i, first in enumerate(ordered):
        for second in ordered[i + 1:]:
            if second.start_date > first.end_date:
                break
            pairs.append((first, second))
    return pairs
