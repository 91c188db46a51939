# -*- coding: utf-8 -*-
"""
Service for managing the board's Iqamaah (congregation) times.

Every mutating operation is a read-modify-write of the single stored
aggregate. To avoid lost updates it runs under a per-aggregate lock, and the
save is checked against the row version; when another process won the race
the operation is recomputed from a fresh read.

Reads never write. Expired windows are filtered out of projections in memory
only and are purged from storage the next time a mutation runs.
"""

from typing import Dict, Any, Optional, Callable

from flask import current_app

from ..metrics import IQAMAAH_MUTATIONS_TOTAL, IQAMAAH_WRITE_CONFLICTS_TOTAL, IQAMAAH_OPERATION_DURATION_SECONDS
from ..utils.constants import PrayerKey, MISSING_TIME
from ..utils.time_utils import utc_today
from .iqamaah.domain import IqamaahAggregate
from .iqamaah.errors import IqamaahError, NotFound, InvalidRange, ConcurrentUpdateError
from .iqamaah.expiry import prune_expired, prune_aggregate
from .iqamaah.intervals import insert_window, carve, replace_targeted, replace_single, find_overlaps
from .iqamaah.normalizer import (
    build_window,
    build_payload_windows,
    normalize_prayer_key,
    normalize_time,
    parse_date,
    validate_time,
)
from .iqamaah.repository import IqamaahRepository, aggregate_lock
from .iqamaah.schedule_resolver import build_month_schedule, build_month_ranges, month_window


# --- Private Helper Functions ---

def _run_mutation(operation: str, prayer_label: str,
                  compute: Callable[[IqamaahAggregate], IqamaahAggregate],
                  not_found_message: Optional[str] = None) -> IqamaahAggregate:
    """
    Loads the aggregate, applies `compute` and saves the result, retrying on
    optimistic-version conflicts. The whole cycle holds the aggregate lock.

    Args:
        not_found_message: When given, an absent aggregate, or one holding no
            windows at all, raises NotFound with this message instead of
            starting from an empty one.
    """
    repository = IqamaahRepository()
    max_attempts = max(1, int(current_app.config.get('IQAMAAH_MAX_WRITE_RETRIES', 3)))

    try:
        with IQAMAAH_OPERATION_DURATION_SECONDS.labels(operation=operation).time(), aggregate_lock(repository.key):
            for attempt in range(1, max_attempts + 1):
                aggregate = repository.load()
                if not_found_message and (aggregate is None or aggregate.is_empty()):
                    raise NotFound(not_found_message)
                if aggregate is None:
                    aggregate = IqamaahAggregate()

                updated = compute(aggregate)
                try:
                    saved = repository.save(updated, expected_version=aggregate.version)
                except ConcurrentUpdateError:
                    IQAMAAH_WRITE_CONFLICTS_TOTAL.labels(operation=operation).inc()
                    if attempt == max_attempts:
                        current_app.logger.error(f"Iqamaah {operation} for '{prayer_label}' gave up after {attempt} conflicting attempts.")
                        raise
                    current_app.logger.warning(f"Iqamaah {operation} for '{prayer_label}' hit a write conflict (attempt {attempt}). Retrying.")
                    continue

                IQAMAAH_MUTATIONS_TOTAL.labels(operation=operation, prayer=prayer_label, status='success').inc()
                return saved
    except IqamaahError:
        IQAMAAH_MUTATIONS_TOTAL.labels(operation=operation, prayer=prayer_label, status='error').inc()
        raise

def _log_mutation(operation: str, prayer: PrayerKey, aggregate: IqamaahAggregate) -> None:
    current_app.logger.info(f"Iqamaah {operation} for '{prayer.value}' saved. {len(aggregate.get(prayer))} window(s) stored.")

def _missing_time() -> str:
    return current_app.config.get('IQAMAAH_MISSING_TIME', MISSING_TIME)

def _load_current_view() -> IqamaahAggregate:
    """The stored aggregate minus expired windows (never written back)."""
    aggregate = IqamaahRepository().load() or IqamaahAggregate()
    return prune_aggregate(aggregate, utc_today())


# --- Mutations ---

def bulk_replace_iqamaah_times(payload: Dict[str, Any]) -> IqamaahAggregate:
    """
    Replaces the whole stored sequence of every prayer with the submitted windows.

    Expired windows in the payload are dropped; nothing is merged with what was
    stored before and nothing is split.
    """
    windows = build_payload_windows(payload)
    today = utc_today()
    replacement = IqamaahAggregate(windows={
        prayer: prune_expired(items, today) for prayer, items in windows.items()
    })

    updated = _run_mutation('bulk_replace', 'all', lambda _current: replacement)
    current_app.logger.info(f"Iqamaah times replaced: {sum(len(updated.get(p)) for p in PrayerKey)} window(s) stored.")
    return updated

def create_iqamaah_range(prayer: Any, start_date: Any, end_date: Any, time: Any) -> IqamaahAggregate:
    """
    Inserts one window. For single-value prayers it overrides whatever it
    overlaps; for Jumuah it is simply added alongside the existing windows.
    """
    prayer_key = normalize_prayer_key(prayer)
    new_window = build_window(start_date, end_date, time)

    def compute(aggregate: IqamaahAggregate) -> IqamaahAggregate:
        current = prune_expired(aggregate.get(prayer_key), utc_today())
        return aggregate.with_prayer(prayer_key, insert_window(prayer_key, current, new_window))

    updated = _run_mutation('insert', prayer_key.value, compute)
    _log_mutation('insert', prayer_key, updated)
    return updated

def update_iqamaah_range(prayer: Any, start_date: Any, end_date: Any, time: Any,
                         old_time: Optional[str] = None,
                         old_start_date: Optional[str] = None,
                         old_end_date: Optional[str] = None) -> IqamaahAggregate:
    """
    Replaces an existing window with a new one.

    Targeted mode (any old_* argument given): removes the window(s) with
    exactly the old bounds, and the old time when it is given. Missing old
    bounds default to the new bounds; the old bounds are only checked for
    order when both are given.

    Default mode: removes the single window containing the new start date,
    else the first one overlapping the new window. Other neighbours are kept
    as they are, even if the new window now overlaps them.

    Raises NotFound when nothing is stored, or every prayer is empty.
    """
    prayer_key = normalize_prayer_key(prayer)
    new_window = build_window(start_date, end_date, time)
    targeted = old_time is not None or old_start_date is not None or old_end_date is not None
    old_start = old_end = old_time_filter = None

    if targeted:
        old_start = parse_date(old_start_date) if old_start_date is not None else new_window.start_date
        old_end = parse_date(old_end_date) if old_end_date is not None else new_window.end_date
        if old_start_date is not None and old_end_date is not None and old_start > old_end:
            raise InvalidRange("oldStartDate cannot be after oldEndDate")
        if old_time:
            validate_time(old_time, label='oldTime')
            old_time_filter = normalize_time(old_time)

    def compute(aggregate: IqamaahAggregate) -> IqamaahAggregate:
        current = prune_expired(aggregate.get(prayer_key), utc_today())
        if targeted:
            updated_windows = replace_targeted(current, new_window, old_start, old_end, old_time_filter)
        else:
            updated_windows = replace_single(current, new_window)
            if not prayer_key.is_multi_value and find_overlaps(updated_windows):
                current_app.logger.warning(f"Iqamaah update for '{prayer_key.value}' left overlapping windows; neighbours were not re-split.")
        return aggregate.with_prayer(prayer_key, updated_windows)

    updated = _run_mutation('update', prayer_key.value, compute,
                            not_found_message="No Iqamaah times found to update")
    _log_mutation('update', prayer_key, updated)
    return updated

def delete_iqamaah_range(prayer: Any, start_date: Any, end_date: Any, time: Optional[str] = None) -> IqamaahAggregate:
    """
    Cuts the days [start_date, end_date] out of the prayer's windows.
    With `time`, only windows carrying that time are affected.
    Raises NotFound when nothing is stored, or every prayer is empty.
    """
    prayer_key = normalize_prayer_key(prayer)
    delete_start = parse_date(start_date)
    delete_end = parse_date(end_date)
    if delete_start > delete_end:
        raise InvalidRange("startDate cannot be after endDate")

    time_filter = None
    if time:
        validate_time(time)
        time_filter = normalize_time(time)

    def compute(aggregate: IqamaahAggregate) -> IqamaahAggregate:
        current = prune_expired(aggregate.get(prayer_key), utc_today())
        return aggregate.with_prayer(prayer_key, carve(current, delete_start, delete_end, time_filter))

    updated = _run_mutation('delete', prayer_key.value, compute,
                            not_found_message="No Iqamaah times found to delete from")
    _log_mutation('delete', prayer_key, updated)
    return updated

def clear_iqamaah_times() -> None:
    """Deletes the whole aggregate."""
    repository = IqamaahRepository()
    with aggregate_lock(repository.key):
        if not repository.clear():
            raise NotFound("No Iqamaah times found to delete")
    IQAMAAH_MUTATIONS_TOTAL.labels(operation='clear', prayer='all', status='success').inc()
    current_app.logger.info("Iqamaah times cleared.")


# --- Reads ---

def get_iqamaah_times() -> IqamaahAggregate:
    """Returns the aggregate exactly as stored."""
    aggregate = IqamaahRepository().load()
    if aggregate is None:
        raise NotFound("No Iqamaah times found in the database")
    return aggregate

def get_month_schedule(year: Any, month: Any) -> Dict[str, Any]:
    """Per-day resolved Iqamaah times for a calendar month."""
    month_window(year, month)
    rows = build_month_schedule(_load_current_view(), year, month, missing=_missing_time())
    return {'year': year, 'month': month, 'data': rows}

def get_month_ranges(year: Any, month: Any) -> Dict[str, Any]:
    """The stored windows of every prayer clipped to a calendar month."""
    month_window(year, month)
    ranges = build_month_ranges(_load_current_view(), year, month)
    return {'year': year, 'month': month, 'data': ranges}
