# masjid_board/services/iqamaah/normalizer.py
"""
Input normalization and validation for Iqamaah windows.

Everything a client submits passes through here before the interval store
sees it: flexible date strings become datetime.date values, clock strings are
zero-padded, and prayer names (including legacy spellings) are mapped onto
the PrayerKey enum.
"""

import datetime
import re
from typing import Any, Dict, Optional

from ...utils.constants import PrayerKey, PRAYER_ALIASES, PRAYER_KEYS
from .domain import ValidityWindow
from .errors import InvalidDateFormat, InvalidRange, InvalidTime, UnknownPrayer, InvalidPayload

ISO_DATE_PATTERN = re.compile(r'([0-9]{4})-([0-9]{2})-([0-9]{2})')
US_DATE_PATTERN = re.compile(r'([0-9]{1,2})/([0-9]{1,2})/([0-9]{4})')
CLOCK_PATTERN = re.compile(r'([0-9]|[01][0-9]|2[0-3]):([0-5][0-9])')
TIME_24H_PATTERN = re.compile(r'([01]?[0-9]|2[0-3]):[0-5][0-9]')


def parse_date(value: Any) -> datetime.date:
    """
    Parses YYYY-MM-DD or M/D/YYYY (MM/DD/YYYY) into a calendar day.

    Raises:
        InvalidDateFormat: For any other shape, or a day that does not exist.
    """
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value

    text = str(value if value is not None else '').strip()
    if not text:
        raise InvalidDateFormat("Date is required")

    iso_match = ISO_DATE_PATTERN.fullmatch(text)
    us_match = US_DATE_PATTERN.fullmatch(text)
    if iso_match:
        year, month, day = (int(part) for part in iso_match.groups())
    elif us_match:
        month, day, year = (int(part) for part in us_match.groups())
    else:
        raise InvalidDateFormat(f"Invalid date '{text}'. Use YYYY-MM-DD or M/D/YYYY")

    try:
        return datetime.date(year, month, day)
    except ValueError:
        raise InvalidDateFormat(f"Invalid date '{text}': no such calendar day")

def normalize_time(value: Any) -> str:
    """
    Zero-pads an H:mm clock string to HH:mm.
    Anything that is not a recognizable clock string comes back trimmed but
    otherwise untouched; validate_time is what rejects it.
    """
    text = str(value if value is not None else '').strip()
    match = CLOCK_PATTERN.fullmatch(text)
    if not match:
        return text
    return f"{int(match.group(1)):02d}:{match.group(2)}"

def validate_time(value: Any, label: str = 'time') -> None:
    """Strict 24-hour check: H:mm or HH:mm, hour 0-23, minute 00-59."""
    text = str(value if value is not None else '').strip()
    if not text or not TIME_24H_PATTERN.fullmatch(text):
        raise InvalidTime(f"{label} must be in HH:mm (24h) format")

def validate_window(window: ValidityWindow, label: Optional[str] = None) -> None:
    prefix = f"{label}: " if label else ''
    if window.start_date > window.end_date:
        raise InvalidRange(f"{prefix}startDate cannot be after endDate")
    validate_time(window.time, label=f"{prefix}time")

def build_window(start_date: Any, end_date: Any, time: Any, label: Optional[str] = None) -> ValidityWindow:
    """Parses, normalizes and validates one submitted range."""
    prefix = f"{label}: " if label else ''
    try:
        start = parse_date(start_date)
        end = parse_date(end_date)
    except InvalidDateFormat as e:
        raise InvalidDateFormat(f"{prefix}{e}") from e

    window = ValidityWindow(start_date=start, end_date=end, time=normalize_time(time))
    validate_window(window, label=label)
    return window

def normalize_prayer_key(value: Any) -> PrayerKey:
    """Maps a submitted prayer name (or legacy alias) onto PrayerKey."""
    if isinstance(value, PrayerKey):
        return value

    name = str(value if value is not None else '').strip().lower()
    if name in PRAYER_ALIASES:
        return PRAYER_ALIASES[name]
    try:
        return PrayerKey(name)
    except ValueError:
        allowed = ', '.join(p.value for p in PRAYER_KEYS)
        raise UnknownPrayer(f"prayer must be one of: {allowed}")

def normalize_payload_aliases(body: Dict[str, Any]) -> Dict[str, Any]:
    """
    Rewrites legacy top-level category keys of a bulk payload.
    When both the canonical key and an alias are present, the canonical key wins.
    Keys that are neither are dropped.
    """
    normalized = {}
    for key, value in (body or {}).items():
        name = str(key).strip().lower()
        if name in PRAYER_ALIASES:
            normalized.setdefault(PRAYER_ALIASES[name].value, value)
        elif name in {p.value for p in PRAYER_KEYS}:
            normalized[name] = value
    return normalized

def build_payload_windows(body: Dict[str, Any]) -> Dict[PrayerKey, list]:
    """
    Validates a full bulk payload: every category must be present as a list,
    every entry must be a valid window.
    """
    normalized = normalize_payload_aliases(body)
    windows = {}
    for prayer in PRAYER_KEYS:
        entries = normalized.get(prayer.value)
        if not isinstance(entries, list):
            raise InvalidPayload(f"{prayer.value} must be an array")

        windows[prayer] = []
        for idx, entry in enumerate(entries):
            label = f"{prayer.value}[{idx}]"
            if not isinstance(entry, dict) or not entry.get('startDate') or not entry.get('endDate'):
                raise InvalidPayload(f"{label}: startDate and endDate are required")
            windows[prayer].append(
                build_window(entry['startDate'], entry['endDate'], entry.get('time'), label=label)
            )
    return windows
