# masjid_board/services/iqamaah/domain.py

import datetime
from dataclasses import dataclass, field, replace
from typing import Dict, List, Any, Optional

from ...utils.constants import PrayerKey
from ...utils.time_utils import format_iso_date


@dataclass(frozen=True)
class ValidityWindow:
    """A congregation time that is in effect for every day from start_date to end_date (inclusive)."""
    start_date: datetime.date
    end_date: datetime.date
    time: str

    def contains(self, day: datetime.date) -> bool:
        return self.start_date <= day <= self.end_date

    def overlaps(self, start: datetime.date, end: datetime.date) -> bool:
        return not (self.end_date < start or self.start_date > end)

    def clipped(self, start: datetime.date, end: datetime.date) -> 'ValidityWindow':
        return replace(self, start_date=max(self.start_date, start), end_date=min(self.end_date, end))

    def to_dict(self) -> Dict[str, str]:
        return {
            'startDate': format_iso_date(self.start_date),
            'endDate': format_iso_date(self.end_date),
            'time': self.time,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ValidityWindow':
        """Rebuilds a window from its stored form (ISO dates, already-normalized time)."""
        return cls(
            start_date=datetime.date.fromisoformat(str(data['startDate'])[:10]),
            end_date=datetime.date.fromisoformat(str(data['endDate'])[:10]),
            time=str(data['time']),
        )


def _empty_windows() -> Dict[PrayerKey, List[ValidityWindow]]:
    return {prayer: [] for prayer in PrayerKey}


@dataclass
class IqamaahAggregate:
    """
    The single stored record of Iqamaah windows, one ordered list per prayer.
    Instances are treated as values: mutating operations build a new aggregate.

    `version` is the row version the aggregate was loaded at (None if it was
    never stored); it is carried through every derived aggregate so a save can
    detect that the row moved on in the meantime.
    """
    windows: Dict[PrayerKey, List[ValidityWindow]] = field(default_factory=_empty_windows)
    version: Optional[int] = field(default=None, compare=False)

    def get(self, prayer: PrayerKey) -> List[ValidityWindow]:
        return list(self.windows.get(prayer, []))

    def with_prayer(self, prayer: PrayerKey, windows: List[ValidityWindow]) -> 'IqamaahAggregate':
        updated = {key: list(value) for key, value in self.windows.items()}
        updated[prayer] = list(windows)
        return IqamaahAggregate(windows=updated, version=self.version)

    def is_empty(self) -> bool:
        return not any(self.windows.get(prayer) for prayer in PrayerKey)

    def to_dict(self) -> Dict[str, List[Dict[str, str]]]:
        return {prayer.value: [w.to_dict() for w in self.get(prayer)] for prayer in PrayerKey}

    @classmethod
    def from_dict(cls, data: Dict[str, Any], version: Optional[int] = None) -> 'IqamaahAggregate':
        windows = _empty_windows()
        for prayer in PrayerKey:
            windows[prayer] = [ValidityWindow.from_dict(item) for item in (data.get(prayer.value) or [])]
        return cls(windows=windows, version=version)
