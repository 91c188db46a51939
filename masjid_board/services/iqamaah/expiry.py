# masjid_board/services/iqamaah/expiry.py

import datetime
from typing import List

from ...utils.constants import PrayerKey
from .domain import IqamaahAggregate, ValidityWindow


def is_expired(window: ValidityWindow, today: datetime.date) -> bool:
    """A window is expired once its last day is strictly before today (UTC)."""
    return window.end_date < today

def prune_expired(windows: List[ValidityWindow], today: datetime.date) -> List[ValidityWindow]:
    return [w for w in windows if not is_expired(w, today)]

def prune_aggregate(aggregate: IqamaahAggregate, today: datetime.date) -> IqamaahAggregate:
    """
    Returns a copy of the aggregate without expired windows.
    The stored record is not touched; callers on read paths must never save this.
    """
    return IqamaahAggregate(windows={
        prayer: prune_expired(aggregate.get(prayer), today) for prayer in PrayerKey
    }, version=aggregate.version)
