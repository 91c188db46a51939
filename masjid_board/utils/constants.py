# masjid_board/utils/constants.py

from enum import Enum


class PrayerKey(str, Enum):
    """
    The prayer categories that carry Iqamaah windows.
    Fajr, Dhuhr, Asr and Isha allow a single congregation time per day.
    Jumuah can have several congregations on the same Friday.
    """
    FAJR = 'fajr'
    DHUHR = 'dhuhr'
    ASR = 'asr'
    ISHA = 'isha'
    JUMUAH = 'jumuah'

    @property
    def is_multi_value(self):
        return self is PrayerKey.JUMUAH


PRAYER_KEYS = tuple(PrayerKey)
SINGLE_VALUE_PRAYERS = tuple(p for p in PrayerKey if not p.is_multi_value)

# Older display clients still send these spellings.
PRAYER_ALIASES = {
    'fajar': PrayerKey.FAJR,
    'zuhr': PrayerKey.DHUHR,
    'jummah': PrayerKey.JUMUAH,
    "jumu'ah": PrayerKey.JUMUAH,
}

# Shown on the board when no window covers a day.
MISSING_TIME = '--:--'

MIN_SCHEDULE_YEAR = 1900
MAX_SCHEDULE_YEAR = 3000
