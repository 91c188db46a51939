# tests/test_repository.py

import pytest
from sqlalchemy.orm import Session

from conftest import make_window, as_tuples
from masjid_board.models import IqamaahTimes
from masjid_board.services.iqamaah.domain import IqamaahAggregate
from masjid_board.services.iqamaah.errors import ConcurrentUpdateError
from masjid_board.services.iqamaah.repository import IqamaahRepository
from masjid_board.utils.constants import PrayerKey


def _commit_isha_from_another_session(db):
    with Session(db.engine) as other:
        record = other.query(IqamaahTimes).filter_by(key='default').one()
        record.isha = [{"startDate": "2024-01-01", "endDate": "2024-01-31", "time": "20:00"}]
        other.commit()


def test_load_returns_none_before_first_save(db):
    assert IqamaahRepository().load() is None

def test_save_tags_aggregate_with_row_version(db):
    repository = IqamaahRepository()
    aggregate = IqamaahAggregate().with_prayer(PrayerKey.FAJR, [make_window("2024-01-01", "2024-01-10", "05:30")])

    created = repository.save(aggregate)
    loaded = repository.load()
    updated = repository.save(loaded.with_prayer(PrayerKey.ASR, []), expected_version=loaded.version)

    assert created.version == loaded.version
    assert updated.version == loaded.version + 1
    assert repository.load().version == updated.version

def test_save_rejects_aggregate_loaded_before_another_write(db):
    """
    GIVEN: An aggregate loaded at some version.
    WHEN: Another session commits a change to a different prayer before we save.
    THEN: Our save is refused instead of overwriting that change.
    """
    # --- ARRANGE ---
    repository = IqamaahRepository()
    repository.save(IqamaahAggregate().with_prayer(PrayerKey.FAJR, [make_window("2024-01-01", "2024-01-10", "05:30")]))
    loaded = repository.load()
    _commit_isha_from_another_session(db)

    # --- ACT ---
    stale = loaded.with_prayer(PrayerKey.FAJR, [make_window("2024-01-01", "2024-01-20", "05:30")])
    with pytest.raises(ConcurrentUpdateError):
        repository.save(stale, expected_version=loaded.version)

    # --- ASSERT ---
    current = repository.load()
    assert current.version == loaded.version + 1
    assert as_tuples(current.get(PrayerKey.FAJR)) == [("2024-01-01", "2024-01-10", "05:30")]
    assert as_tuples(current.get(PrayerKey.ISHA)) == [("2024-01-01", "2024-01-31", "20:00")]

def test_load_sees_write_from_another_session(db):
    repository = IqamaahRepository()
    repository.save(IqamaahAggregate())
    first = repository.load()

    _commit_isha_from_another_session(db)

    second = repository.load()
    assert second.version == first.version + 1
    assert len(second.get(PrayerKey.ISHA)) == 1

def test_second_first_write_collides_on_key(db):
    repository = IqamaahRepository()
    repository.save(IqamaahAggregate())
    with pytest.raises(ConcurrentUpdateError):
        repository.save(IqamaahAggregate())

def test_clear_reports_whether_a_row_existed(db):
    repository = IqamaahRepository()
    assert repository.clear() is False
    repository.save(IqamaahAggregate())
    assert repository.clear() is True
    assert repository.load() is None
