# masjid_board/services/iqamaah/repository.py
"""
Persistence adapter for the Iqamaah aggregate.

The rest of the engine only ever sees IqamaahAggregate values; this module is
the one place that knows the aggregate lives in a single IqamaahTimes row.
"""

import threading
from dataclasses import replace
from datetime import datetime
from typing import Optional, Dict

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError, IntegrityError
from sqlalchemy.orm.exc import StaleDataError

from ...extensions import db
from ...models import IqamaahTimes
from ...utils.constants import PrayerKey
from .domain import IqamaahAggregate
from .errors import StorageError, ConcurrentUpdateError

_locks: Dict[str, threading.Lock] = {}
_locks_guard = threading.Lock()


def aggregate_lock(key: str) -> threading.Lock:
    """Returns the process-wide lock that serializes mutations of one aggregate."""
    with _locks_guard:
        lock = _locks.get(key)
        if lock is None:
            lock = _locks[key] = threading.Lock()
        return lock


class IqamaahRepository:
    """Loads and saves the aggregate stored under a fixed key."""

    def __init__(self, key: Optional[str] = None, session=None):
        self.key = key or current_app.config.get('IQAMAAH_AGGREGATE_KEY', 'default')
        self.session = session if session is not None else db.session

    def _get_record(self) -> Optional[IqamaahTimes]:
        # populate_existing: a row already in the identity map must not hide a newer version.
        return self.session.query(IqamaahTimes).filter_by(key=self.key).populate_existing().first()

    def load(self) -> Optional[IqamaahAggregate]:
        """Returns the stored aggregate tagged with its row version, or None if nothing was ever saved."""
        try:
            record = self._get_record()
        except SQLAlchemyError as e:
            self.session.rollback()
            current_app.logger.error(f"DB read failed for Iqamaah aggregate '{self.key}': {e}", exc_info=True)
            raise StorageError("Failed to read Iqamaah times") from e

        if record is None:
            return None
        return IqamaahAggregate.from_dict(
            {prayer.value: getattr(record, prayer.value) for prayer in PrayerKey},
            version=record.version,
        )

    def save(self, aggregate: IqamaahAggregate, expected_version: Optional[int] = None) -> IqamaahAggregate:
        """
        Writes the aggregate.

        With `expected_version` the row is only updated if it still carries
        that version; without it a new row is created. Either way a row that
        moved on (or appeared) since it was loaded is never overwritten.

        Returns:
            The aggregate tagged with its new row version.

        Raises:
            ConcurrentUpdateError: The row changed (or was created) since it was loaded.
            StorageError: Any other database failure.
        """
        stored = aggregate.to_dict()
        try:
            if expected_version is None:
                record = IqamaahTimes(key=self.key, **stored)
                self.session.add(record)
                self.session.flush()
                new_version = record.version
                current_app.logger.info(f"Creating Iqamaah aggregate '{self.key}'.")
            else:
                new_version = expected_version + 1
                values = dict(stored, version=new_version, updated_at=datetime.utcnow())
                updated_rows = (
                    self.session.query(IqamaahTimes)
                    .filter_by(key=self.key, version=expected_version)
                    .update(values, synchronize_session=False)
                )
                if updated_rows == 0:
                    raise StaleDataError(
                        f"Iqamaah aggregate '{self.key}' is no longer at version {expected_version}"
                    )
            self.session.commit()
        except (StaleDataError, IntegrityError) as e:
            self.session.rollback()
            current_app.logger.warning(f"Write conflict on Iqamaah aggregate '{self.key}': {e}")
            raise ConcurrentUpdateError("Iqamaah times were changed by another request") from e
        except SQLAlchemyError as e:
            self.session.rollback()
            current_app.logger.error(f"DB write failed for Iqamaah aggregate '{self.key}': {e}", exc_info=True)
            raise StorageError("Failed to save Iqamaah times") from e

        return replace(aggregate, version=new_version)

    def clear(self) -> bool:
        """Deletes the aggregate. Returns False if there was nothing to delete."""
        try:
            record = self._get_record()
            if record is None:
                return False
            self.session.delete(record)
            self.session.commit()
        except StaleDataError as e:
            self.session.rollback()
            raise ConcurrentUpdateError("Iqamaah times were changed by another request") from e
        except SQLAlchemyError as e:
            self.session.rollback()
            current_app.logger.error(f"DB delete failed for Iqamaah aggregate '{self.key}': {e}", exc_info=True)
            raise StorageError("Failed to delete Iqamaah times") from e
        return True
