# masjid_board/models.py

from datetime import datetime
from .extensions import db


class IqamaahTimes(db.Model):
    """
    Stores the Iqamaah validity windows of the board as one aggregate record.

    Each prayer column holds a JSON list of {"startDate", "endDate", "time"}
    entries with ISO dates. There is exactly one row per aggregate key; the
    board currently uses a single fixed key.
    """
    __tablename__ = 'iqamaah_times'

    id = db.Column(db.Integer, primary_key=True)

    # Fixed repository key (IQAMAAH_AGGREGATE_KEY), unique so concurrent first writes collide.
    key = db.Column(db.String(50), unique=True, nullable=False, index=True)

    fajr = db.Column(db.JSON, nullable=False, default=list)
    dhuhr = db.Column(db.JSON, nullable=False, default=list)
    asr = db.Column(db.JSON, nullable=False, default=list)
    isha = db.Column(db.JSON, nullable=False, default=list)
    # Can hold several overlapping windows (multiple Friday congregations).
    jumuah = db.Column(db.JSON, nullable=False, default=list)

    # Bumped by SQLAlchemy on every UPDATE; a stale write raises StaleDataError.
    version = db.Column(db.Integer, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __mapper_args__ = {'version_id_col': version}

    def __repr__(self):
        return f'<IqamaahTimes Key:{self.key} v{self.version}>'
