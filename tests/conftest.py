# tests/conftest.py

import datetime
import pytest
from masjid_board import create_app, db as _db
from masjid_board.services.iqamaah.domain import ValidityWindow


@pytest.fixture(scope='session')
def app(tmp_path_factory):
    """
    Session-wide application for testing.
    A file-backed SQLite database is used instead of :memory: so that worker
    threads in the concurrency tests get their own connections.
    """
    db_file = tmp_path_factory.mktemp('data') / 'masjid_board_test.db'
    app = create_app('testing', {'SQLALCHEMY_DATABASE_URI': f"sqlite:///{db_file}"})
    return app

@pytest.fixture(scope='function')
def db(app):
    """Function-level database setup. Creates and tears down tables for each test function."""
    with app.app_context():
        _db.create_all()

        yield _db

        _db.session.remove()
        _db.drop_all()

@pytest.fixture(scope='function')
def test_client(app, db):
    """A test client for the app, ensuring the DB is initialized."""
    return app.test_client()


def make_window(start, end, time):
    """Builds a ValidityWindow from ISO date strings."""
    return ValidityWindow(
        start_date=datetime.date.fromisoformat(start),
        end_date=datetime.date.fromisoformat(end),
        time=time,
    )

def as_tuples(windows):
    """Renders windows as (start, end, time) tuples for compact assertions."""
    return [(w.start_date.isoformat(), w.end_date.isoformat(), w.time) for w in windows]
