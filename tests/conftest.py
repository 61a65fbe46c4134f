"""Shared fixtures: a throwaway SQLite database and one client per patron."""

import os
import tempfile

import pytest

# Must be set before the app module builds its engine
_db_dir = tempfile.mkdtemp(prefix="circulation_test_")
os.environ["DATABASE_URL"] = "sqlite:///" + os.path.join(_db_dir, "test.db")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

from circulation_service.app import app, engine, SessionLocal  # noqa: E402
from circulation_service.models import Base, CheckedOut, Inventory, Patron, Title  # noqa: E402


TITLES = [
    ("0-1", "Alpha", "Ann Author"),
    ("0-2", "Beta", "Ben Writer"),
    # no copies
    ("0-3", "Gamma", "Gail Scribe"),
]
COPIES = [(5, "0-1"), (6, "0-1"), (7, "0-2")]
PATRONS = [(100, "Alice"), (200, "Bob")]


@pytest.fixture(autouse=True)
def db():
    """Fresh schema and catalogue for every test."""
    Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)

    session = SessionLocal()
    try:
        for isbn, title, author in TITLES:
            session.add(Title(isbn=isbn, title=title, author=author))
        for serial, isbn in COPIES:
            session.add(Inventory(serial=serial, isbn=isbn))
        for card_num, name in PATRONS:
            session.add(Patron(card_num=card_num, name=name))
        session.commit()
    finally:
        session.close()

    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def client():
    app.config["TESTING"] = True
    return app.test_client()


def _logged_in(name, card_num):
    c = app.test_client()
    resp = c.post("/api/login", json={"name": name, "cardnum": card_num})
    assert resp.get_json() == {"success": True}
    return c


@pytest.fixture
def alice():
    app.config["TESTING"] = True
    return _logged_in("Alice", 100)


@pytest.fixture
def bob():
    app.config["TESTING"] = True
    return _logged_in("Bob", 200)


@pytest.fixture
def held(db):
    """Returns the current (serial, card_num) checkout rows, sorted."""

    def _held():
        # end any open transaction so rows committed by requests are visible
        db.rollback()
        return sorted((row.serial, row.card_num) for row in db.query(CheckedOut).all())

    return _held
