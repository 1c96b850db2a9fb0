import os
import datetime
import pytest

# Set TESTING before any bibliolend imports
os.environ["TESTING"] = "true"

from bibliolend.core.db import Base, make_engine, make_session_factory
from bibliolend.core.models import Borrower
from bibliolend.core.lending import LendingService


class FakeClock:
    """Stands in for `datetime.date.today` so expiry can be stepped through."""

    def __init__(self, today):
        self.current = today

    def __call__(self):
        return self.current

    def advance(self, days):
        self.current += datetime.timedelta(days=days)


@pytest.fixture
def engine(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'lending.db'}")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def clock():
    return FakeClock(datetime.date(2024, 1, 1))


@pytest.fixture
def lending(db_session, clock):
    return LendingService(db_session, today=clock, retry_backoff=0)


@pytest.fixture
def make_borrower(db_session):
    counter = iter(range(1, 10000))

    def make(name=None):
        n = next(counter)
        borrower = Borrower.create(db_session, name or f"Borrower {n}", f"borrower{n}@example.com")
        db_session.commit()
        return borrower
    return make


@pytest.fixture
def borrower(make_borrower):
    return make_borrower("Anna Puig")


@pytest.fixture
def make_copy(lending):
    def make(location="A-1", book_id=1):
        return lending.add_copy(location, book_id).value
    return make


@pytest.fixture
def copy(make_copy):
    return make_copy()
