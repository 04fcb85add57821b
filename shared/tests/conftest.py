"""Fixtures for shared tests: an in-memory SQLite schema per session."""

from collections.abc import Generator

import pytest
from sqlalchemy import Engine
from sqlalchemy.orm import Session

from shared.db.base import Base, create_db_engine


@pytest.fixture(scope="session")
def db_engine() -> Generator[Engine, None, None]:
    engine = create_db_engine("sqlite://")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def db_session(db_engine: Engine) -> Generator[Session, None, None]:
    """Session bound to an outer transaction that is rolled back afterwards.

    Repository flushes stay inside the transaction, so every test starts
    from empty tables.
    """
    with db_engine.connect() as connection:
        transaction = connection.begin()
        session = Session(bind=connection)
        try:
            yield session
        finally:
            session.close()
            if transaction.is_active:
                transaction.rollback()
