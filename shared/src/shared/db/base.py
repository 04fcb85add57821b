"""Database foundation: declarative base class, engine and session factories."""

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models."""


def create_db_engine(dsn: str, **kwargs: object) -> Engine:
    """Create a SQLAlchemy engine from a DSN string.

    Audit writes and directory lookups run in worker threads, so SQLite
    engines are created with ``check_same_thread=False``; an in-memory
    SQLite DSN additionally gets a ``StaticPool`` so every thread sees the
    same database.

    Services should pass ``pool_pre_ping=True`` in production to handle
    stale connections after PostgreSQL restarts.
    """
    if dsn.startswith("sqlite"):
        connect_args = dict(kwargs.pop("connect_args", None) or {})  # type: ignore[call-overload]
        connect_args.setdefault("check_same_thread", False)
        kwargs["connect_args"] = connect_args
        if ":memory:" in dsn or dsn == "sqlite://":
            kwargs.setdefault("poolclass", StaticPool)
    return create_engine(dsn, **kwargs)


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Create a sessionmaker bound to the given engine.

    ``expire_on_commit=False`` keeps loaded users readable after the
    session that fetched them has been closed.
    """
    return sessionmaker(bind=engine, expire_on_commit=False)
