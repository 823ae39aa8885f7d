from pathlib import Path

from sqlalchemy import Engine, create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import DeclarativeBase, sessionmaker
from sqlalchemy.pool import StaticPool

from mhyasi.core.config import DATABASE_URL


class Base(DeclarativeBase):
    pass


def create_db_engine(database_url: str) -> Engine:
    """Build an engine; SQLite URLs get thread-shareable connections.

    An in-memory SQLite database lives on a single shared connection so
    every session sees the same schema and rows.
    """
    url = make_url(database_url)
    if url.get_backend_name() != "sqlite":
        return create_engine(url)
    options = {"connect_args": {"check_same_thread": False}}
    if url.database in (None, "", ":memory:"):
        options["poolclass"] = StaticPool
    return create_engine(url, **options)


def make_session_factory(bind: Engine) -> sessionmaker:
    return sessionmaker(
        bind=bind,
        autoflush=False,
        autocommit=False,
        expire_on_commit=False,
    )


engine = create_db_engine(DATABASE_URL)
SessionLocal = make_session_factory(engine)


def init_db(bind: Engine = engine) -> None:
    """Create missing tables, and the directory of a file-backed SQLite DB."""
    database = bind.url.database
    if bind.url.get_backend_name() == "sqlite" and database not in (
        None, "", ":memory:"
    ):
        Path(database).parent.mkdir(parents=True, exist_ok=True)
    import mhyasi.models  # noqa: F401

    Base.metadata.create_all(bind=bind)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
