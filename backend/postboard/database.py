"""Database engine and helpers.

The engine is built once by the application factory from `DATABASE_URL`
and stored on `app.state`; request handlers receive a `Session` through the
`get_session` dependency instead of importing a module-level engine.
"""

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, Session, create_engine

from . import models  # noqa: F401  (registers tables on SQLModel.metadata)


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """Create the SQLAlchemy engine for `database_url`.

    SQLite connections are shared across FastAPI's worker threads, so the
    same-thread check is disabled for that dialect only.
    """
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    return create_engine(database_url, echo=echo, pool_pre_ping=True, connect_args=connect_args)


def create_db_and_tables(engine: Engine):
    """Create database tables using SQLModel metadata.

    Intended for local development, tests and the seed script; it never
    alters existing tables.
    """
    SQLModel.metadata.create_all(engine)


def ping(engine: Engine):
    """Run a trivial query; raises if the database is unreachable."""
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))


def get_engine(request: Request) -> Engine:
    return request.app.state.engine


def get_session(request: Request):
    """Yield a database `Session` for FastAPI dependency injection.

    The generator yields a session and ensures it is closed when the
    request scope finishes.
    """
    with Session(request.app.state.engine) as session:
        yield session
