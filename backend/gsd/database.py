"""Database engine and helpers.

The engine owns the connection pool, the only shared mutable resource in
the service. It is built once from `Settings` by the application factory
and stored on `app.state.engine`; request handlers get their own `Session`
through the `get_session` dependency rather than reaching for a global.
"""

from fastapi import Request
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, Session, create_engine

from .config import Settings

# Imported for its side effect of registering the tables on SQLModel.metadata.
from . import models  # noqa: F401


def build_engine(settings: Settings) -> Engine:
    """Create the pooled engine described by `settings`.

    SQLite is used for local development and tests; its connections may
    be handed between FastAPI worker threads. PostgreSQL gets a bounded
    `QueuePool` sized by `DB_MAX_CONNECTIONS`, and callers waiting longer
    than `DB_POOL_TIMEOUT_SECONDS` for a connection get a pool timeout.
    """
    url = settings.database_url
    if url.startswith("sqlite"):
        return create_engine(url, echo=settings.SQL_ECHO, connect_args={"check_same_thread": False})

    options = []
    if settings.DB_SCHEMA:
        options.append(f"-csearch_path={settings.DB_SCHEMA}")
    if settings.DB_STATEMENT_TIMEOUT_MS:
        options.append(f"-cstatement_timeout={settings.DB_STATEMENT_TIMEOUT_MS}")
    connect_args = {"options": " ".join(options)} if options else {}
    return create_engine(
        url,
        echo=settings.SQL_ECHO,
        pool_size=settings.DB_MAX_CONNECTIONS,
        max_overflow=0,
        pool_timeout=settings.DB_POOL_TIMEOUT_SECONDS,
        pool_pre_ping=True,
        connect_args=connect_args,
    )


def create_db_and_tables(engine: Engine):
    """Create the `stories` and `tasks` tables if they do not exist.

    This is enough for local development and tests; production schemas
    should be managed by a proper migration tool.
    """
    SQLModel.metadata.create_all(engine)


def get_session(request: Request):
    """Yield a database `Session` for FastAPI dependency injection.

    The session is bound to the engine held by the running application
    and is closed when the request scope finishes, returning its
    connection to the pool.
    """
    with Session(request.app.state.engine) as session:
        yield session
