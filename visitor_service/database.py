from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import URL, Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from .config import Settings


class Base(DeclarativeBase):
    pass


def database_url(settings: Settings) -> URL | str:
    """DATABASE_URL when given, otherwise the URL built from the POSTGRES_* settings."""
    if settings.database_url:
        return settings.database_url
    return URL.create(
        "postgresql+psycopg",
        username=settings.postgres_user,
        password=settings.postgres_password,
        host=settings.postgres_host,
        port=settings.postgres_port,
        database=settings.postgres_db,
    )


def build_engine(settings: Settings) -> Engine:
    """
    Create the engine and its bounded connection pool.

    The pool never grows past ``db_pool_size``; callers beyond that wait
    for a connection to be returned.
    """
    url = database_url(settings)
    if str(url).startswith("sqlite"):
        return create_engine(
            url,
            echo=settings.log_sql,
            future=True,
            connect_args={"check_same_thread": False},
        )
    return create_engine(
        url,
        echo=settings.log_sql,
        future=True,
        pool_size=settings.db_pool_size,
        max_overflow=0,
        # Replaces connections by age on checkout; SQLAlchemy has no idle timeout.
        pool_recycle=settings.db_pool_recycle_seconds,
        pool_timeout=settings.db_pool_timeout_seconds,
        connect_args={"connect_timeout": settings.db_connect_timeout_seconds},
    )


def make_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)


@contextmanager
def session_scope(factory: sessionmaker[Session]) -> Iterator[Session]:
    """Context-manager style session with automatic commit/rollback."""
    session: Session = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
