"""
store.py — Visitor persistence
==============================
Thin wrapper over the relational database: one insert, one liveness
probe, and idempotent schema creation.

Schema creation failing at startup is not fatal. The store remembers
whether the ``visitors`` table is known to exist and every insert made
while it is not first retries the creation, so the service recovers as
soon as the database does.
"""
from __future__ import annotations

import logging
from threading import Lock

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from .config import Settings
from .database import Base, build_engine, make_session_factory, session_scope
from .errors import SchemaNotReady, StoreUnavailable
from .models import Visitor
from .schemas import VisitorRecord, VisitorSubmission

log = logging.getLogger("visitor_service.store")


class VisitorStore:
    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self._sessions = make_session_factory(engine)
        self._schema_lock = Lock()
        self._schema_ready = False

    @classmethod
    def from_settings(cls, settings: Settings) -> "VisitorStore":
        return cls(build_engine(settings))

    @property
    def schema_ready(self) -> bool:
        return self._schema_ready

    def ensure_schema(self) -> bool:
        """Create the visitors table if absent. Returns False (and logs) on failure."""
        with self._schema_lock:
            if self._schema_ready:
                return True
            try:
                Base.metadata.create_all(bind=self.engine, checkfirst=True)
            except SQLAlchemyError:
                log.error("Error initializing database schema", exc_info=True)
                return False
            self._schema_ready = True
        log.info("Database table initialized successfully")
        return True

    def insert(self, submission: VisitorSubmission) -> VisitorRecord:
        """Persist one visitor and return its generated id and timestamp."""
        if not self._schema_ready and not self.ensure_schema():
            raise SchemaNotReady("visitors table is not available")

        try:
            with session_scope(self._sessions) as session:
                row = Visitor(
                    first_name=submission.first_name,
                    company=submission.company,
                    role=submission.role,
                    user_agent=submission.user_agent,
                )
                session.add(row)
                session.flush()
                session.refresh(row)
                record = VisitorRecord.model_validate(row)
        except (SQLAlchemyError, UnicodeError) as exc:
            log.error("Error saving visitor data", exc_info=True)
            raise StoreUnavailable(str(exc)) from exc

        log.info("Saved visitor id=%s", record.id)
        return record

    def probe(self) -> bool:
        """Cheapest possible round trip to the database."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError:
            log.warning("Database health probe failed", exc_info=True)
            return False
        return True

    def dispose(self) -> None:
        """Close every pooled connection."""
        self.engine.dispose()
        log.info("Database connection pool closed")
