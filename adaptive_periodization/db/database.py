"""Engine and session handling for the training history store."""

import logging
from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from ..config import config
from .models import Base

logger = logging.getLogger(__name__)


class Database:
    """Owns the SQLAlchemy engine behind SqlHistoryProvider.

    Rows stay readable after their session closes, so providers can hand
    query results back to callers.
    """

    def __init__(self, database_url: Optional[str] = None):
        self.database_url = database_url or config.DATABASE_URL

        engine_args = {"echo": False}
        if self.database_url.startswith("sqlite"):
            engine_args["connect_args"] = {"check_same_thread": False}
            if ":memory:" in self.database_url or self.database_url in ("sqlite://", "sqlite:///"):
                # One shared connection, otherwise each session sees an empty database
                engine_args["poolclass"] = StaticPool
        self.engine = create_engine(self.database_url, **engine_args)

        self.SessionLocal = sessionmaker(
            autocommit=False, autoflush=False, expire_on_commit=False, bind=self.engine
        )

    def create_tables(self):
        """Create the check-in, session, set log and alert tables if missing."""
        Base.metadata.create_all(bind=self.engine)

    @contextmanager
    def get_session(self) -> Generator[Session, None, None]:
        """Unit of work: commits on success, rolls back and re-raises on error."""
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def close(self):
        self.engine.dispose()


# Process-wide history store used by the CLI
_db: Optional[Database] = None


def get_db() -> Database:
    """Return the shared history database, creating its tables on first use."""
    global _db
    if _db is None:
        _db = Database()
        _db.create_tables()
        logger.debug(f"Opened history database {_db.database_url}")
    return _db


def close_db():
    global _db
    if _db is not None:
        _db.close()
        _db = None
