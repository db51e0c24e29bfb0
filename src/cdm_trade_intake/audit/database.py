"""Engine and session handling for the intake audit store."""

import logging
import os
from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from .models import Base

logger = logging.getLogger(__name__)

DATABASE_URL_ENV = "CDM_INTAKE_DATABASE_URL"
DEFAULT_DATABASE_URL = "sqlite:///cdm_intake_audit.db"


def get_database_url(default: str = DEFAULT_DATABASE_URL) -> str:
    """Audit database URL: CDM_INTAKE_DATABASE_URL if set, else a local SQLite file."""
    return os.environ.get(DATABASE_URL_ENV) or default


class DatabaseManager:
    """
    Owns the audit engine and hands out sessions.

    The engine is created on first use. Server databases get a small
    pre-pinged pool; SQLite uses SQLAlchemy's default pool.
    """

    def __init__(self, database_url: Optional[str] = None, pool_size: int = 2, echo: bool = False):
        self._database_url = database_url or get_database_url()
        self._pool_size = pool_size
        self._echo = echo
        self._engine: Optional[Engine] = None
        self._sessions: Optional[sessionmaker] = None

    @property
    def database_url(self) -> str:
        return self._database_url

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            options = {"echo": self._echo}
            if not self._database_url.startswith("sqlite"):
                options.update(pool_size=self._pool_size, pool_pre_ping=True)
            self._engine = create_engine(self._database_url, **options)
            logger.debug(f"Created audit engine for {self._engine.url.render_as_string(hide_password=True)}")
        return self._engine

    @contextmanager
    def get_session(self) -> Generator[Session, None, None]:
        """
        Session scope: commit on normal exit, roll back and re-raise on error.

        Example:
            with db_manager.get_session() as session:
                session.add(model)
        """
        if self._sessions is None:
            self._sessions = sessionmaker(bind=self.engine, expire_on_commit=False)
        session = self._sessions()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def init_database(self) -> None:
        """Create the audit table if it does not exist yet."""
        Base.metadata.create_all(self.engine)

    def close(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            self._sessions = None

    def health_check(self) -> bool:
        """True when a trivial query against the audit store succeeds."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.warning(f"Audit database health check failed: {e}")
            return False
