from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, Generator

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from .errors import DatabaseUnavailableError

logger = logging.getLogger(__name__)


def _engine_options(url: str) -> Dict[str, Any]:
    parsed = make_url(url)
    options: Dict[str, Any] = {}
    if parsed.get_backend_name() == "sqlite":
        # Sessions are handed out across FastAPI's worker threads
        options["connect_args"] = {"check_same_thread": False}
        if parsed.database in (None, "", ":memory:"):
            # One shared connection, otherwise every session sees an empty database
            options["poolclass"] = StaticPool
    else:
        options["pool_pre_ping"] = True
    return options


# PUBLIC_INTERFACE
class Database:
    """
    Persistence-access object owning the SQLAlchemy engine and session factory.

    Built once at startup and handed to the application factory; request
    handlers get sessions from it through a FastAPI dependency.
    """

    def __init__(self, url: str, echo: bool = False) -> None:
        self._url = url
        self._engine: Engine = create_engine(url, echo=echo, **_engine_options(url))
        self._session_factory = sessionmaker(
            bind=self._engine, autoflush=False, expire_on_commit=False
        )

    @property
    def url(self) -> str:
        return self._url

    @property
    def engine(self) -> Engine:
        return self._engine

    @property
    def backend_name(self) -> str:
        """Dialect name, e.g. 'mysql' or 'sqlite'."""
        return self._engine.dialect.name

    @property
    def safe_url(self) -> str:
        """Connection URL with the password masked, for logs."""
        return self._engine.url.render_as_string(hide_password=True)

    def connect(self) -> None:
        """
        Verify the database is reachable.

        Raises:
            DatabaseUnavailableError: if a round trip to the server fails.
        """
        try:
            with self._engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            logger.error("Could not connect to database %s: %s", self.safe_url, e)
            raise DatabaseUnavailableError(f"Could not connect to database {self.safe_url}") from e
        logger.info("Connected to database %s", self.safe_url)

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """
        Per-request session: roll back anything uncommitted on error, always close.

        Writers commit themselves (see `TodoRepository`) so the outcome is known
        before the response is sent.
        """
        session = self._session_factory()
        try:
            yield session
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def dispose(self) -> None:
        """Release pooled connections."""
        self._engine.dispose()
        logger.info("Closed database connections")
