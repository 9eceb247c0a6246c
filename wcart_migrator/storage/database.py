"""Database engine and session management."""

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from .tables import Base

logger = logging.getLogger(__name__)

_MEMORY_URLS = ("sqlite://", "sqlite:///:memory:")


class Database:
    """
    Owns the SQLAlchemy engine for the migration tables.

    Every store operation runs inside :meth:`session`, which commits on
    success and rolls back on any exception, so each call is one
    transaction.
    """

    def __init__(self, url: str, echo: bool = False):
        """
        Initialize the database.

        Args:
            url: SQLAlchemy database URL (sqlite, postgresql, mysql, ...)
            echo: Log emitted SQL
        """
        self.url = url
        self.engine = self._create_engine(url, echo)
        self._session_factory = sessionmaker(bind=self.engine, expire_on_commit=False)

    def _create_engine(self, url: str, echo: bool) -> Engine:
        if url in _MEMORY_URLS:
            # One shared connection, otherwise each checkout sees an empty database
            return create_engine(
                url,
                echo=echo,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        if url.startswith("sqlite"):
            return create_engine(url, echo=echo, connect_args={"check_same_thread": False})
        return create_engine(url, echo=echo, pool_pre_ping=True)

    def create_all(self) -> None:
        """Create all tables that do not exist yet."""
        Base.metadata.create_all(self.engine)
        logger.info(f"Database schema ready at {self.engine.url.render_as_string(hide_password=True)}")

    def drop_all(self) -> None:
        """Drop all migration tables."""
        Base.metadata.drop_all(self.engine)

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Provide a transactional session."""
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def dispose(self) -> None:
        """Close all pooled connections."""
        self.engine.dispose()
