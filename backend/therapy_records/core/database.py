"""
Record store handle.

Owns the SQLAlchemy engine and session factory for one datastore. The handle is
constructed explicitly and passed to the services that need it; nothing in the
package reaches for a module-level connection.
"""
import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from ..models.base import Base
from .config import settings
from .errors import StorageError

logger = logging.getLogger(__name__)


class RecordStore:
    """Lifecycle: ``open()`` before use, ``close()`` when done.

    ``transaction()`` yields a session whose work is committed as one unit or
    rolled back entirely.
    """

    def __init__(self, database_url: Optional[str] = None, echo: Optional[bool] = None):
        self.database_url = database_url or settings.DATABASE_URL
        self.echo = settings.SQL_ECHO if echo is None else echo
        self._engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise StorageError("Record store is not open")
        return self._engine

    def open(self) -> "RecordStore":
        if self._engine is not None:
            return self

        kwargs = {"echo": self.echo}
        if self.database_url.startswith("sqlite"):
            kwargs["connect_args"] = {"check_same_thread": False}
            # An in-memory database only lives as long as its single connection.
            if ":memory:" in self.database_url or self.database_url in ("sqlite://", "sqlite:///"):
                kwargs["poolclass"] = StaticPool

        self._engine = create_engine(self.database_url, **kwargs)
        self._session_factory = sessionmaker(
            bind=self._engine, autocommit=False, autoflush=False, expire_on_commit=False
        )
        try:
            # NOTE: deployments that track schema changes should run Alembic instead
            Base.metadata.create_all(bind=self._engine)
        except SQLAlchemyError as exc:
            self.close()
            raise StorageError(f"Could not initialise schema: {exc}") from exc

        logger.info("Record store opened (%s)", self._engine.url.render_as_string(hide_password=True))
        return self

    def close(self) -> None:
        if self._engine is None:
            return
        self._engine.dispose()
        self._engine = None
        self._session_factory = None
        logger.info("Record store closed")

    def session(self) -> Session:
        if self._session_factory is None:
            raise StorageError("Record store is not open")
        return self._session_factory()

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        db = self.session()
        try:
            yield db
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            logger.exception("Storage operation failed")
            raise StorageError(f"Storage operation failed: {exc.__class__.__name__}") from exc
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def __enter__(self) -> "RecordStore":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
