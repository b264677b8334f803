# ==============================================================================
# BASE REPOSITORY - Shared database access
# ==============================================================================
# Database owns the engine and a scoped session (one per thread, removed at
# the end of each Flask request). Repositories read and write through that
# session; services decide where a transaction starts and ends.
# ==============================================================================

import logging
from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import scoped_session, sessionmaker
from sqlalchemy.pool import StaticPool

from thrift_pos.errors import StorageError
from thrift_pos.models import Base

logger = logging.getLogger(__name__)


def _is_sqlite_memory(url):
    return url in ("sqlite://", "sqlite:///:memory:") or "mode=memory" in url


class Database:
    """
    Engine plus scoped session for one database URL.

    Usage:
        db = Database("sqlite:///shop.sqlite")
        db.create_all()
        with db.transaction() as session:
            session.add(obj)
    """

    def __init__(self, url, echo=False):
        self.url = url
        engine_kwargs = {"future": True, "echo": echo}

        if url.startswith("sqlite"):
            engine_kwargs["connect_args"] = {"check_same_thread": False}
            if _is_sqlite_memory(url):
                # Every connection must see the same in-memory database
                engine_kwargs["poolclass"] = StaticPool

        self.engine = create_engine(url, **engine_kwargs)

        if url.startswith("sqlite"):
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)

        self.session_factory = sessionmaker(bind=self.engine, expire_on_commit=False)
        self.session = scoped_session(self.session_factory)

    def create_all(self):
        """Creates the tables that do not exist yet."""
        Base.metadata.create_all(self.engine)

    def remove(self):
        """Closes the current thread's session (called at request teardown)."""
        self.session.remove()

    def dispose(self):
        self.session.remove()
        self.engine.dispose()

    @contextmanager
    def transaction(self):
        """
        Runs a block in one transaction.

        Commits on success and rolls back on any error. IntegrityError is
        re-raised unchanged so services can map it to a domain error; other
        database errors become StorageError.
        """
        session = self.session()
        try:
            yield session
            session.commit()
        except IntegrityError:
            session.rollback()
            raise
        except SQLAlchemyError as exc:
            session.rollback()
            logger.exception("Database error, transaction rolled back")
            raise StorageError() from exc
        except Exception:
            session.rollback()
            raise


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON;")
    cursor.close()


class BaseRepository:
    """Base class giving each repository access to the current session."""

    def __init__(self, db: Database):
        self.db = db

    @property
    def session(self):
        return self.db.session()

    def add(self, entity):
        """Adds an entity and flushes so generated values are available."""
        self.session.add(entity)
        self.session.flush()
        return entity

    def delete(self, entity):
        self.session.delete(entity)
        self.session.flush()
