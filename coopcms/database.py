"""
Database access - SQLAlchemy engine, session factory and request-scoped sessions.
"""
import os
import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from fastapi import Request
from sqlalchemy import create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from coopcms.config import Config
from coopcms.core.errors import StorageError

logger = logging.getLogger(__name__)

Base = declarative_base()


class Database:
    """Owns one engine and its session factory."""

    def __init__(self, url: Optional[str] = None, echo: Optional[bool] = None):
        self.url = url or Config.DATABASE_URL
        engine_kwargs = {"echo": Config.SQL_ECHO if echo is None else echo, "future": True}

        if self.url.startswith("sqlite"):
            engine_kwargs["connect_args"] = {"check_same_thread": False}
            if not Config.sqlite_path(self.url):
                # one shared connection, otherwise every checkout sees an empty database
                engine_kwargs["poolclass"] = StaticPool
            else:
                directory = os.path.dirname(Config.sqlite_path(self.url))
                if directory:
                    os.makedirs(directory, exist_ok=True)

        self.engine = create_engine(self.url, **engine_kwargs)
        self.session_factory = sessionmaker(
            bind=self.engine,
            autoflush=True,
            expire_on_commit=False,
        )

    def create_all(self) -> None:
        # models register themselves on Base at import time
        import coopcms.models.entities  # noqa: F401
        Base.metadata.create_all(self.engine)

    def drop_all(self) -> None:
        Base.metadata.drop_all(self.engine)

    def ping(self) -> bool:
        try:
            with self.engine.connect() as connection:
                connection.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.error(f"[Database] Ping failed: {type(e).__name__}")
            return False

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Transactional scope: commit on success, rollback on any error."""
        session = self.session_factory()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            raise StorageError(f"Database operation failed: {type(e).__name__}") from e
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def dispose(self) -> None:
        self.engine.dispose()


def get_session(request: Request) -> Iterator[Session]:
    """FastAPI dependency yielding the request's session."""
    database: Database = request.app.state.database
    with database.session_scope() as session:
        yield session
