import logging
from typing import Generator, Optional

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from lessonbook.core.exceptions import DatabaseUnavailable

logger = logging.getLogger(__name__)

Base = declarative_base()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """
    Process-wide store handle.

    Built once at startup from DATABASE_URL and disposed at shutdown. When no
    URL is configured, or the store could not be reached, ``ready`` is False
    and ``get_db`` answers 503 instead of crashing the process.
    """

    def __init__(self, url: Optional[str]):
        self.url = url
        self.engine: Optional[Engine] = None
        self.SessionLocal: Optional[sessionmaker] = None
        self.ready = False

    def connect(self):
        logger.info("connect: Entry")

        if not self.url:
            logger.warning("connect: DATABASE_URL not set, data routes disabled")
            return

        self.engine = self._create_engine(self.url)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

        # Import models so every table is registered on Base.metadata
        import lessonbook.models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)
        self.ready = True
        logger.info(f"connect: Success - {self.engine.url.render_as_string(hide_password=True)}")

    @staticmethod
    def _create_engine(url: str) -> Engine:
        if url.startswith("sqlite"):
            kwargs = {"connect_args": {"check_same_thread": False}}
            if url in ("sqlite://", "sqlite:///:memory:"):
                # One shared connection, otherwise every session sees an empty database
                kwargs["poolclass"] = StaticPool
            engine = create_engine(url, **kwargs)
            event.listen(engine, "connect", _enable_sqlite_foreign_keys)
            return engine
        return create_engine(url, pool_pre_ping=True)

    def session(self) -> Session:
        if not self.ready:
            raise DatabaseUnavailable()
        return self.SessionLocal()

    def dispose(self):
        if self.engine is not None:
            self.engine.dispose()
            logger.info("dispose: Success")
        self.ready = False


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_db(request: Request) -> Generator[Session, None, None]:
    """Dependency yielding a session bound to the app's database."""
    db = get_database(request).session()
    try:
        yield db
    finally:
        db.close()
