import logging
import os
from typing import Any, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from robotops.db.base import Base

logger = logging.getLogger(__name__)

DB_URL = os.getenv("DB_URL")
DB_HOST = os.getenv("DB_HOST") or "localhost"
DB_PORT = os.getenv("DB_PORT") or 5432
DB_DATABASE_NAME = os.getenv("DB_DATABASE_NAME")
DB_USERNAME = os.getenv("DB_USERNAME")
DB_PASSWORD = os.getenv("DB_PASSWORD")


def database_url_from_environment() -> str:
    """
    Build the SQLAlchemy URL for the application database.

    ``DB_URL`` wins when it is set. Otherwise a PostgreSQL URL is assembled from the individual
    ``DB_*`` variables.
    """
    if DB_URL:
        return DB_URL

    return f"postgresql://{DB_USERNAME}:{DB_PASSWORD}@{DB_HOST}:{DB_PORT}/{DB_DATABASE_NAME}"


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    # SQLite leaves foreign key enforcement (and so ON DELETE CASCADE) off unless asked per connection.
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """
    Owner of the engine and session factory for one database.

    The handle is constructed explicitly by the process that uses it, opened at startup and closed at
    shutdown. Operations never reach for a global engine; they receive a :class:`Session` produced here.
    """

    def __init__(self, url: str, **engine_options: Any):
        self.url = url
        self.engine_options = engine_options
        self.engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None

    @classmethod
    def from_environment(cls, **engine_options: Any) -> "Database":
        return cls(database_url_from_environment(), **engine_options)

    @property
    def is_open(self) -> bool:
        return self.engine is not None

    def open(self) -> "Database":
        if self.engine is not None:
            return self

        connect_args = {}
        if self.url.startswith("sqlite"):
            connect_args["check_same_thread"] = False

        self.engine = create_engine(self.url, connect_args=connect_args, **self.engine_options)
        if self.engine.dialect.name == "sqlite":
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)

        self._session_factory = sessionmaker(autoflush=False, bind=self.engine)
        logger.debug(msg=f"Opened database engine for dialect {self.engine.dialect.name}.")
        return self

    def close(self) -> None:
        if self.engine is None:
            return

        self.engine.dispose()
        self.engine = None
        self._session_factory = None
        logger.debug(msg="Closed database engine.")

    def session(self) -> Session:
        if self._session_factory is None:
            raise RuntimeError("The database handle must be opened before sessions can be created.")

        return self._session_factory()

    def create_schema(self) -> None:
        """Create all tables for a fresh database. Schema migration is handled outside this package."""
        if self.engine is None:
            raise RuntimeError("The database handle must be opened before the schema can be created.")

        Base.metadata.create_all(bind=self.engine)

    def drop_schema(self) -> None:
        if self.engine is None:
            raise RuntimeError("The database handle must be opened before the schema can be dropped.")

        Base.metadata.drop_all(bind=self.engine)

    def __enter__(self) -> "Database":
        return self.open()

    def __exit__(self, *exc_info) -> None:
        self.close()
