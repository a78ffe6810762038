"""Database connection management and schema creation."""

import logging
import os
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, text
from sqlalchemy.engine import URL, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from .models import Base

log = logging.getLogger(__name__)

PASSWORD = "password"


def get_env(key, default):
    """Return the environment variable ``key``, or ``default`` if unset or empty."""
    value = os.environ.get(key)
    return value if value else default


def _db_password():
    return get_env("DB_PASSWORD", PASSWORD)


def build_database_url(dbname):
    """Build a PostgreSQL URL for ``dbname`` from the DB_* environment variables."""
    url = URL.create(
        "postgresql",
        username=get_env("DB_USER", "postgres"),
        password=_db_password(),
        host=get_env("DB_HOST", "localhost"),
        port=int(get_env("DB_PORT", "5432")),
        database=dbname,
        query={"sslmode": "disable"},
    )
    return url.render_as_string(hide_password=False)


def _ensure_database(dbname: str) -> None:
    admin = create_engine(build_database_url("postgres"), isolation_level="AUTOCOMMIT")
    try:
        with admin.connect() as conn:
            exists = bool(
                conn.execute(
                    text("SELECT EXISTS(SELECT 1 FROM pg_database WHERE datname = :name)"),
                    {"name": dbname},
                ).scalar()
            )
            if not exists:
                quoted = conn.dialect.identifier_preparer.quote(dbname)
                try:
                    conn.execute(text(f"CREATE DATABASE {quoted}"))
                except SQLAlchemyError as exc:
                    raise RuntimeError(f"database creation failed: {exc}") from exc
                log.info("Database %s created", dbname)
    except SQLAlchemyError as exc:
        raise RuntimeError(f"database existence check failed: {exc}") from exc
    finally:
        admin.dispose()


class DatabaseService:
    """Owns the engine and hands out transactional sessions."""

    def __init__(self, url):
        parsed = make_url(url)
        options = {}
        if parsed.get_backend_name() == "sqlite" and parsed.database in (None, "", ":memory:"):
            options = {
                "poolclass": StaticPool,
                "connect_args": {"check_same_thread": False},
            }
        self.engine = create_engine(parsed, **options)
        self._sessions = sessionmaker(self.engine, expire_on_commit=False)
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            self.engine.dispose()
            raise RuntimeError(f"database connection failed: {exc}") from exc
        log.info("Successfully connected to database")

    @classmethod
    def from_env(cls):
        """Connect using DATABASE_URL, or the DB_* variables, creating the database if needed."""
        override = get_env("DATABASE_URL", "")
        if override:
            return cls(override)
        dbname = get_env("DB_NAME", "crypto_tracker")
        _ensure_database(dbname)
        return cls(build_database_url(dbname))

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Yield a session that commits on success and rolls back on error."""
        session = self._sessions()
        try:
            yield session
            session.commit()
        except BaseException:
            session.rollback()
            raise
        finally:
            session.close()

    def create_tables(self):
        """Create the tables and indexes that do not exist yet."""
        try:
            Base.metadata.create_all(self.engine)
        except SQLAlchemyError as exc:
            raise RuntimeError(f"failed to create tables: {exc}") from exc
        log.info("Tables created successfully")

    def close(self):
        """Release all pooled connections."""
        self.engine.dispose()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()