from __future__ import annotations

import logging
from pathlib import Path

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from .settings import settings

logger = logging.getLogger("cookbook.db")

ALEMBIC_DIR = Path(__file__).resolve().parents[1] / "alembic"


class Base(DeclarativeBase):
    pass


_engine = None
_SessionLocal = None


def enable_sqlite_foreign_keys(engine: Engine) -> None:
    """SQLite only enforces REFERENCES clauses when asked to, per connection."""
    if engine.dialect.name != "sqlite":
        return

    @event.listens_for(engine, "connect")
    def _set_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def init_engine(database_url: str | None = None):
    global _engine, _SessionLocal
    url = database_url or settings.database_url
    logger.info(f"Connecting to database {url}")
    _engine = create_engine(url, pool_pre_ping=True)
    enable_sqlite_foreign_keys(_engine)
    _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=_engine)
    return _engine


def SessionLocal():
    global _SessionLocal
    if _SessionLocal is None:
        init_engine()
    return _SessionLocal


def get_db():
    db = SessionLocal()()
    try:
        yield db
    finally:
        db.close()


def run_migrations(database_url: str | None = None, revision: str = "head") -> None:
    """Upgrade the schema with the bundled Alembic revisions."""
    from alembic import command
    from alembic.config import Config

    url = database_url or settings.database_url
    cfg = Config()
    cfg.set_main_option("script_location", str(ALEMBIC_DIR))
    # configparser interpolation treats % specially
    cfg.set_main_option("sqlalchemy.url", url.replace("%", "%%"))
    logger.info(f"Upgrading schema to {revision}")
    command.upgrade(cfg, revision)


def dialect_insert(db, table):
    """INSERT construct with ON CONFLICT support for the session's backend."""
    from sqlalchemy.dialects.postgresql import insert as pg_insert
    from sqlalchemy.dialects.sqlite import insert as sqlite_insert

    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        return pg_insert(table)
    if dialect == "sqlite":
        return sqlite_insert(table)
    raise NotImplementedError(f"ON CONFLICT inserts are not supported on {dialect}")
