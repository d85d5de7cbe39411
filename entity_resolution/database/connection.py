"""Engine and session handling for the article record store"""

import logging
import os
from contextlib import contextmanager
from typing import Generator

from dotenv import load_dotenv
from sqlalchemy import Engine, create_engine, event, text
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, sessionmaker

logger = logging.getLogger(__name__)

load_dotenv()

DEFAULT_DATABASE_URL = "sqlite:///entity_resolution.db"


def get_database_url() -> str:
    """
    Database URL of the record store.

    DATABASE_URL from the environment (or a .env file) wins; a plain postgresql://
    URL is switched to the psycopg driver (install the "postgres" extra). Without
    DATABASE_URL the store is a SQLite file in the working directory.

    Returns:
        SQLAlchemy database URL
    """
    url = os.getenv("DATABASE_URL", "").strip()
    if not url:
        return DEFAULT_DATABASE_URL
    if url.startswith("postgresql://"):
        return "postgresql+psycopg://" + url[len("postgresql://") :]
    return url


DATABASE_URL = get_database_url()


def _enforce_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    # SQLite ignores REFERENCES unless asked per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def get_engine(echo: bool = False, url: str | None = None) -> Engine:
    """
    Create an engine for the record store.

    SQLite engines may be shared across threads and enforce the articles ->
    suppliers foreign key.

    Args:
        echo: If True, SQL statements will be logged
        url: Database URL; defaults to DATABASE_URL

    Returns:
        SQLAlchemy Engine instance
    """
    url = url or DATABASE_URL
    is_sqlite = make_url(url).get_backend_name() == "sqlite"

    engine = create_engine(
        url,
        echo=echo,
        connect_args={"check_same_thread": False} if is_sqlite else {},
    )
    if is_sqlite:
        event.listen(engine, "connect", _enforce_sqlite_foreign_keys)
    return engine


SessionLocal = sessionmaker(autocommit=False, autoflush=False)


@contextmanager
def get_db_session(engine: Engine | None = None) -> Generator[Session, None, None]:
    """
    Session scope: commit when the block finishes, roll back and re-raise on error.

    Args:
        engine: Engine to bind; a new default engine when None

    Yields:
        SQLAlchemy Session
    """
    session = SessionLocal(bind=engine or get_engine())
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def check_connection(engine: Engine | None = None) -> bool:
    """
    Run a trivial query against the database.

    Returns:
        True if the database answered, False otherwise (the error is logged)
    """
    engine = engine or get_engine()
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.error("Database connection to %s failed: %s", engine.url.render_as_string(), e)
        return False
    return True
