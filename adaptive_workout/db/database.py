"""Database connection and session management."""

from typing import Generator, Optional
from contextlib import contextmanager
from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from ..config import config
from .models import Base


def _is_memory_url(database_url: str) -> bool:
    """True for SQLite URLs that name no database file."""
    database = make_url(database_url).database
    return database in (None, "", ":memory:")


class Database:
    """Database connection manager."""

    def __init__(self, database_url: Optional[str] = None):
        """Initialize database connection."""
        self.database_url = database_url or config.DATABASE_URL

        if self.database_url.startswith("sqlite"):
            # Threads handling different workouts each get their own
            # connection. An in-memory database exists per connection, so it
            # must share a single one.
            engine_args = {
                "connect_args": {"check_same_thread": False, "timeout": config.SQLITE_BUSY_TIMEOUT},
            }
            if _is_memory_url(self.database_url):
                engine_args["poolclass"] = StaticPool
            self.engine = create_engine(self.database_url, echo=False, **engine_args)
        else:
            self.engine = create_engine(self.database_url, echo=False)

        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    def create_tables(self):
        """Create all database tables."""
        Base.metadata.create_all(bind=self.engine)

    @contextmanager
    def get_session(self) -> Generator[Session, None, None]:
        """Get a database session context manager."""
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def close(self):
        """Close database connection."""
        self.engine.dispose()


# Global database instance
_db: Optional[Database] = None


def get_db() -> Database:
    """Get or create the global database instance."""
    global _db
    if _db is None:
        _db = Database()
        _db.create_tables()
    return _db
