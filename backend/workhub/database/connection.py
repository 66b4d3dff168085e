"""
Database connection management for WorkHub.

The engine and session factory live on a Database handle that the app
factory builds once at process start and reuses for every request.
"""
import os
from typing import Generator, Optional
from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from .models import Base

# Database configuration
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./workhub.db")
SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() == "true"


# Enable foreign key constraints for SQLite
@event.listens_for(Engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    """Enable foreign key constraints for SQLite connections."""
    if "sqlite" in type(dbapi_connection).__module__:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


class Database:
    """Engine + session factory pair with an explicit lifecycle."""

    def __init__(self, url: Optional[str] = None, echo: bool = SQL_ECHO):
        self.url = url or DATABASE_URL
        is_sqlite = self.url.startswith("sqlite")
        in_memory = is_sqlite and (":memory:" in self.url or self.url in ("sqlite://", "sqlite:///"))
        self.engine = create_engine(
            self.url,
            echo=echo,
            poolclass=StaticPool if in_memory else None,
            connect_args={"check_same_thread": False} if is_sqlite else {}
        )
        self.session_factory = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    def create_tables(self):
        """Create all database tables."""
        Base.metadata.create_all(bind=self.engine)

    def drop_tables(self):
        """Drop all database tables."""
        Base.metadata.drop_all(bind=self.engine)

    def session(self) -> Session:
        return self.session_factory()

    def ping(self) -> bool:
        with self.engine.connect() as connection:
            return connection.execute(text("SELECT 1")).scalar() == 1

    def dispose(self):
        self.engine.dispose()


# PUBLIC_INTERFACE
def session_scope(database: Database) -> Generator[Session, None, None]:
    """
    Yield a session from the given database and close it afterwards.

    Args:
        database: Process-wide database handle

    Yields:
        Session: SQLAlchemy database session
    """
    db = database.session()
    try:
        yield db
    finally:
        db.close()
