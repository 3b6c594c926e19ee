import logging
import os

from dotenv import load_dotenv
from sqlalchemy import create_engine, event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, declarative_base, Session

load_dotenv()

logger = logging.getLogger("splitsies")

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./splitsies.db")

# Handle Render's postgres:// -> postgresql://
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql://", 1)

_connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, connect_args=_connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


if engine.dialect.name == "sqlite":
    # SQLite only honours ON DELETE CASCADE with foreign keys switched on
    @event.listens_for(engine, "connect")
    def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def get_db() -> Session:  # type: ignore[misc]
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


class PersistenceFailure(Exception):
    """A write did not commit. The session has been rolled back."""


def commit_or_raise(db: Session, message: str, **log_fields) -> None:
    """Commit, or roll back and raise PersistenceFailure chained to the database error."""
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(message, exc_info=True, extra={"extra_data": log_fields})
        raise PersistenceFailure(message) from e
