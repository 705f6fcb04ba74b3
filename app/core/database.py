"""PostgreSQL connection, session management and transaction scope."""

from collections.abc import Generator, Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from app.core.config import settings


def _connect_args() -> dict[str, str]:
    if settings.DB_STATEMENT_TIMEOUT_MS > 0:
        return {"options": f"-c statement_timeout={settings.DB_STATEMENT_TIMEOUT_MS}"}
    return {}


engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
    pool_size=settings.DB_POOL_SIZE,
    connect_args=_connect_args(),
    echo=settings.DEBUG,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Dependency that yields a DB session and closes it when done."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """
    Run a block as one unit of work on the session's connection.

    Commits when the block exits normally. Any exception raised inside the
    block, including business-rule errors, rolls the transaction back and is
    re-raised unchanged.
    """
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise


def check_db_connected(db: Session) -> bool:
    """Run a trivial query to verify the database is reachable."""
    try:
        db.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError:
        return False
