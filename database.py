from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from config import DATABASE_URL


def _is_memory_url(url: str) -> bool:
    return url in ("sqlite://", "sqlite:///:memory:")


if _is_memory_url(DATABASE_URL):
    # Every session must see the same in-memory database, so they share one connection.
    engine = create_engine(
        DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
else:
    engine = create_engine(DATABASE_URL, connect_args={"check_same_thread": False})

SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
Base = declarative_base()


def init_db():
    """Create all tables that do not exist yet."""
    Base.metadata.create_all(bind=engine)


def reset_db():
    """
    Drop and recreate every table. Dropping a table also clears its
    AUTOINCREMENT sequence, so ids restart at 1 afterwards.
    """
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)


# SQLite stores INTEGER values as signed 64-bit numbers.
MAX_INTEGER = 2 ** 63 - 1


def fits_integer_column(value: int) -> bool:
    """Whether ``value`` can be bound to an INTEGER column without overflowing."""
    return -MAX_INTEGER - 1 <= value <= MAX_INTEGER
