"""Database initialization for PenPard."""

from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from penpard.db.models import Base


def get_engine(db_path: Path):
    """Create a SQLite engine usable from worker threads."""
    return create_engine(
        f"sqlite:///{db_path}",
        echo=False,
        connect_args={"check_same_thread": False},
    )


def init_db(db_path: Path) -> None:
    """Initialize the SQLite database with all tables."""
    db_path.parent.mkdir(parents=True, exist_ok=True)
    engine = get_engine(db_path)
    Base.metadata.create_all(engine)
    engine.dispose()


def get_session(db_path: Path):
    """Get a database session."""
    Session = sessionmaker(bind=get_engine(db_path))
    return Session()
