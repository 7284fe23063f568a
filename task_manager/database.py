from fastapi import Depends
from sqlmodel import Session, SQLModel, create_engine as sqlmodel_create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool
from contextlib import contextmanager

from .config import DATABASE_URL

# Import all models to ensure they are registered with SQLModel metadata
from .models import Task, User  # noqa: F401


def create_engine(url: str = DATABASE_URL):
    if url.startswith("sqlite"):
        # Repository calls run on worker threads, one session per call.
        return sqlmodel_create_engine(
            url,
            echo=False,
            connect_args={"check_same_thread": False},
        )

    # Postgres and friends: disable pooling for serverless and enable pre-ping
    return sqlmodel_create_engine(
        url,
        echo=False,
        pool_pre_ping=True,
        poolclass=NullPool,
    )


def make_session_factory(bind):
    return sessionmaker(class_=Session, autocommit=False, autoflush=False, expire_on_commit=False, bind=bind)


engine = create_engine()

SessionLocal = make_session_factory(engine)


def get_session_factory():
    """Dependency returning the session factory repositories open sessions from."""
    return SessionLocal


def get_db(session_factory=Depends(get_session_factory)):
    """Dependency to get database session."""
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def get_session(session_factory=None):
    """Get a database session (context manager style).

    This is a convenience function for use outside of FastAPI dependencies.
    Usage:
        with get_session() as session:
            # do something with session
    """
    session = (session_factory or SessionLocal)()
    try:
        yield session
    finally:
        session.close()


def create_tables(bind=None):
    """Create all database tables."""
    SQLModel.metadata.create_all(bind=bind or engine)
