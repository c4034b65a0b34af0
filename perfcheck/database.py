import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

# Base class for all models
Base = declarative_base()


def make_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Build an engine for the configured database.

    SQLite connections are shared across threads because store calls run in
    the worker thread pool; in-memory SQLite keeps a single connection so the
    schema survives between sessions.
    """
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, echo=echo, future=True, **kwargs)

    return create_engine(
        database_url,
        echo=echo,
        pool_pre_ping=True,              # Detect broken connections
        pool_recycle=1800,
        pool_size=5,
        max_overflow=10,
        future=True,
    )


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        future=True,
    )


def init_db(engine: Engine) -> None:
    """Create tables if they don't exist."""
    # Import all models so they register with Base.metadata
    from . import models  # noqa: F401

    logger.info("Creating database tables if they don't exist...")
    Base.metadata.create_all(bind=engine)
