"""Engine and session factory construction."""

from __future__ import annotations

from pathlib import Path

from sqlalchemy import Engine, create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker

from foodhub.infrastructure.persistence.tables import Base


def build_engine(database_url: str) -> Engine:
    url = make_url(database_url)
    connect_args: dict = {}
    if url.get_backend_name() == "sqlite":
        # sessions are handed across worker threads; writers wait up to 5s
        connect_args = {"check_same_thread": False, "timeout": 5}
        if url.database and url.database != ":memory:":
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)
    return create_engine(url, pool_pre_ping=True, connect_args=connect_args)


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(
        bind=engine, autoflush=False, autocommit=False, expire_on_commit=False
    )


def init_schema(engine: Engine) -> None:
    """Create any missing tables."""
    Base.metadata.create_all(bind=engine)
