import logging

import pytest

from foodhub.infrastructure import bootstrap
from foodhub.infrastructure.persistence.database import (
    build_engine,
    build_session_factory,
    init_schema,
)
from foodhub.infrastructure.persistence.unit_of_work import SqlAlchemyUnitOfWork


@pytest.fixture(scope="function")
def session_factory(tmp_path):
    """A fresh SQLite file per test; file-backed so separate sessions really are separate."""
    engine = build_engine(f"sqlite:///{tmp_path / 'foodhub.sqlite3'}")
    init_schema(engine)
    try:
        yield build_session_factory(engine)
    finally:
        engine.dispose()


@pytest.fixture
def uow(session_factory):
    return SqlAlchemyUnitOfWork(session_factory)


@pytest.fixture
def cli_env(tmp_path, monkeypatch):
    """Point the CLI's composition root at a throwaway database."""
    monkeypatch.setenv("FOODHUB_DATABASE_URL", f"sqlite:///{tmp_path / 'cli.sqlite3'}")
    monkeypatch.setenv("FOODHUB_LOG_LEVEL", "WARNING")
    bootstrap.settings.cache_clear()
    bootstrap.session_factory.cache_clear()
    try:
        yield
    finally:
        bootstrap.settings.cache_clear()
        bootstrap.session_factory.cache_clear()
        logger = logging.getLogger("foodhub")
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
