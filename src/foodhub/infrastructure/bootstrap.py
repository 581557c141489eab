"""Composition root — wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from functools import lru_cache

from sqlalchemy.orm import sessionmaker

from foodhub.infrastructure.config import Settings
from foodhub.infrastructure.invoice import StaticPartyDirectory, TextInvoiceRenderer
from foodhub.infrastructure.notifications import LoggingNotifier
from foodhub.infrastructure.persistence.database import (
    build_engine,
    build_session_factory,
    init_schema,
)
from foodhub.infrastructure.persistence.unit_of_work import SqlAlchemyUnitOfWork


@lru_cache(maxsize=None)
def settings() -> Settings:
    return Settings.from_env()


@lru_cache(maxsize=None)
def session_factory() -> sessionmaker:
    engine = build_engine(settings().database_url)
    init_schema(engine)
    return build_session_factory(engine)


def unit_of_work() -> SqlAlchemyUnitOfWork:
    return SqlAlchemyUnitOfWork(session_factory())


def notifier() -> LoggingNotifier:
    return LoggingNotifier()


def invoice_renderer() -> TextInvoiceRenderer:
    return TextInvoiceRenderer()


def party_directory() -> StaticPartyDirectory:
    return StaticPartyDirectory()
