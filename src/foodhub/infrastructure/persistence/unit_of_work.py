"""SQLAlchemy unit of work: one Session, one transaction per coordinator call."""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.orm.exc import StaleDataError

from foodhub.domain.exceptions import (
    ConflictError,
    DomainException,
    DuplicateOrderNumberError,
)
from foodhub.domain.repository.unit_of_work import UnitOfWork
from foodhub.infrastructure.persistence.sqlalchemy_repositories import (
    SqlAlchemyOrderRepository,
    SqlAlchemyProductRepository,
)

logger = logging.getLogger(__name__)


def translate_storage_error(exc: SQLAlchemyError) -> DomainException:
    """Map a storage failure onto the domain taxonomy, hiding engine detail."""
    if isinstance(exc, StaleDataError):
        logger.warning("Optimistic lock failure: %s", exc)
        return ConflictError("The order was modified concurrently; reload and retry")
    if isinstance(exc, IntegrityError):
        if "order_number" in str(exc.orig):
            return DuplicateOrderNumberError("Order number is already taken")
        logger.warning("Integrity error: %s", exc.orig)
        return ConflictError("The change conflicts with stored data")
    if isinstance(exc, OperationalError):
        logger.warning("Database busy or unavailable: %s", exc.orig)
        return ConflictError("The store is busy; retry the operation")
    logger.error("Unexpected storage error: %s", exc)
    return ConflictError("The operation could not be stored; retry")


class SqlAlchemyUnitOfWork(UnitOfWork):
    """Opens a fresh Session on every ``with`` block.

    The same instance can be entered again for the next call, but not by
    two threads at once; give every worker its own instance.
    """

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory
        self._session: Session | None = None

    def __enter__(self) -> SqlAlchemyUnitOfWork:
        self._session = self._session_factory()
        self.products = SqlAlchemyProductRepository(self._session)
        self.orders = SqlAlchemyOrderRepository(self._session)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            self.rollback()
        finally:
            self._session.close()  # type: ignore[union-attr]
            self._session = None
        if isinstance(exc, SQLAlchemyError):
            raise translate_storage_error(exc) from exc

    def commit(self) -> None:
        try:
            self._session.commit()  # type: ignore[union-attr]
        except SQLAlchemyError as exc:
            raise translate_storage_error(exc) from exc

    def rollback(self) -> None:
        if self._session is not None:
            self._session.rollback()
