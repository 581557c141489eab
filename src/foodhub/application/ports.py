"""Collaborator ports used by the application layer.

Notification delivery and document rendering live outside this system;
the handlers talk to them only through these interfaces and treat every
failure as non-fatal.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class Notification:
    recipient_id: str
    title: str
    message: str
    related_order_id: int | None = None
    category: str = "order"


class Notifier(ABC):

    @abstractmethod
    def notify(self, notification: Notification) -> None:
        """Hand a notification over for best-effort delivery."""


class PartyDirectory(ABC):

    @abstractmethod
    def display_name(self, user_id: str) -> str:
        """Return a human-readable name (business name) for a user id."""


@dataclass(frozen=True)
class InvoiceLine:
    product_name: str
    unit: str
    quantity: int
    price: str
    line_total: str
    returned: int


@dataclass(frozen=True)
class InvoiceDTO:
    """A fully populated order, ready to be rendered."""

    order_number: str
    issued_on: str
    status: str
    shopkeeper_name: str
    supplier_name: str
    payment_method: str
    payment_status: str
    lines: list[InvoiceLine]
    total_amount: str
    notes: str | None


class InvoiceRenderer(ABC):

    @abstractmethod
    def render(self, invoice: InvoiceDTO) -> str:
        """Produce the human-readable invoice artifact."""
