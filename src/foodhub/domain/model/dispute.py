"""Dispute records embedded in an order.

A dispute has no identity of its own; it is reached through its parent
order's ``disputes`` list by index.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from foodhub.domain.exceptions import InvalidTransitionError, ValidationError


class DisputeStatus(Enum):
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    REJECTED = "rejected"


DISPUTE_TRANSITIONS: dict[DisputeStatus, frozenset[DisputeStatus]] = {
    DisputeStatus.OPEN: frozenset(
        {DisputeStatus.IN_PROGRESS, DisputeStatus.RESOLVED, DisputeStatus.REJECTED}
    ),
    DisputeStatus.IN_PROGRESS: frozenset(
        {DisputeStatus.RESOLVED, DisputeStatus.REJECTED}
    ),
    DisputeStatus.RESOLVED: frozenset(),
    DisputeStatus.REJECTED: frozenset(),
}

# Entering one of these stamps resolved_by / resolved_at.
CLOSING_STATUSES = frozenset({DisputeStatus.RESOLVED, DisputeStatus.REJECTED})


@dataclass
class Dispute:
    description: str
    raised_by: str
    raised_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    status: DisputeStatus = DisputeStatus.OPEN
    resolved_by: str | None = None
    resolved_at: datetime | None = None

    @staticmethod
    def raise_new(description: str, raised_by: str, at: datetime) -> Dispute:
        if not description or not description.strip():
            raise ValidationError("Dispute description is required")
        return Dispute(description=description.strip(), raised_by=raised_by, raised_at=at)

    def transition(self, new_status: DisputeStatus, actor: str, at: datetime) -> None:
        if new_status not in DISPUTE_TRANSITIONS[self.status]:
            raise InvalidTransitionError(
                f"Cannot move dispute from {self.status.value} to {new_status.value}"
            )
        self.status = new_status
        if new_status in CLOSING_STATUSES:
            self.resolved_by = actor
            self.resolved_at = at
