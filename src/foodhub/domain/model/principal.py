"""The calling principal, as supplied by the identity collaborator."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from foodhub.domain.exceptions import ValidationError


class Role(Enum):
    SHOPKEEPER = "shopkeeper"
    SUPPLIER = "supplier"
    SUPERADMIN = "superadmin"


@dataclass(frozen=True)
class Principal:
    """Who is calling.  Trusted as-is; authentication happens upstream."""

    user_id: str
    role: Role

    def __post_init__(self) -> None:
        if not self.user_id or not self.user_id.strip():
            raise ValidationError("Caller id is required")
