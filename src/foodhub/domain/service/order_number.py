"""Domain service: human-readable order numbers.

Format: ``ORD`` + two-digit year + two-digit month + four random digits,
e.g. ``ORD26100042``.  With only 10,000 suffixes per month, collisions
do happen; the create-order handler retries on a duplicate.
"""

from __future__ import annotations

import random
from datetime import datetime
from typing import Callable

ORDER_NUMBER_PREFIX = "ORD"

SuffixSource = Callable[[], int]


def random_suffix() -> int:
    return random.randrange(10_000)


class OrderNumberGenerator:

    def __init__(
        self,
        prefix: str = ORDER_NUMBER_PREFIX,
        suffix_source: SuffixSource = random_suffix,
    ) -> None:
        self._prefix = prefix
        self._suffix_source = suffix_source

    def generate(self, now: datetime) -> str:
        suffix = self._suffix_source() % 10_000
        return f"{self._prefix}{now:%y}{now:%m}{suffix:04d}"
