"""Unit tests for order number generation."""

import re
from datetime import datetime, timezone

from foodhub.domain.service.order_number import OrderNumberGenerator


class TestOrderNumberGenerator:

    def test_format(self):
        gen = OrderNumberGenerator(suffix_source=lambda: 42)
        number = gen.generate(datetime(2026, 3, 15, tzinfo=timezone.utc))
        assert number == "ORD26030042"

    def test_random_suffix_shape(self):
        number = OrderNumberGenerator().generate(datetime(2026, 11, 1, tzinfo=timezone.utc))
        assert re.fullmatch(r"ORD2611\d{4}", number)

    def test_suffix_wraps_to_four_digits(self):
        gen = OrderNumberGenerator(suffix_source=lambda: 12345)
        assert gen.generate(datetime(2026, 1, 1)) == "ORD26012345"
