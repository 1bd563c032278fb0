"""Tests for hotelpms.domain.identifiers"""
import re
from datetime import datetime, timezone

import pytest

from hotelpms.domain.identifiers import (
    generate_booking_number, generate_invoice_number, to_base36,
)


class TestBase36:
    @pytest.mark.parametrize("value,expected", [(0, "0"), (35, "Z"), (36, "10"), (1295, "ZZ")])
    def test_encoding(self, value, expected):
        assert to_base36(value) == expected

    def test_negative_rejected(self):
        with pytest.raises(ValueError):
            to_base36(-1)


class TestNumbers:
    NOW = datetime(2024, 3, 5, 9, 30, tzinfo=timezone.utc)

    def test_booking_number_format(self):
        number = generate_booking_number(self.NOW)
        millis = int(self.NOW.timestamp() * 1000)
        assert number.startswith("BK" + to_base36(millis))
        assert re.fullmatch(r"BK[0-9A-Z]+[0-9A-Z]{4}", number)
        assert len(number) == 2 + len(to_base36(millis)) + 4

    def test_booking_numbers_differ(self):
        numbers = {generate_booking_number(self.NOW) for _ in range(20)}
        assert len(numbers) > 1

    def test_invoice_number_format(self):
        number = generate_invoice_number(self.NOW)
        millis = int(self.NOW.timestamp() * 1000)
        assert number == f"INV202403{to_base36(millis)}"
