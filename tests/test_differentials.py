"""
Tests for derived room pricing.
"""

from decimal import Decimal
from types import SimpleNamespace

import pytest

from rate_manager.services.differentials import calculate_differential


def rule(room_type_id, operator, value):
    return SimpleNamespace(room_type_id=room_type_id, operator=operator, value_percent=Decimal(value))


RULES = [rule('502', '+', '20'), rule('503', '-', '10'), rule('504', '-', '100')]


class TestCalculateDifferential:

    def test_premium_room(self):
        assert calculate_differential(Decimal('100'), '502', RULES) == Decimal('120.00')

    def test_discount_room(self):
        assert calculate_differential(Decimal('100'), '503', RULES) == Decimal('90.00')

    def test_result_is_rounded_to_cents(self):
        assert calculate_differential(Decimal('99.99'), '502', RULES) == Decimal('119.99')

    def test_room_without_rule_gets_base_rate(self):
        assert calculate_differential(Decimal('100'), '999', RULES) == Decimal('100')

    def test_room_type_id_compared_as_string(self):
        assert calculate_differential(Decimal('100'), 502, RULES) == Decimal('120.00')

    @pytest.mark.parametrize('base', [None, Decimal('0'), Decimal('-10')])
    def test_invalid_base_gives_none(self, base):
        assert calculate_differential(base, '502', RULES) is None

    def test_non_positive_result_gives_none(self):
        assert calculate_differential(Decimal('100'), '504', RULES) is None
