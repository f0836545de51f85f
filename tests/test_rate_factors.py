"""
Tests for the pricing stack in rate_manager/services/rate_factors.py.
"""

from dataclasses import replace
from datetime import date
from decimal import Decimal

import pytest

from rate_manager.domain import (
    CalculatorProfile,
    DiscountToggle,
    RateOptions,
    TAX_EXCLUSIVE,
)
from rate_manager.services.rate_factors import RateFactorCalculator, forward, inverse


TOLERANCE = Decimal('0.000001')
TARGETING = RateOptions(include_targeting=True)


def step_names(calculator, member, stay_date, options=None):
    return [s.name for s in calculator.build_steps(member, stay_date, options)]


class TestForward:
    """Base rate → sell rate."""

    def test_simple_markup(self, plain_profile, stay_date):
        assert forward(Decimal('100'), 0, plain_profile, stay_date) == Decimal('130')

    def test_rate_plan_and_member_discount_stack(self, stay_date):
        profile = CalculatorProfile()
        sell = forward(Decimal('100'), Decimal('10'), profile, stay_date)
        assert sell == Decimal('99.45')

    def test_exclusive_tax_surcharge(self, plain_profile, stay_date):
        profile = replace(plain_profile, multiplier=Decimal('1.0'), tax_mode=TAX_EXCLUSIVE, tax_percent=Decimal('8'))
        assert forward(Decimal('100'), 0, profile, stay_date) == Decimal('108')

    def test_inclusive_tax_ignores_percent(self, plain_profile, stay_date):
        profile = replace(plain_profile, tax_percent=Decimal('8'))
        assert 'tax' not in step_names(RateFactorCalculator(profile), 0, stay_date)

    @pytest.mark.parametrize('base', [Decimal('0'), Decimal('-5'), None])
    def test_non_positive_base_gives_zero(self, plain_profile, stay_date, base):
        assert forward(base, 0, plain_profile, stay_date) == Decimal('0')

    def test_force_multiplier_overrides_profile(self, plain_profile, stay_date):
        options = RateOptions(force_multiplier=Decimal('2'))
        assert forward(Decimal('100'), 0, plain_profile, stay_date, options) == Decimal('200')

    def test_targeting_only_when_requested(self, stay_date):
        profile = CalculatorProfile(country=DiscountToggle(True, Decimal('5')))
        calculator = RateFactorCalculator(profile)
        assert step_names(calculator, 0, stay_date) == ['multiplier', 'non_refundable']
        assert step_names(calculator, 0, stay_date, TARGETING) == [
            'multiplier', 'non_refundable', 'mobile', 'country',
        ]


class TestCampaignSteps:
    """How campaigns shape the step list."""

    def test_best_ordinary_campaign_only(self, plain_profile, campaign, stay_date):
        profile = replace(plain_profile, campaigns=(campaign('seasonal', '10'), campaign('weekly', '20')))
        names = step_names(RateFactorCalculator(profile), Decimal('10'), stay_date)
        assert names == ['multiplier', 'member', 'campaign:weekly']

    def test_deep_deal_is_exclusive(self, campaign, stay_date):
        profile = CalculatorProfile(
            country=DiscountToggle(True, Decimal('5')),
            campaigns=(campaign('seasonal', '10'), campaign('black-friday', '40')),
        )
        names = step_names(RateFactorCalculator(profile), Decimal('10'), stay_date, TARGETING)
        assert names == ['multiplier', 'non_refundable', 'campaign:black-friday']

    def test_deep_deal_outside_window_falls_back(self, campaign, stay_date):
        profile = CalculatorProfile(campaigns=(
            campaign('limited-time', '40', start=date(2026, 5, 1), end=date(2026, 5, 31)),
        ))
        names = step_names(RateFactorCalculator(profile), Decimal('10'), stay_date)
        assert names == ['multiplier', 'non_refundable', 'member']

    def test_mobile_blocked_by_early_deal(self, campaign, stay_date):
        profile = CalculatorProfile(campaigns=(campaign('early-deal', '10'),))
        names = step_names(RateFactorCalculator(profile), 0, stay_date, TARGETING)
        assert 'mobile' not in names
        assert 'campaign:early-deal' in names


class TestInverse:
    """Target sell rate → required base rate."""

    def test_inverse_of_stacked_rate(self, stay_date):
        profile = CalculatorProfile()
        assert inverse(Decimal('99.45'), Decimal('10'), profile, stay_date) == Decimal('100')

    @pytest.mark.parametrize('base', [Decimal('87.20'), Decimal('150'), Decimal('333.33')])
    def test_round_trip(self, campaign, stay_date, base):
        profile = CalculatorProfile(
            tax_mode=TAX_EXCLUSIVE,
            tax_percent=Decimal('12'),
            campaigns=(campaign('seasonal', '7'),),
        )
        calculator = RateFactorCalculator(profile)
        sell = calculator.forward(base, Decimal('10'), stay_date, TARGETING)
        assert abs(calculator.inverse(sell, Decimal('10'), stay_date, TARGETING) - base) < TOLERANCE

    def test_zero_factor_cannot_be_inverted(self, plain_profile, campaign, stay_date):
        profile = replace(plain_profile, campaigns=(campaign('black-friday', '100'),))
        assert inverse(Decimal('100'), 0, profile, stay_date) == Decimal('0')

    def test_non_positive_target_gives_zero(self, plain_profile, stay_date):
        assert inverse(Decimal('0'), 0, plain_profile, stay_date) == Decimal('0')


class TestBreakdown:

    def test_breakdown_lists_running_rates(self, stay_date):
        result = RateFactorCalculator(CalculatorProfile()).breakdown(Decimal('100'), Decimal('10'), stay_date)

        assert [s['name'] for s in result['steps']] == ['multiplier', 'non_refundable', 'member']
        assert [s['running_rate'] for s in result['steps']] == ['130.00', '110.50', '99.45']
        assert result['sell_rate_display'] == '99.45'
        assert Decimal(result['factor']) == Decimal('0.9945')
