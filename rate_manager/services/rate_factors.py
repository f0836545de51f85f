"""
Rate Factor Calculator
======================

Turns a PMS base rate into the customer-facing sell rate, and a target
sell rate back into the base rate that produces it.

Calculation Flow (order matters):
1. Base Rate × Strategic Multiplier
2. - Non-Refundable rate plan discount
3. + Tax (exclusive-tax properties only)
4. Deep deal campaign → applied alone, steps 5a-5c skipped
5. a. - Member discount
   b. - Best ordinary campaign
   c. - Mobile rate (unless blocked) and country rate (targeting only)
6. Sell Rate = Base Rate × product of all step factors

The inverse walks the same step list backwards, dividing by each factor,
so forward and inverse can never drift apart.
"""

import logging
from decimal import Decimal

from rate_manager.domain import (
    CalculatorProfile,
    FactorStep,
    RateOptions,
    TAX_EXCLUSIVE,
    quantize_rate,
    to_decimal,
)
from .campaigns import resolve_campaigns

logger = logging.getLogger(__name__)

ZERO = Decimal('0')


class RateFactorCalculator:
    """
    Pricing stack calculator for one property profile.

    Usage:
        calculator = RateFactorCalculator(profile)

        sell = calculator.forward(Decimal('100'), Decimal('10'), date(2026, 3, 15))
        base = calculator.inverse(sell, Decimal('10'), date(2026, 3, 15))
    """

    def __init__(self, profile=None):
        self.profile = profile or CalculatorProfile()

    def build_steps(self, member_discount_percent, stay_date, options=None):
        """
        Build the ordered list of factor steps for a stay date.

        Args:
            member_discount_percent: Decimal, loyalty/member discount (e.g. 10)
            stay_date: date the rate applies to
            options: RateOptions (targeting, forced multiplier)

        Returns:
            list of FactorStep
        """
        options = options or RateOptions()
        profile = self.profile
        member_discount = to_decimal(member_discount_percent)

        multiplier = (
            to_decimal(options.force_multiplier)
            if options.force_multiplier is not None
            else to_decimal(profile.multiplier)
        )
        steps = [FactorStep('multiplier', 'multiplier', multiplier)]

        if profile.non_refundable.active:
            steps.append(FactorStep('non_refundable', 'discount', to_decimal(profile.non_refundable.percent)))

        # Tax goes on after the rate plan discount, before promotions
        tax_percent = to_decimal(profile.tax_percent)
        if profile.tax_mode == TAX_EXCLUSIVE and tax_percent > ZERO:
            steps.append(FactorStep('tax', 'surcharge', tax_percent))

        resolution = resolve_campaigns(stay_date, profile.campaigns)

        if resolution.deep_deal is not None:
            deal = resolution.deep_deal
            steps.append(FactorStep(f'campaign:{deal.slug}', 'discount', to_decimal(deal.discount_percent)))
            return steps

        if member_discount > ZERO:
            steps.append(FactorStep('member', 'discount', member_discount))

        best = resolution.best_ordinary
        if best is not None:
            steps.append(FactorStep(f'campaign:{best.slug}', 'discount', to_decimal(best.discount_percent)))

        if options.include_targeting:
            if profile.mobile.active and not resolution.mobile_blocked:
                steps.append(FactorStep('mobile', 'discount', to_decimal(profile.mobile.percent)))
            if profile.country.active:
                steps.append(FactorStep('country', 'discount', to_decimal(profile.country.percent)))

        return steps

    def factor(self, member_discount_percent, stay_date, options=None):
        """Combined multiplicative factor base → sell."""
        total = Decimal('1')
        for step in self.build_steps(member_discount_percent, stay_date, options):
            total *= step.factor
        return total

    def forward(self, base_rate, member_discount_percent, stay_date, options=None):
        """
        Calculate the sell rate for a base rate.

        Returns:
            Decimal, unrounded. 0 for a missing or non-positive base rate.
        """
        base_rate = to_decimal(base_rate)
        if base_rate <= ZERO:
            return ZERO
        return base_rate * self.factor(member_discount_percent, stay_date, options)

    def inverse(self, sell_rate, member_discount_percent, stay_date, options=None):
        """
        Calculate the base rate required to reach a target sell rate.

        Returns:
            Decimal, unrounded. 0 when the target cannot be satisfied
            (a step factor is zero, e.g. a 100% discount).
        """
        sell_rate = to_decimal(sell_rate)
        if sell_rate <= ZERO:
            return ZERO

        rate = sell_rate
        for step in reversed(self.build_steps(member_discount_percent, stay_date, options)):
            step_factor = step.factor
            if step_factor == ZERO:
                logger.info("Cannot invert rate for %s: step %s has zero factor", stay_date, step.name)
                return ZERO
            rate = rate / step_factor
        return rate

    def breakdown(self, base_rate, member_discount_percent, stay_date, options=None):
        """
        Full forward breakdown for display.

        Returns:
            dict with:
                - base_rate
                - steps (list of name/kind/value/factor/running_rate)
                - factor
                - sell_rate (unrounded)
                - sell_rate_display (rounded to cents)
        """
        base_rate = to_decimal(base_rate)
        running = base_rate
        total = Decimal('1')
        step_details = []

        for step in self.build_steps(member_discount_percent, stay_date, options):
            total *= step.factor
            running = running * step.factor
            step_details.append({
                'name': step.name,
                'kind': step.kind,
                'value': str(step.value),
                'factor': str(step.factor),
                'running_rate': str(quantize_rate(running)),
            })

        sell_rate = base_rate * total if base_rate > ZERO else ZERO
        return {
            'base_rate': str(base_rate),
            'steps': step_details,
            'factor': str(total),
            'sell_rate': str(sell_rate),
            'sell_rate_display': str(quantize_rate(sell_rate)),
        }


def forward(base_rate, member_discount_percent, profile, stay_date, options=None):
    """Module-level shortcut for RateFactorCalculator(profile).forward(...)."""
    return RateFactorCalculator(profile).forward(base_rate, member_discount_percent, stay_date, options)


def inverse(sell_rate, member_discount_percent, profile, stay_date, options=None):
    """Module-level shortcut for RateFactorCalculator(profile).inverse(...)."""
    return RateFactorCalculator(profile).inverse(sell_rate, member_discount_percent, stay_date, options)
