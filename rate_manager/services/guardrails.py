"""
Guardrail Enforcer
==================

Two layers of protection on base rates:

1. clamp() - operator overrides. A proposed base rate below the date's
   floor is raised to the floor and flagged; nothing is rejected.

2. apply_guardrails() - preview rates. The chain applied to every
   model-suggested rate before it reaches the calendar:
       Freeze window  → keep the live PMS rate
       Last-minute floor → max(rate, floor) close to arrival
       Monthly minimum
       Global maximum
"""

import logging
from decimal import Decimal

from rate_manager.domain import (
    GuardrailResult,
    PreviewGuardrail,
    WEEKDAY_KEYS,
    quantize_rate,
    to_decimal,
)

logger = logging.getLogger(__name__)

ZERO = Decimal('0')


def clamp(stay_date, proposed_base_rate, guardrail_min):
    """
    Clamp a proposed base-rate override to the date's floor.

    Frozen dates must be filtered out by the caller before reaching here.

    Args:
        stay_date: date being overridden (used for the warning only)
        proposed_base_rate: Decimal
        guardrail_min: Decimal floor, 0 or None means no floor

    Returns:
        GuardrailResult(value, was_clamped)
    """
    proposed = to_decimal(proposed_base_rate)
    floor = to_decimal(guardrail_min)

    if floor > ZERO and proposed < floor:
        logger.warning(
            "Override %s for %s is below guardrail minimum %s, clamped",
            proposed, stay_date, floor,
        )
        return GuardrailResult(value=floor, was_clamped=True)

    return GuardrailResult(value=proposed, was_clamped=False)


def apply_guardrails(suggested_rate, live_rate, config, stay_date, today):
    """
    Apply the preview guardrail chain to a suggested rate.

    Args:
        suggested_rate: Decimal or None, model-suggested rate
        live_rate: Decimal or None, current PMS rate
        config: GuardrailConfig
        stay_date: date being priced
        today: date the preview is generated on

    Returns:
        PreviewGuardrail
    """
    days_from_now = abs((stay_date - today).days)
    monthly_min = to_decimal(config.monthly_min_for(stay_date))

    # =========================================================================
    # FREEZE WINDOW: days 0..N-1 keep whatever the PMS has
    # =========================================================================
    freeze_days = int(config.rate_freeze_days or 0)
    if freeze_days > 0 and days_from_now < freeze_days:
        live = to_decimal(live_rate)
        if live <= ZERO:
            # Never freeze a date at zero
            fallback = monthly_min if monthly_min > ZERO else suggested_rate
            return PreviewGuardrail(
                final_rate=fallback,
                is_frozen=True,
                min_applied=monthly_min,
                reason='FROZEN_FALLBACK',
            )
        return PreviewGuardrail(
            final_rate=live,
            is_frozen=True,
            min_applied=monthly_min,
            reason='FROZEN',
        )

    effective = to_decimal(suggested_rate)
    floor_active = False

    # =========================================================================
    # LAST-MINUTE FLOOR
    # =========================================================================
    if config.last_minute_floor_enabled:
        floor_rate = to_decimal(config.last_minute_floor_rate)
        weekday = WEEKDAY_KEYS[stay_date.weekday()]
        if (days_from_now <= int(config.last_minute_floor_days or 0)
                and weekday in config.last_minute_floor_dow
                and effective < floor_rate):
            effective = floor_rate
            floor_active = True

    # =========================================================================
    # MONTHLY MINIMUM / GLOBAL MAXIMUM
    # =========================================================================
    if effective < monthly_min:
        effective = monthly_min

    global_max = to_decimal(config.guardrail_max)
    if global_max > ZERO and effective > global_max:
        effective = global_max

    return PreviewGuardrail(
        final_rate=quantize_rate(effective) if effective > ZERO else None,
        is_frozen=False,
        is_floor_active=floor_active,
        min_applied=monthly_min,
        reason='CALCULATED',
    )
