"""
Room differentials: derived room rates priced off the base room.

    Deluxe  '+' 20  → base × 1.20
    Economy '-' 10  → base × 0.90
"""

from decimal import Decimal

from rate_manager.domain import HUNDRED, quantize_rate, to_decimal


def find_rule(target_room_type_id, differentials):
    for rule in differentials or []:
        if str(rule.room_type_id) == str(target_room_type_id):
            return rule
    return None


def calculate_differential(base_rate, target_room_type_id, differentials):
    """
    Calculate a derived room's rate from the base room rate.

    Args:
        base_rate: Decimal, base room rate
        target_room_type_id: room type to price
        differentials: iterable of rules with room_type_id, operator, value_percent

    Returns:
        Decimal or None. None when the base rate is invalid or the
        derived rate would not be positive, so a bad base never
        cascades into the derived rooms.
    """
    if base_rate is None:
        return None
    base_rate = to_decimal(base_rate)
    if base_rate <= 0:
        return None

    rule = find_rule(target_room_type_id, differentials)
    if rule is None or rule.value_percent is None:
        return base_rate

    value = to_decimal(rule.value_percent)
    if rule.operator == '+':
        derived = base_rate * (Decimal('1') + value / HUNDRED)
    else:
        derived = base_rate * (Decimal('1') - value / HUNDRED)

    derived = quantize_rate(derived)
    return derived if derived > 0 else None
