"""
Rate manager models package.

Re-exports all models so Django migrations and imports work unchanged:
    from rate_manager.models import Property, CalculatorSettings, etc.
"""

# Core: Organization, Property
from .core import (
    Organization,
    Property,
)

# Calculator: pricing stack, campaigns, room differentials
from .calculator import (
    CalculatorSettings,
    Campaign,
    RoomDifferential,
)

# Calendar: guardrails, stored rates, feed snapshots
from .calendar import (
    GuardrailSettings,
    RateCalendarEntry,
    DailyMetricSnapshot,
    DailyPickupSnapshot,
)

__all__ = [
    # Core
    'Organization', 'Property',
    # Calculator
    'CalculatorSettings', 'Campaign', 'RoomDifferential',
    # Calendar
    'GuardrailSettings', 'RateCalendarEntry', 'DailyMetricSnapshot', 'DailyPickupSnapshot',
]
