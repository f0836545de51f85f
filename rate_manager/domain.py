"""
Value types shared by the rate manager services.

These are plain dataclasses so the calculation code never touches the
ORM. Models convert into them (see services.config_store) and views
serialize them with ``to_dict()``.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Optional, Tuple


CENT = Decimal('0.01')
HUNDRED = Decimal('100')

TAX_INCLUSIVE = 'inclusive'
TAX_EXCLUSIVE = 'exclusive'

SOURCE_AI = 'AI'
SOURCE_MANUAL = 'Manual'
SOURCE_EXTERNAL = 'External'
RATE_SOURCES = (SOURCE_AI, SOURCE_MANUAL, SOURCE_EXTERNAL)

MONTH_KEYS = ('jan', 'feb', 'mar', 'apr', 'may', 'jun', 'jul', 'aug', 'sep', 'oct', 'nov', 'dec')
WEEKDAY_KEYS = ('mon', 'tue', 'wed', 'thu', 'fri', 'sat', 'sun')


def to_decimal(value, default=Decimal('0')):
    """Coerce a number or numeric string to Decimal (None -> default)."""
    if value is None or value == '':
        return default
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def quantize_rate(value):
    """Round a rate to cents the way rates are displayed and pushed."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def as_date(value):
    """Accept a date or an ISO 'YYYY-MM-DD' string."""
    if value is None or isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


# =============================================================================
# CALCULATOR PROFILE
# =============================================================================

@dataclass(frozen=True)
class CampaignRule:
    """A time-bounded promotion as seen by the calculator."""
    slug: str
    discount_percent: Decimal
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    active: bool = True
    name: str = ''
    id: Optional[int] = None

    def to_dict(self):
        return {
            'id': self.id,
            'slug': self.slug,
            'name': self.name,
            'discount_percent': str(self.discount_percent),
            'start_date': self.start_date.isoformat() if self.start_date else None,
            'end_date': self.end_date.isoformat() if self.end_date else None,
            'active': self.active,
        }


@dataclass(frozen=True)
class DiscountToggle:
    active: bool = False
    percent: Decimal = Decimal('0')

    def to_dict(self):
        return {'active': self.active, 'percent': str(self.percent)}


@dataclass(frozen=True)
class CalculatorProfile:
    """
    Per-property pricing stack configuration.

    Defaults mirror a freshly configured property: 1.3 strategic
    multiplier, inclusive tax, 15% non-refundable plan, 10% mobile rate,
    country rate available but switched off.
    """
    multiplier: Decimal = Decimal('1.3')
    tax_mode: str = TAX_INCLUSIVE
    tax_percent: Decimal = Decimal('0')
    non_refundable: DiscountToggle = DiscountToggle(True, Decimal('15'))
    mobile: DiscountToggle = DiscountToggle(True, Decimal('10'))
    country: DiscountToggle = DiscountToggle(False, Decimal('5'))
    campaigns: Tuple[CampaignRule, ...] = ()
    member_discount_percent: Decimal = Decimal('0')

    def to_dict(self):
        return {
            'multiplier': str(self.multiplier),
            'tax_mode': self.tax_mode,
            'tax_percent': str(self.tax_percent),
            'non_refundable': self.non_refundable.to_dict(),
            'mobile': self.mobile.to_dict(),
            'country': self.country.to_dict(),
            'campaigns': [c.to_dict() for c in self.campaigns],
            'member_discount_percent': str(self.member_discount_percent),
        }


@dataclass(frozen=True)
class RateOptions:
    include_targeting: bool = False
    force_multiplier: Optional[Decimal] = None


@dataclass(frozen=True)
class FactorStep:
    """
    One stage of the pricing stack.

    kind:
        'multiplier' - value is the factor itself (e.g. 1.3)
        'discount'   - value is a percent taken off (e.g. 15)
        'surcharge'  - value is a percent added on (e.g. 8 for tax)
    """
    name: str
    kind: str
    value: Decimal

    @property
    def factor(self):
        if self.kind == 'multiplier':
            return self.value
        if self.kind == 'discount':
            return Decimal('1') - self.value / HUNDRED
        return Decimal('1') + self.value / HUNDRED


# =============================================================================
# GUARDRAILS
# =============================================================================

@dataclass(frozen=True)
class GuardrailResult:
    value: Decimal
    was_clamped: bool = False

    def to_dict(self):
        return {'value': str(self.value), 'was_clamped': self.was_clamped}


@dataclass(frozen=True)
class GuardrailConfig:
    """
    Preview guardrail settings for a property.

    monthly_min_rates is keyed by lowercase month ('jan'..'dec');
    last_minute_floor_dow holds lowercase weekdays ('mon'..'sun').
    """
    rate_freeze_days: int = 0
    guardrail_max: Decimal = Decimal('400')
    last_minute_floor_enabled: bool = False
    last_minute_floor_rate: Decimal = Decimal('0')
    last_minute_floor_days: int = 0
    last_minute_floor_dow: Tuple[str, ...] = ()
    monthly_min_rates: Tuple[Tuple[str, Decimal], ...] = ()

    def monthly_min_for(self, stay_date):
        key = MONTH_KEYS[stay_date.month - 1]
        return dict(self.monthly_min_rates).get(key, Decimal('0'))


@dataclass(frozen=True)
class PreviewGuardrail:
    final_rate: Optional[Decimal]
    is_frozen: bool = False
    is_floor_active: bool = False
    min_applied: Decimal = Decimal('0')
    reason: str = 'CALCULATED'


# =============================================================================
# CALENDAR
# =============================================================================

@dataclass(frozen=True)
class PreviewDay:
    """A day as returned by the PMS gateway's preview feed."""
    date: date
    live_rate: Optional[Decimal] = None
    suggested_rate: Optional[Decimal] = None
    rate: Decimal = Decimal('0')
    source: str = SOURCE_AI
    is_frozen: bool = False
    is_floor_active: bool = False
    guardrail_min: Decimal = Decimal('0')


@dataclass(frozen=True)
class RateCalendarDay:
    date: date
    rate: Decimal = Decimal('0')
    live_rate: Optional[Decimal] = None
    suggested_rate: Optional[Decimal] = None
    guardrail_min: Decimal = Decimal('0')
    is_frozen: bool = False
    floor_rate: Optional[Decimal] = None
    occupancy: Decimal = Decimal('0')
    adr: Decimal = Decimal('0')
    pickup: int = 0
    source: str = SOURCE_AI

    def to_dict(self):
        return {
            'date': self.date.isoformat(),
            'day_of_week': WEEKDAY_KEYS[self.date.weekday()].upper(),
            'rate': str(self.rate),
            'live_rate': str(self.live_rate) if self.live_rate is not None else None,
            'suggested_rate': str(self.suggested_rate) if self.suggested_rate is not None else None,
            'guardrail_min': str(self.guardrail_min),
            'is_frozen': self.is_frozen,
            'floor_rate': str(self.floor_rate) if self.floor_rate is not None else None,
            'occupancy': str(self.occupancy),
            'adr': str(self.adr),
            'pickup': self.pickup,
            'source': self.source,
        }


@dataclass(frozen=True)
class CalendarLoad:
    property_id: int
    start_date: date
    days: Tuple[RateCalendarDay, ...]
    profile: CalculatorProfile
    committed_seed: Dict[date, Decimal] = field(default_factory=dict)
    pickup_window: int = 1


@dataclass(frozen=True)
class SubmissionOutcome:
    status: str
    submitted: Dict[date, Decimal] = field(default_factory=dict)
    ack: Optional[dict] = None

    def to_dict(self):
        return {
            'status': self.status,
            'count': len(self.submitted),
            'submitted': {d.isoformat(): str(r) for d, r in sorted(self.submitted.items())},
        }
