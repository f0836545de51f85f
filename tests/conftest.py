"""
Shared pytest fixtures: profiles, calendar days, in-memory collaborators
and ORM-backed properties.
"""

import asyncio
from datetime import date, timedelta
from decimal import Decimal

import pytest

from rate_manager.domain import (
    CalculatorProfile,
    CampaignRule,
    DiscountToggle,
    PreviewDay,
)
from rate_manager.services.workspace import reset_workspaces


STAY_DATE = date(2026, 3, 15)


@pytest.fixture
def stay_date():
    return STAY_DATE


@pytest.fixture
def plain_profile():
    """Multiplier 1.3 and nothing else switched on."""
    return CalculatorProfile(
        multiplier=Decimal('1.3'),
        non_refundable=DiscountToggle(False, Decimal('15')),
        mobile=DiscountToggle(False, Decimal('10')),
        country=DiscountToggle(False, Decimal('5')),
    )


@pytest.fixture
def campaign():
    """Factory for campaign rules valid around STAY_DATE."""
    def make(slug='seasonal', discount='10', start=date(2026, 3, 1), end=date(2026, 3, 31), active=True):
        return CampaignRule(
            slug=slug,
            discount_percent=Decimal(discount),
            start_date=start,
            end_date=end,
            active=active,
        )
    return make


def make_preview_days(start_date, days, live_rate=Decimal('100.00'), frozen=(), guardrail_min=Decimal('0'),
                      manual=None):
    """PreviewDay list: every date priced at live_rate × 1.3."""
    manual = manual or {}
    result = []
    for offset in range(days):
        stay_date = start_date + timedelta(days=offset)
        rate = manual.get(stay_date, live_rate * Decimal('1.3'))
        result.append(PreviewDay(
            date=stay_date,
            live_rate=live_rate,
            suggested_rate=live_rate * Decimal('1.3'),
            rate=rate,
            source='Manual' if stay_date in manual else 'AI',
            is_frozen=stay_date in frozen,
            guardrail_min=guardrail_min,
        ))
    return result


class FakeGateway:
    """
    In-memory PMS gateway.

    preview_gates: list of asyncio.Event; each preview call pops one and
    waits on it before answering.
    """

    def __init__(self, live_rate=Decimal('100.00'), frozen=(), guardrail_min=Decimal('0'), manual=None):
        self.live_rate = live_rate
        self.frozen = frozen
        self.guardrail_min = guardrail_min
        self.manual = manual
        self.preview_error = None
        self.preview_gates = []
        self.preview_calls = 0

        self.submit_error = None
        self.submit_gate = None
        self.submitted = []

    async def get_preview_rates(self, property_id, base_room_type_id, start_date, days):
        self.preview_calls += 1
        call = self.preview_calls
        if self.preview_gates:
            gate = self.preview_gates.pop(0)
            await gate.wait()
        if self.preview_error is not None:
            raise self.preview_error
        live_rate = self.live_rate + call - 1
        return make_preview_days(start_date, days, live_rate, self.frozen, self.guardrail_min, self.manual)

    async def submit_overrides(self, property_id, pms_property_id, room_type_id, overrides):
        self.submitted.append(list(overrides))
        if self.submit_gate is not None:
            await self.submit_gate.wait()
        if self.submit_error is not None:
            raise self.submit_error
        return {'pushed': len(overrides), 'jobs': ['job-1']}


class FakeMetricsFeed:
    def __init__(self, rows=None, error=None, delay=0):
        self.rows = rows or []
        self.error = error
        self.delay = delay

    async def get_daily_metrics(self, property_id, start_date, end_date):
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.rows


class FakePickupFeed:
    def __init__(self, rows=None, error=None):
        self.rows = rows or []
        self.error = error
        self.windows = []

    async def get_daily_pickup(self, property_id, start_date, end_date, lookback_days=1):
        self.windows.append(lookback_days)
        if self.error is not None:
            raise self.error
        return self.rows


class FakeConfigStore:
    def __init__(self, profile=None):
        self.profile = profile or CalculatorProfile()

    async def aget_config(self, property_id):
        return self.profile


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def metrics_feed():
    return FakeMetricsFeed()


@pytest.fixture
def pickup_feed():
    return FakePickupFeed()


@pytest.fixture(autouse=True)
def clean_workspaces():
    reset_workspaces()
    yield
    reset_workspaces()


# =============================================================================
# ORM FIXTURES
# =============================================================================

@pytest.fixture
def organization(db):
    from rate_manager.models import Organization
    return Organization.objects.create(name='Atoll Resorts Group', code='atoll-resorts')


@pytest.fixture
def hotel(organization):
    from rate_manager.models import Property
    return Property.objects.create(
        organization=organization,
        name='Biosphere Inn',
        code='biosphere-inn',
        pms_property_id='PMS-1',
        base_room_type_id='501',
        rate_id_map={'501': 'R-501', '502': 'R-502', '503': 'R-503'},
    )
