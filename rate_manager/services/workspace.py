"""
Rate Grid Workspace
===================

Per-property editing session over the rate calendar.

    workspace = get_workspace(prop)
    await workspace.load_rates()                          # fetch calendar
    workspace.set_base_override(date(2026, 3, 15), 95)    # pending, clamped
    workspace.set_target_sell_rate(date(2026, 3, 16), 150)
    outcome = await workspace.submit()                    # push to PMS

Loads are tagged with a generation number. Only the most recent load is
applied; a slower, older load that finishes afterwards is discarded.
"""

import logging
from datetime import date
from decimal import InvalidOperation

from rate_manager.conf import get_setting
from rate_manager.domain import RateOptions, as_date, quantize_rate, to_decimal
from rate_manager.exceptions import FeedFailure, FrozenDateError, InvalidOverrideError
from .calendar_service import CalendarAssembler
from .config_store import AssetConfigStore
from .feeds import SnapshotMetricsFeed, SnapshotPickupFeed
from .guardrails import clamp
from .overrides import OverrideStore
from .pms_gateway import PmsGateway
from .rate_factors import RateFactorCalculator
from .submission import SubmissionPipeline

logger = logging.getLogger(__name__)


def parse_rate(value):
    """Finite Decimal from user input; InvalidOverrideError otherwise."""
    try:
        rate = to_decimal(value)
    except InvalidOperation as e:
        raise InvalidOverrideError(f"Invalid rate: {value}") from e
    if not rate.is_finite():
        raise InvalidOverrideError(f"Invalid rate: {value}")
    return rate


class RateGridWorkspace:
    """
    Calendar, overrides and submission for one property.

    Args:
        property_id: property primary key
        pms_property_id: property ID in the PMS
        base_room_type_id: PMS room type the calendar is priced on
        assembler: CalendarAssembler
        gateway: PmsGateway used for submissions
        today: callable returning the current date
    """

    def __init__(self, property_id, pms_property_id, base_room_type_id,
                 assembler, gateway, today=None):
        self.property_id = property_id
        self.pms_property_id = pms_property_id
        self.base_room_type_id = base_room_type_id
        self.assembler = assembler
        self.gateway = gateway
        self.today = today or date.today

        self.store = OverrideStore()
        self.pipeline = SubmissionPipeline(self.store, gateway)

        self.calendar = {}
        self.profile = None
        self.start_date = None
        self.days = None
        self.pickup_window = get_setting('DEFAULT_PICKUP_WINDOW')
        self._generation = 0

    @classmethod
    def for_property(cls, prop, gateway=None, today=None):
        """Build a workspace wired to the snapshot feeds and the PMS gateway."""
        config_store = AssetConfigStore()
        gateway = gateway or PmsGateway(config_store=config_store, today=today)
        assembler = CalendarAssembler(
            gateway, SnapshotMetricsFeed(), SnapshotPickupFeed(), config_store
        )
        return cls(
            prop.id, prop.pms_property_id, prop.base_room_type_id,
            assembler, gateway, today=today,
        )

    @property
    def is_loaded(self):
        return self.profile is not None

    @property
    def generation(self):
        return self._generation

    # =========================================================================
    # LOADING
    # =========================================================================

    async def load_rates(self, start_date=None, days=None):
        """
        Fetch and apply a fresh calendar.

        Applying a load replaces the calendar rows and profile, seeds
        committed overrides from Manual dates and drops pending edits.

        Returns:
            CalendarLoad, or None when this load was superseded

        Raises:
            FeedFailure: the latest load failed; the previous calendar is kept
        """
        self._generation += 1
        generation = self._generation
        start_date = as_date(start_date) or self.start_date or self.today()
        days = days or self.days

        try:
            load = await self.assembler.assemble(
                self.property_id,
                self.base_room_type_id,
                start_date,
                days=days,
                pickup_window=self.pickup_window,
            )
        except FeedFailure:
            if generation != self._generation:
                logger.info(
                    "Ignoring failed stale load %s for property %s (current %s)",
                    generation, self.property_id, self._generation,
                )
                return None
            raise

        if generation != self._generation:
            logger.info(
                "Discarding stale calendar load %s for property %s (current %s)",
                generation, self.property_id, self._generation,
            )
            return None

        self._apply(load)
        return load

    def _apply(self, load):
        self.calendar = {day.date: day for day in load.days}
        self.profile = load.profile
        self.start_date = load.start_date
        self.days = len(load.days) or self.days
        self.store.seed_committed(load.committed_seed)
        self.store.discard_pending()
        logger.info(
            "Loaded %d days for property %s (%d committed overrides)",
            len(self.calendar), self.property_id, len(load.committed_seed),
        )

    async def set_pickup_window(self, days):
        """Change the pickup lookback window and reload the whole calendar."""
        days = int(days)
        if days < 1:
            raise ValueError("Pickup window must be at least 1 day")
        self.pickup_window = days
        return await self.load_rates(self.start_date)

    # =========================================================================
    # EDITING
    # =========================================================================

    def _editable_day(self, stay_date):
        stay_date = as_date(stay_date)
        day = self.calendar.get(stay_date)
        if day is None:
            raise FrozenDateError(f"{stay_date} is not in the loaded calendar")
        if day.is_frozen:
            raise FrozenDateError(f"{stay_date} is frozen and cannot be overridden")
        return day

    def set_base_override(self, stay_date, base_rate):
        """
        Record a pending base-rate override.

        Returns:
            GuardrailResult (value actually stored, was_clamped)
        """
        day = self._editable_day(stay_date)
        rate = parse_rate(base_rate)
        if rate <= 0:
            raise InvalidOverrideError(f"Override for {day.date} must be greater than 0")

        result = clamp(day.date, rate, day.guardrail_min)
        self.store.set_pending(day.date, result.value)
        return result

    def set_target_sell_rate(self, stay_date, sell_rate, include_targeting=False):
        """
        Record the base-rate override that produces a target sell rate.

        Raises:
            InvalidOverrideError: no base rate can produce the target
        """
        day = self._editable_day(stay_date)
        sell_rate = parse_rate(sell_rate)

        base_rate = self._calculator().inverse(
            sell_rate,
            self.profile.member_discount_percent,
            day.date,
            RateOptions(include_targeting=include_targeting),
        )
        if not base_rate.is_finite() or base_rate <= 0:
            raise InvalidOverrideError(f"Cannot satisfy target sell rate {sell_rate} for {day.date}")
        return self.set_base_override(day.date, base_rate)

    def clear_override(self, stay_date):
        self.store.clear_pending(stay_date)

    async def submit(self):
        """Push pending overrides. See SubmissionPipeline.submit."""
        return await self.pipeline.submit(
            self.property_id, self.pms_property_id, self.base_room_type_id
        )

    # =========================================================================
    # DISPLAY
    # =========================================================================

    def _calculator(self):
        return RateFactorCalculator(self.profile)

    def rows(self, include_targeting=False):
        """
        Calendar rows with the effective override and resulting sell rate.

        Returns:
            list of dicts (RateCalendarDay.to_dict() plus override fields)
        """
        if not self.is_loaded:
            return []

        calculator = self._calculator()
        options = RateOptions(include_targeting=include_targeting)
        member = self.profile.member_discount_percent

        rows = []
        for stay_date in sorted(self.calendar):
            day = self.calendar[stay_date]
            override = self.store.effective(stay_date)
            base_rate = override if override is not None else day.live_rate
            sell_rate = calculator.forward(base_rate, member, stay_date, options)

            row = day.to_dict()
            row.update({
                'override': str(quantize_rate(override)) if override is not None else None,
                'override_state': self.store.state(stay_date).value,
                'sell_rate': str(quantize_rate(sell_rate)) if sell_rate > 0 else None,
            })
            rows.append(row)
        return rows


# =============================================================================
# REGISTRY
# =============================================================================

_workspaces = {}


def get_workspace(prop, **kwargs):
    """Return the workspace for a property, creating it on first use."""
    workspace = _workspaces.get(prop.id)
    if workspace is None:
        workspace = RateGridWorkspace.for_property(prop, **kwargs)
        _workspaces[prop.id] = workspace
    return workspace


def reset_workspaces():
    _workspaces.clear()
