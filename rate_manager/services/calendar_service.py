"""
Calendar Assembler
==================

Builds the per-date rate calendar from four independently fetched feeds:

    preview   - PMS gateway: live rate, suggested rate, guardrails, source
    metrics   - rooms sold / unsold and ADR per day
    pickup    - rooms picked up vs. the snapshot N days earlier
    profile   - calculator profile for the property

All four are requested concurrently and awaited together. Either all
four arrive and a full calendar is built, or a single FeedFailure is
raised; a partial calendar is never returned.
"""

import asyncio
import logging
from datetime import timedelta
from decimal import Decimal

from rate_manager.conf import get_setting
from rate_manager.domain import (
    CalendarLoad,
    RateCalendarDay,
    SOURCE_MANUAL,
    as_date,
    to_decimal,
)
from rate_manager.exceptions import FeedFailure

logger = logging.getLogger(__name__)

ZERO = Decimal('0')


def build_metrics_map(metrics_rows):
    """
    Index metric rows by date.

    Returns:
        dict date → {'occupancy': Decimal (0-100), 'adr': Decimal}
    """
    stats = {}
    for row in metrics_rows or []:
        stay_date = as_date(row['period'])
        sold = to_decimal(row.get('rooms_sold'))
        total = sold + to_decimal(row.get('rooms_unsold'))
        stats[stay_date] = {
            'occupancy': (sold / total * 100) if total > ZERO else ZERO,
            'adr': to_decimal(row.get('adr')),
        }
    return stats


def build_pickup_map(pickup_rows):
    return {as_date(row['date']): int(row.get('pickup') or 0) for row in pickup_rows or []}


def merge(preview_days, metrics_rows, pickup_rows):
    """
    Merge the preview, metrics and pickup feeds by date key.

    Dates missing from the metrics or pickup feed get zero occupancy,
    ADR and pickup. The preview feed decides which dates exist.

    Returns:
        tuple of RateCalendarDay in preview order
    """
    stats_map = build_metrics_map(metrics_rows)
    pickup_map = build_pickup_map(pickup_rows)

    days = []
    for preview in preview_days:
        stats = stats_map.get(preview.date, {'occupancy': ZERO, 'adr': ZERO})
        rate = to_decimal(preview.rate)
        days.append(RateCalendarDay(
            date=preview.date,
            rate=rate,
            live_rate=preview.live_rate,
            suggested_rate=preview.suggested_rate,
            guardrail_min=to_decimal(preview.guardrail_min),
            is_frozen=bool(preview.is_frozen),
            floor_rate=rate if preview.is_floor_active else None,
            occupancy=stats['occupancy'],
            adr=stats['adr'],
            pickup=pickup_map.get(preview.date, 0),
            source=preview.source,
        ))
    return tuple(days)


def committed_seed(days):
    """Manual rates already in the PMS, keyed by date."""
    return {
        day.date: day.rate
        for day in days
        if day.source == SOURCE_MANUAL and day.rate > ZERO
    }


class CalendarAssembler:
    """
    Usage:
        assembler = CalendarAssembler(gateway, metrics_feed, pickup_feed, config_store)
        load = await assembler.assemble(prop.id, prop.base_room_type_id, date.today())
    """

    def __init__(self, gateway, metrics_feed, pickup_feed, config_store, timeout=None):
        self.gateway = gateway
        self.metrics_feed = metrics_feed
        self.pickup_feed = pickup_feed
        self.config_store = config_store
        self.timeout = timeout if timeout is not None else get_setting('FEED_TIMEOUT_SECONDS')

    async def _bounded(self, awaitable):
        return await asyncio.wait_for(awaitable, timeout=self.timeout)

    async def assemble(self, property_id, base_room_type_id, start_date, days=None, pickup_window=None):
        """
        Fetch all feeds concurrently and build the calendar.

        Args:
            property_id: property primary key
            base_room_type_id: PMS room type the calendar is priced on
            start_date: first date of the window
            days: window length (default CALENDAR_DAYS)
            pickup_window: lookback days for pickup (default DEFAULT_PICKUP_WINDOW)

        Returns:
            CalendarLoad

        Raises:
            FeedFailure: any feed failed or timed out
        """
        days = days or get_setting('CALENDAR_DAYS')
        pickup_window = pickup_window or get_setting('DEFAULT_PICKUP_WINDOW')
        start_date = as_date(start_date)
        end_date = start_date + timedelta(days=days - 1)

        sources = ('preview', 'metrics', 'pickup', 'profile')
        results = await asyncio.gather(
            self._bounded(self.gateway.get_preview_rates(property_id, base_room_type_id, start_date, days)),
            self._bounded(self.metrics_feed.get_daily_metrics(property_id, start_date, end_date)),
            self._bounded(self.pickup_feed.get_daily_pickup(property_id, start_date, end_date, pickup_window)),
            self._bounded(self.config_store.aget_config(property_id)),
            return_exceptions=True,
        )

        failures = {
            source: result
            for source, result in zip(sources, results)
            if isinstance(result, BaseException)
        }
        if failures:
            for source, error in failures.items():
                logger.error("Calendar feed '%s' failed for property %s: %r", source, property_id, error)
            raise FeedFailure(failures)

        preview_days, metrics_rows, pickup_rows, profile = results
        calendar_days = merge(preview_days, metrics_rows, pickup_rows)

        logger.info(
            "Assembled %d calendar days for property %s from %s (pickup window %s)",
            len(calendar_days), property_id, start_date, pickup_window,
        )
        return CalendarLoad(
            property_id=property_id,
            start_date=start_date,
            days=calendar_days,
            profile=profile,
            committed_seed=committed_seed(calendar_days),
            pickup_window=pickup_window,
        )
