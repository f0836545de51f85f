"""
Metrics and pickup feeds backed by the daily snapshot tables.

Each feed has a synchronous query method (used by management commands
and tests) and an async wrapper the Calendar Assembler awaits.
"""

import logging
from datetime import timedelta

from asgiref.sync import sync_to_async
from django.db.models import Max

from rate_manager.domain import as_date
from rate_manager.models import DailyMetricSnapshot, DailyPickupSnapshot

logger = logging.getLogger(__name__)


class SnapshotMetricsFeed:
    """
    Rooms sold / unsold and ADR per stay date.

    Rows:
        {'period': '2026-03-15', 'rooms_sold': 12, 'rooms_unsold': 8, 'adr': Decimal('142.50')}
    """

    def query_daily_metrics(self, property_id, start_date, end_date):
        snapshots = DailyMetricSnapshot.objects.filter(
            hotel_id=property_id,
            stay_date__gte=as_date(start_date),
            stay_date__lte=as_date(end_date),
        ).order_by('stay_date')

        return [
            {
                'period': s.stay_date.isoformat(),
                'rooms_sold': s.rooms_sold,
                'rooms_unsold': s.rooms_unsold,
                'adr': s.adr,
            }
            for s in snapshots
        ]

    async def get_daily_metrics(self, property_id, start_date, end_date):
        return await sync_to_async(self.query_daily_metrics)(property_id, start_date, end_date)


class SnapshotPickupFeed:
    """
    Rooms picked up per stay date over a lookback window.

    pickup = rooms sold in the latest snapshot
             - rooms sold in the latest snapshot taken at least
               lookback_days before it

    Stay dates without a baseline row count from zero. When no snapshot
    is old enough to compare against, no rows are returned and the
    calendar shows zero pickup.
    """

    def _rooms_sold_by_date(self, property_id, snapshot_date, start_date, end_date):
        rows = DailyPickupSnapshot.objects.filter(
            hotel_id=property_id,
            snapshot_date=snapshot_date,
            stay_date__gte=start_date,
            stay_date__lte=end_date,
        ).values_list('stay_date', 'rooms_sold')
        return dict(rows)

    def query_daily_pickup(self, property_id, start_date, end_date, lookback_days=1):
        start_date = as_date(start_date)
        end_date = as_date(end_date)
        snapshots = DailyPickupSnapshot.objects.filter(hotel_id=property_id)

        latest = snapshots.aggregate(latest=Max('snapshot_date'))['latest']
        if latest is None:
            return []

        cutoff = latest - timedelta(days=lookback_days)
        baseline = snapshots.filter(snapshot_date__lte=cutoff).aggregate(
            baseline=Max('snapshot_date')
        )['baseline']
        if baseline is None:
            logger.info(
                "No pickup baseline %s days before %s for property %s",
                lookback_days, latest, property_id,
            )
            return []

        current = self._rooms_sold_by_date(property_id, latest, start_date, end_date)
        previous = self._rooms_sold_by_date(property_id, baseline, start_date, end_date)

        return [
            {'date': stay_date.isoformat(), 'pickup': sold - previous.get(stay_date, 0)}
            for stay_date, sold in sorted(current.items())
        ]

    async def get_daily_pickup(self, property_id, start_date, end_date, lookback_days=1):
        return await sync_to_async(self.query_daily_pickup)(
            property_id, start_date, end_date, lookback_days
        )
