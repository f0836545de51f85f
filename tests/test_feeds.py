"""
Tests for the snapshot-backed metrics and pickup feeds.
"""

from datetime import date
from decimal import Decimal

import pytest
from asgiref.sync import async_to_sync

from rate_manager.models import DailyMetricSnapshot, DailyPickupSnapshot
from rate_manager.services.feeds import SnapshotMetricsFeed, SnapshotPickupFeed


pytestmark = pytest.mark.django_db

START = date(2026, 3, 15)
END = date(2026, 3, 17)


def pickup_rows(hotel, snapshot_date, sold_by_day):
    for day, sold in sold_by_day.items():
        DailyPickupSnapshot.objects.create(
            hotel=hotel, snapshot_date=snapshot_date, stay_date=date(2026, 3, day), rooms_sold=sold,
        )


class TestMetricsFeed:

    def test_rows_within_window(self, hotel):
        for day in (14, 15, 16, 18):
            DailyMetricSnapshot.objects.create(
                hotel=hotel, stay_date=date(2026, 3, day), rooms_sold=30, rooms_unsold=10, adr=Decimal('150'),
            )

        rows = SnapshotMetricsFeed().query_daily_metrics(hotel.id, START, END)

        assert [r['period'] for r in rows] == ['2026-03-15', '2026-03-16']
        assert rows[0]['rooms_sold'] == 30
        assert rows[0]['adr'] == Decimal('150')

    def test_async_wrapper(self, hotel):
        DailyMetricSnapshot.objects.create(hotel=hotel, stay_date=START, rooms_sold=1, rooms_unsold=1)
        rows = async_to_sync(SnapshotMetricsFeed().get_daily_metrics)(hotel.id, START, END)
        assert len(rows) == 1

    def test_snapshot_occupancy(self, hotel):
        snapshot = DailyMetricSnapshot.objects.create(hotel=hotel, stay_date=START, rooms_sold=15, rooms_unsold=5)
        assert snapshot.occupancy == Decimal('75')


class TestPickupFeed:

    def test_pickup_against_previous_day(self, hotel):
        pickup_rows(hotel, date(2026, 3, 9), {15: 10, 16: 4})
        pickup_rows(hotel, date(2026, 3, 10), {15: 13, 16: 4, 17: 2})

        rows = SnapshotPickupFeed().query_daily_pickup(hotel.id, START, END)

        assert rows == [
            {'date': '2026-03-15', 'pickup': 3},
            {'date': '2026-03-16', 'pickup': 0},
            {'date': '2026-03-17', 'pickup': 2},
        ]

    def test_longer_window_uses_older_baseline(self, hotel):
        pickup_rows(hotel, date(2026, 3, 3), {15: 5})
        pickup_rows(hotel, date(2026, 3, 9), {15: 10})
        pickup_rows(hotel, date(2026, 3, 10), {15: 13})

        rows = SnapshotPickupFeed().query_daily_pickup(hotel.id, START, END, lookback_days=7)

        assert rows == [{'date': '2026-03-15', 'pickup': 8}]

    def test_no_baseline_gives_no_rows(self, hotel):
        pickup_rows(hotel, date(2026, 3, 10), {15: 13})
        assert SnapshotPickupFeed().query_daily_pickup(hotel.id, START, END) == []

    def test_no_snapshots(self, hotel):
        rows = async_to_sync(SnapshotPickupFeed().get_daily_pickup)(hotel.id, START, END, 3)
        assert rows == []
