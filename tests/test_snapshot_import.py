"""
Tests for importing metric and pickup snapshot exports.
"""

from datetime import date
from decimal import Decimal

import pytest

from rate_manager.models import DailyMetricSnapshot, DailyPickupSnapshot
from rate_manager.services.snapshot_import import SnapshotImportService


pytestmark = pytest.mark.django_db


@pytest.fixture
def write_csv(tmp_path):
    def write(name, text):
        path = tmp_path / name
        path.write_text(text)
        return path
    return write


class TestMetricsImport:

    def test_import_creates_rows(self, hotel, write_csv):
        path = write_csv('metrics.csv', (
            "Date,Rooms Sold,Rooms Unsold,ADR\n"
            "2026-03-15,30,10,\"$1,145.50\"\n"
            "2026-03-16,12,28,98\n"
        ))

        result = SnapshotImportService(hotel).import_metrics(path)

        assert result['success']
        assert result['stats']['rows_created'] == 2
        snapshot = DailyMetricSnapshot.objects.get(hotel=hotel, stay_date=date(2026, 3, 15))
        assert snapshot.rooms_sold == 30
        assert snapshot.adr == Decimal('1145.50')

    def test_reimport_updates(self, hotel, write_csv):
        path = write_csv('metrics.csv', "Date,Rooms Sold\n2026-03-15,30\n")
        SnapshotImportService(hotel).import_metrics(path)

        path = write_csv('metrics.csv', "Date,Rooms Sold\n2026-03-15,31\n")
        result = SnapshotImportService(hotel).import_metrics(path)

        assert result['stats']['rows_updated'] == 1
        assert DailyMetricSnapshot.objects.get(hotel=hotel).rooms_sold == 31

    def test_bad_rows_skipped_with_row_number(self, hotel, write_csv):
        path = write_csv('metrics.csv', "Date,Rooms Sold\n2026-03-15,30\nnot-a-date,5\n")

        result = SnapshotImportService(hotel).import_metrics(path)

        assert result['success']
        assert result['stats']['rows_skipped'] == 1
        assert result['errors'] == [{'row': 3, 'message': 'Invalid stay date'}]

    def test_missing_columns_fail(self, hotel, write_csv):
        path = write_csv('metrics.csv', "Date,Revenue\n2026-03-15,300\n")

        result = SnapshotImportService(hotel).import_metrics(path)

        assert not result['success']
        assert 'rooms_sold' in result['errors'][0]['message']

    def test_unsupported_format(self, hotel, write_csv):
        result = SnapshotImportService(hotel).import_metrics(write_csv('metrics.txt', 'x'))
        assert not result['success']


class TestPickupImport:

    def test_snapshot_date_from_column(self, hotel, write_csv):
        path = write_csv('pickup.csv', (
            "Snapshot Date,Date,Rooms Sold\n"
            "2026-03-10,2026-03-15,13\n"
            "2026-03-10,2026-03-16,4\n"
        ))

        result = SnapshotImportService(hotel).import_pickup(path)

        assert result['stats']['rows_created'] == 2
        assert DailyPickupSnapshot.objects.filter(snapshot_date=date(2026, 3, 10)).count() == 2

    def test_snapshot_date_argument(self, hotel, write_csv):
        path = write_csv('pickup.csv', "Date,Rooms Sold\n2026-03-15,13\n")

        SnapshotImportService(hotel).import_pickup(path, snapshot_date=date(2026, 3, 9))

        assert DailyPickupSnapshot.objects.get(hotel=hotel).snapshot_date == date(2026, 3, 9)

    def test_missing_snapshot_date_skips(self, hotel, write_csv):
        path = write_csv('pickup.csv', "Date,Rooms Sold\n2026-03-15,13\n")

        result = SnapshotImportService(hotel).import_pickup(path)

        assert result['stats']['rows_skipped'] == 1
        assert not DailyPickupSnapshot.objects.exists()
