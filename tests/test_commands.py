"""
Tests for the rate manager management commands.
"""

from io import StringIO

import pytest
from django.core.management import CommandError, call_command

from rate_manager.models import DailyMetricSnapshot


pytestmark = pytest.mark.django_db


def run(*args, **kwargs):
    out = StringIO()
    call_command(*args, stdout=out, **kwargs)
    return out.getvalue()


class TestPreviewRate:

    def test_forward(self, hotel):
        output = run('preview_rate', 'atoll-resorts', 'biosphere-inn', date='2026-03-15', base_rate='100')
        assert 'non_refundable' in output
        assert 'Sell rate: 110.50' in output

    def test_inverse_with_targeting(self, hotel):
        output = run(
            'preview_rate', 'atoll-resorts', 'biosphere-inn',
            date='2026-03-15', sell_rate='99.45', targeting=True,
        )
        assert 'Required base rate: 100.00' in output
        assert 'mobile' in output

    def test_requires_a_rate(self, hotel):
        with pytest.raises(CommandError):
            run('preview_rate', 'atoll-resorts', 'biosphere-inn')

    def test_unknown_property(self, db):
        with pytest.raises(CommandError, match='Property not found'):
            run('preview_rate', 'atoll-resorts', 'nowhere', base_rate='100')


class TestImportSnapshots:

    def test_import_metrics(self, hotel, tmp_path):
        path = tmp_path / 'metrics.csv'
        path.write_text("Date,Rooms Sold,Rooms Unsold,ADR\n2026-03-15,30,10,145\n")

        output = run('import_snapshots', 'atoll-resorts', 'biosphere-inn', str(path))

        assert 'Import completed' in output
        assert DailyMetricSnapshot.objects.filter(hotel=hotel).count() == 1

    def test_missing_file(self, hotel, tmp_path):
        with pytest.raises(CommandError, match='File not found'):
            run('import_snapshots', 'atoll-resorts', 'biosphere-inn', str(tmp_path / 'missing.csv'))

    def test_bad_snapshot_date(self, hotel, tmp_path):
        path = tmp_path / 'pickup.csv'
        path.write_text("Date,Rooms Sold\n2026-03-15,13\n")
        with pytest.raises(CommandError, match='Invalid snapshot date'):
            run('import_snapshots', 'atoll-resorts', 'biosphere-inn', str(path),
                type='pickup', snapshot_date='yesterday')
