"""
Tests for the rate calendar PDF export.
"""

from datetime import date

import pytest

from rate_manager.domain import RateCalendarDay
from rate_manager.services.export_service import CalendarPDFExporter, group_rows_by_month


def rows_for(*dates, **fields):
    return [dict(RateCalendarDay(date=d, **fields).to_dict(), override=None, override_state='unset') for d in dates]


class TestGroupRowsByMonth:

    def test_empty(self):
        assert group_rows_by_month([]) == {}

    def test_gap_months_included(self):
        groups = group_rows_by_month(rows_for(date(2026, 1, 31), date(2026, 3, 1), date(2026, 3, 2)))

        assert list(groups) == [date(2026, 1, 1), date(2026, 2, 1), date(2026, 3, 1)]
        assert len(groups[date(2026, 1, 1)]) == 1
        assert groups[date(2026, 2, 1)] == []
        assert len(groups[date(2026, 3, 1)]) == 2


@pytest.mark.django_db
class TestCalendarPDFExporter:

    def test_render_pdf(self, hotel):
        rows = rows_for(date(2026, 3, 15), date(2026, 4, 2), is_frozen=True)
        buffer = CalendarPDFExporter(hotel).render(rows)
        assert buffer.read(4) == b'%PDF'

    def test_render_empty_calendar(self, hotel):
        assert CalendarPDFExporter(hotel).render([]).getvalue().startswith(b'%PDF')
