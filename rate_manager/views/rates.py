"""
Rate calendar views: calendar load, override editing, submission and
PDF export.

Calendar load and submission talk to the PMS and are async; override
editing only touches the in-memory workspace.
"""

import logging

from django.http import HttpResponse
from django.utils import timezone
from django.views.generic import View

from rate_manager.domain import quantize_rate
from rate_manager.exceptions import (
    ConcurrentSubmission,
    FeedFailure,
    FrozenDateError,
    InvalidOverrideError,
    SubmissionFailure,
)
from rate_manager.services import CalendarPDFExporter, get_workspace
from .mixins import RateManagerMixin

logger = logging.getLogger(__name__)


def workspace_state(workspace, include_targeting=False):
    return {
        'start_date': workspace.start_date.isoformat() if workspace.start_date else None,
        'pickup_window': workspace.pickup_window,
        'pending_count': len(workspace.store),
        'rows': workspace.rows(include_targeting=include_targeting),
    }


class RateCalendarView(RateManagerMixin, View):
    """
    Load the rate calendar.

    URL: /org/{org_code}/{prop_code}/api/rates/calendar/
    Query: ?start=YYYY-MM-DD&days=N&pickup_window=N&include_targeting=1
    """

    async def get(self, request, *args, **kwargs):
        prop = await self.aget_hotel()
        if prop is None:
            return self.not_found()

        try:
            start_date = self.parse_date(request.GET.get('start'))
            days = int(request.GET['days']) if request.GET.get('days') else None
            pickup_window = int(request.GET['pickup_window']) if request.GET.get('pickup_window') else None
        except ValueError as e:
            return self.error_response(str(e))
        if (days is not None and days < 1) or (pickup_window is not None and pickup_window < 1):
            return self.error_response('days and pickup_window must be at least 1')

        workspace = get_workspace(prop)
        if pickup_window is not None:
            workspace.pickup_window = pickup_window

        try:
            load = await workspace.load_rates(start_date, days)
        except FeedFailure as e:
            return self.error_response(str(e), status=502, sources=e.sources)

        if load is None:
            return self.error_response('Calendar load was superseded by a newer request', status=409)

        include_targeting = request.GET.get('include_targeting') in ('1', 'true')
        return self.success_response(workspace_state(workspace, include_targeting))


class RateOverrideView(RateManagerMixin, View):
    """
    Set a pending override for one date.

    URL: /org/{org_code}/{prop_code}/api/rates/overrides/

    POST body:
        {"date": "2026-03-15", "base_rate": "95.00"}
        {"date": "2026-03-15", "sell_rate": "150.00", "include_targeting": false}
    """

    def post(self, request, *args, **kwargs):
        prop = self.get_hotel()
        if prop is None:
            return self.not_found()

        workspace = get_workspace(prop)
        try:
            data = self.parse_json_body()
            stay_date = self.parse_date(data.get('date'))
            if stay_date is None:
                return self.error_response('date is required')

            if data.get('sell_rate') not in (None, ''):
                result = workspace.set_target_sell_rate(
                    stay_date,
                    self.parse_decimal(data['sell_rate']),
                    include_targeting=bool(data.get('include_targeting', False)),
                )
            elif data.get('base_rate') not in (None, ''):
                result = workspace.set_base_override(stay_date, self.parse_decimal(data['base_rate']))
            else:
                return self.error_response('Provide base_rate or sell_rate')
        except (FrozenDateError, InvalidOverrideError, ValueError) as e:
            return self.error_response(str(e))

        return self.success_response({
            'date': stay_date.isoformat(),
            'base_rate': str(quantize_rate(result.value)),
            'was_clamped': result.was_clamped,
            'pending_count': len(workspace.store),
        })


class ClearOverrideView(RateManagerMixin, View):
    """
    Drop the pending override for a date.

    URL: /org/{org_code}/{prop_code}/api/rates/overrides/clear/
    """

    def post(self, request, *args, **kwargs):
        prop = self.get_hotel()
        if prop is None:
            return self.not_found()

        try:
            data = self.parse_json_body()
            stay_date = self.parse_date(data.get('date'))
        except ValueError as e:
            return self.error_response(str(e))
        if stay_date is None:
            return self.error_response('date is required')

        workspace = get_workspace(prop)
        workspace.clear_override(stay_date)
        return self.success_response({
            'date': stay_date.isoformat(),
            'pending_count': len(workspace.store),
        })


class SubmitOverridesView(RateManagerMixin, View):
    """
    Push all pending overrides to the PMS.

    URL: /org/{org_code}/{prop_code}/api/rates/submit/
    """

    async def post(self, request, *args, **kwargs):
        prop = await self.aget_hotel()
        if prop is None:
            return self.not_found()

        workspace = get_workspace(prop)
        try:
            outcome = await workspace.submit()
        except ConcurrentSubmission as e:
            return self.error_response(str(e), status=409)
        except SubmissionFailure as e:
            return self.error_response(
                str(e), status=502,
                dates=[d.isoformat() for d in e.dates],
            )

        message = 'Nothing to submit' if outcome.status == 'noop' else f"Submitted {len(outcome.submitted)} overrides"
        return self.success_response(outcome.to_dict(), message=message)


class RateCalendarPDFView(RateManagerMixin, View):
    """
    Export the loaded rate calendar as PDF.

    URL: /org/{org_code}/{prop_code}/rates/calendar/pdf/
    """

    def get(self, request, *args, **kwargs):
        prop = self.get_hotel()
        if prop is None:
            return self.not_found()

        workspace = get_workspace(prop)
        if not workspace.is_loaded:
            return HttpResponse("Load the rate calendar before exporting", status=400)

        pdf_buffer = CalendarPDFExporter(prop).render(workspace.rows())

        response = HttpResponse(pdf_buffer, content_type='application/pdf')
        filename = f"rate_calendar_{prop.code}_{timezone.now().strftime('%Y%m%d')}.pdf"
        response['Content-Disposition'] = f'attachment; filename="{filename}"'
        return response
