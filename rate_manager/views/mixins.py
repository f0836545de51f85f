"""
View mixins: RateManagerMixin.
"""

import json
import logging
from datetime import datetime
from decimal import Decimal, InvalidOperation

from asgiref.sync import sync_to_async
from django.http import JsonResponse

from rate_manager.models import Property

logger = logging.getLogger(__name__)


class RateManagerMixin:
    """
    Base mixin for the rate manager JSON API.

    Resolves the property from the org_code / prop_code URL kwargs and
    builds the {'success': ..., 'data' | 'error': ...} envelope.
    """

    @classmethod
    def as_view(cls, **initkwargs):
        # JSON API called from the rate grid, not from Django forms
        view = super().as_view(**initkwargs)
        view.csrf_exempt = True
        return view

    def get_hotel(self):
        """Active property from URL kwargs, or None."""
        return Property.objects.select_related('organization').filter(
            organization__code=self.kwargs.get('org_code'),
            organization__is_active=True,
            code=self.kwargs.get('prop_code'),
            is_active=True,
        ).first()

    async def aget_hotel(self):
        return await sync_to_async(self.get_hotel)()

    def json_response(self, data, status=200):
        """Return JSON response."""
        return JsonResponse(data, status=status)

    def error_response(self, message, status=400, **extra):
        """Return error JSON response."""
        response = {'success': False, 'error': message}
        response.update(extra)
        return JsonResponse(response, status=status)

    def success_response(self, data=None, message=None):
        """Return success JSON response."""
        response = {'success': True}
        if message:
            response['message'] = message
        if data is not None:
            response['data'] = data
        return JsonResponse(response)

    def not_found(self):
        return self.error_response('Property not found', status=404)

    def parse_json_body(self):
        """Decoded JSON body; raises ValueError for anything but an object."""
        try:
            data = json.loads(self.request.body or b'{}')
        except json.JSONDecodeError as e:
            raise ValueError(f'Invalid JSON: {e}') from e
        if not isinstance(data, dict):
            raise ValueError('Expected a JSON object')
        return data

    def parse_decimal(self, value, default=None):
        """Parse decimal from string; ValueError when malformed."""
        if value is None or value == '':
            return default
        try:
            number = Decimal(str(value))
        except InvalidOperation as e:
            raise ValueError(f'Invalid number: {value}') from e
        if not number.is_finite():
            raise ValueError(f'Invalid number: {value}')
        return number

    def parse_date(self, value):
        """Parse date from string (YYYY-MM-DD)."""
        if not value:
            return None
        try:
            return datetime.strptime(value, '%Y-%m-%d').date()
        except ValueError as e:
            raise ValueError(f'Invalid date: {value}') from e
