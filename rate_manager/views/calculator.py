"""
Calculator views: pricing stack configuration and rate preview.
"""

import logging
from datetime import date

from django.core.exceptions import ValidationError
from django.views.generic import View

from rate_manager.domain import RateOptions, quantize_rate
from rate_manager.services import AssetConfigStore, RateFactorCalculator, profile_from_dict
from .mixins import RateManagerMixin

logger = logging.getLogger(__name__)


class CalculatorConfigView(RateManagerMixin, View):
    """
    Get or save the calculator profile.

    URL: /org/{org_code}/{prop_code}/api/calculator/config/
    """

    def get(self, request, *args, **kwargs):
        prop = self.get_hotel()
        if prop is None:
            return self.not_found()

        profile = AssetConfigStore().get_config(prop.id)
        return self.success_response(profile.to_dict())

    def post(self, request, *args, **kwargs):
        prop = self.get_hotel()
        if prop is None:
            return self.not_found()

        try:
            data = self.parse_json_body()
            profile = profile_from_dict(
                data,
                member_discount_percent=data.get('member_discount_percent', prop.member_discount_percent),
            )
            saved = AssetConfigStore().save_config(prop.id, profile)
        except ValidationError as e:
            return self.error_response('; '.join(e.messages))
        except ValueError as e:
            return self.error_response(str(e))
        except Exception:
            logger.exception("Calculator config save error for %s", prop)
            return self.error_response('Failed to save calculator config', status=500)

        return self.success_response(saved.to_dict(), message='Calculator config saved')


class CalculatorPreviewView(RateManagerMixin, View):
    """
    Forward or inverse rate calculation with the full step breakdown.

    URL: /org/{org_code}/{prop_code}/api/calculator/preview/

    POST body:
        {"date": "2026-03-15", "base_rate": "100"}            → sell rate
        {"date": "2026-03-15", "sell_rate": "130"}            → required base rate
        optional: "include_targeting": true, "multiplier": "1.2"
    """

    def post(self, request, *args, **kwargs):
        prop = self.get_hotel()
        if prop is None:
            return self.not_found()

        try:
            data = self.parse_json_body()
            stay_date = self.parse_date(data.get('date')) or date.today()
            base_rate = self.parse_decimal(data.get('base_rate'))
            sell_rate = self.parse_decimal(data.get('sell_rate'))
            options = RateOptions(
                include_targeting=bool(data.get('include_targeting', False)),
                force_multiplier=self.parse_decimal(data.get('multiplier')),
            )
        except ValueError as e:
            return self.error_response(str(e))

        if base_rate is None and sell_rate is None:
            return self.error_response('Provide base_rate or sell_rate')

        profile = AssetConfigStore().get_config(prop.id)
        calculator = RateFactorCalculator(profile)
        member = profile.member_discount_percent

        if sell_rate is not None:
            base_rate = calculator.inverse(sell_rate, member, stay_date, options)
            if base_rate <= 0:
                return self.error_response(f'Cannot satisfy target sell rate {sell_rate}')

        breakdown = calculator.breakdown(base_rate, member, stay_date, options)
        breakdown['date'] = stay_date.isoformat()
        breakdown['base_rate_display'] = str(quantize_rate(base_rate))
        return self.success_response(breakdown)
