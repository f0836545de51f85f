"""
PMS Gateway
===========

Everything that talks to the PMS rate API.

PmsRateClient - thin async HTTP client (OAuth refresh-token flow,
                getRate, putRate batches).
PmsGateway    - what the calendar and the submission pipeline use:
                preview rates for a date window and override pushes
                for the base room plus every differential room.

Preview flow per date:
    live PMS rate → forward calculation (suggested) → guardrail chain
    → Manual calendar entry wins over the guardrailed rate
"""

import logging
from datetime import date, timedelta

import httpx
from asgiref.sync import sync_to_async
from django.db import transaction

from rate_manager.conf import get_setting
from rate_manager.domain import (
    PreviewDay,
    RateOptions,
    SOURCE_AI,
    SOURCE_MANUAL,
    as_date,
    quantize_rate,
    to_decimal,
)
from rate_manager.exceptions import PmsGatewayError
from rate_manager.models import RateCalendarEntry
from .config_store import AssetConfigStore
from .differentials import calculate_differential
from .guardrails import apply_guardrails
from .rate_factors import RateFactorCalculator

logger = logging.getLogger(__name__)


# =============================================================================
# HTTP CLIENT
# =============================================================================

class PmsRateClient:
    """
    Async client for the PMS rate API.

    Usage:
        async with PmsRateClient() as client:
            rates = await client.get_rates('12345', '501', start, end)
            ack = await client.post_rate_batch('12345', [
                {'rate_id': 'R-501', 'date': '2026-03-15', 'rate': Decimal('120.00')},
            ])

    Credentials default to the RATE_MANAGER settings. ``transport`` is
    handed to httpx (tests pass an httpx.MockTransport).
    """

    def __init__(self, api_url=None, token_url=None, client_id=None, client_secret=None,
                 refresh_token=None, timeout=None, transport=None):
        self.api_url = (api_url or get_setting('PMS_API_URL')).rstrip('/')
        self.token_url = token_url or get_setting('PMS_TOKEN_URL')
        self.client_id = client_id or get_setting('PMS_CLIENT_ID')
        self.client_secret = client_secret or get_setting('PMS_CLIENT_SECRET')
        self.refresh_token = refresh_token or get_setting('PMS_REFRESH_TOKEN')
        self.timeout = timeout or get_setting('PMS_TIMEOUT_SECONDS')
        self.transport = transport
        self.client = None
        self._access_token = None

        if not all([self.client_id, self.client_secret, self.refresh_token]):
            logger.warning("PMS OAuth credentials not fully configured")

    async def __aenter__(self):
        self.client = httpx.AsyncClient(timeout=self.timeout, transport=self.transport)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.client.aclose()
        self.client = None

    def _get_url(self, endpoint):
        return f"{self.api_url}/{endpoint}"

    async def get_access_token(self):
        """
        Exchange the refresh token for an access token.

        The token is cached for the lifetime of the client.
        """
        if self._access_token:
            return self._access_token

        if not all([self.client_id, self.client_secret, self.refresh_token]):
            raise PmsGatewayError("PMS OAuth service is not configured")

        try:
            response = await self.client.post(self.token_url, data={
                'grant_type': 'refresh_token',
                'client_id': self.client_id,
                'client_secret': self.client_secret,
                'refresh_token': self.refresh_token,
            })
            response.raise_for_status()
            token_data = response.json()
        except httpx.HTTPStatusError as e:
            raise PmsGatewayError(f"Token refresh failed: {e.response.text}") from e
        except (httpx.RequestError, ValueError) as e:
            raise PmsGatewayError(f"Token refresh failed: {e}") from e

        if not token_data.get('access_token'):
            raise PmsGatewayError("Token refresh succeeded but no access_token was returned")

        self._access_token = token_data['access_token']
        return self._access_token

    async def _request(self, method, endpoint, pms_property_id, **kwargs):
        token = await self.get_access_token()
        headers = {
            'Authorization': f'Bearer {token}',
            'X-PROPERTY-ID': str(pms_property_id),
        }

        try:
            response = await self.client.request(method, self._get_url(endpoint), headers=headers, **kwargs)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error("PMS %s %s failed with %s: %s", method, endpoint, e.response.status_code, e.response.text)
            raise PmsGatewayError(f"{endpoint} failed: {e.response.text}") from e
        except (httpx.RequestError, ValueError) as e:
            logger.error("PMS %s %s failed: %s", method, endpoint, e)
            raise PmsGatewayError(f"{endpoint} failed: {e}") from e

        if isinstance(data, dict) and data.get('success') is False:
            raise PmsGatewayError(f"{endpoint} failed: {data.get('message', data)}")
        return data

    async def get_rates(self, pms_property_id, room_type_id, start_date, end_date):
        """
        Fetch live base rates for a room type.

        Returns:
            List of dicts with {date: 'YYYY-MM-DD', rate: Decimal}
        """
        data = await self._request('GET', 'getRate', pms_property_id, params={
            'roomTypeID': room_type_id,
            'startDate': as_date(start_date).isoformat(),
            'endDate': as_date(end_date).isoformat(),
            'detailedRates': 'false',
        })

        payload = data.get('data') if isinstance(data.get('data'), dict) else data
        detailed = payload.get('roomRateDetailed') or []

        rates = []
        for row in detailed:
            if row.get('date') and row.get('rate') not in (None, ''):
                rates.append({'date': row['date'], 'rate': to_decimal(row['rate'])})

        logger.info("Fetched %d live rates for room type %s", len(rates), room_type_id)
        return rates

    async def post_rate_batch(self, pms_property_id, rates):
        """
        Push a batch of single-night rates.

        Args:
            pms_property_id: PMS property ID
            rates: list of {rate_id, date, rate}

        Returns:
            PMS response dict (contains jobReferenceID)
        """
        if not rates:
            return {'success': True, 'message': 'No rates to post.'}

        form = {}
        for index, item in enumerate(rates):
            form[f'rates[{index}][rateID]'] = str(item['rate_id'])
            form[f'rates[{index}][interval][0][startDate]'] = item['date']
            form[f'rates[{index}][interval][0][endDate]'] = item['date']
            form[f'rates[{index}][interval][0][rate]'] = str(quantize_rate(item['rate']))

        data = await self._request('POST', 'putRate', pms_property_id, data=form)
        logger.info("Posted %d rates, job %s", len(rates), data.get('jobReferenceID'))
        return data


# =============================================================================
# PREVIEW
# =============================================================================

def build_preview_days(start_date, days, live_rates, entries, profile, guardrails, today):
    """
    Build one PreviewDay per date in the window.

    Args:
        start_date: first date
        days: number of dates
        live_rates: dict date → Decimal live PMS rate
        entries: dict date → (rate, source) stored calendar entries
        profile: CalculatorProfile
        guardrails: GuardrailConfig
        today: date the preview is generated on

    Returns:
        list of PreviewDay
    """
    calculator = RateFactorCalculator(profile)
    options = RateOptions(include_targeting=True)
    preview = []

    for offset in range(days):
        stay_date = start_date + timedelta(days=offset)
        live_rate = live_rates.get(stay_date)

        suggested = calculator.forward(live_rate, profile.member_discount_percent, stay_date, options)
        suggested = quantize_rate(suggested) if suggested > 0 else None

        result = apply_guardrails(suggested, live_rate, guardrails, stay_date, today)

        stored_rate, stored_source = entries.get(stay_date, (None, SOURCE_AI))
        if stored_source == SOURCE_MANUAL and to_decimal(stored_rate) > 0:
            rate = to_decimal(stored_rate)
            source = SOURCE_MANUAL
        else:
            rate = to_decimal(result.final_rate)
            source = stored_source

        preview.append(PreviewDay(
            date=stay_date,
            live_rate=live_rate,
            suggested_rate=suggested,
            rate=rate,
            source=source,
            is_frozen=result.is_frozen,
            is_floor_active=result.is_floor_active,
            guardrail_min=result.min_applied,
        ))

    return preview


def chunked(items, size):
    for index in range(0, len(items), size):
        yield items[index:index + size]


class PmsGateway:
    """
    Usage:
        gateway = PmsGateway()
        days = await gateway.get_preview_rates(prop.id, prop.base_room_type_id, date.today(), 30)
        ack = await gateway.submit_overrides(prop.id, prop.pms_property_id, prop.base_room_type_id,
                                             [{'date': '2026-03-15', 'rate': Decimal('120.00')}])
    """

    def __init__(self, config_store=None, client_factory=None, chunk_size=None, today=None):
        self.config_store = config_store or AssetConfigStore()
        self.client_factory = client_factory or PmsRateClient
        self.chunk_size = chunk_size or get_setting('SUBMISSION_CHUNK_SIZE')
        self.today = today or date.today

    # =========================================================================
    # PREVIEW RATES
    # =========================================================================

    def _load_preview_context(self, property_id, base_room_type_id, start_date, end_date):
        prop = self.config_store.get_property(property_id)
        entries = {
            entry.stay_date: (entry.rate, entry.source)
            for entry in RateCalendarEntry.objects.filter(
                hotel_id=property_id,
                room_type_id=base_room_type_id,
                stay_date__gte=start_date,
                stay_date__lte=end_date,
            )
        }
        return {
            'pms_property_id': prop.pms_property_id,
            'profile': self.config_store.get_config(property_id),
            'guardrails': self.config_store.get_guardrails(property_id),
            'entries': entries,
        }

    async def get_preview_rates(self, property_id, base_room_type_id, start_date, days):
        """
        Preview rates for a window of dates.

        Raises:
            PmsGatewayError: property not connected or PMS call failed
        """
        start_date = as_date(start_date)
        end_date = start_date + timedelta(days=days - 1)

        context = await sync_to_async(self._load_preview_context)(
            property_id, base_room_type_id, start_date, end_date
        )
        if not context['pms_property_id']:
            raise PmsGatewayError(f"Property {property_id} has no PMS property ID")

        async with self.client_factory() as client:
            live = await client.get_rates(context['pms_property_id'], base_room_type_id, start_date, end_date)
        live_rates = {as_date(row['date']): row['rate'] for row in live}

        return build_preview_days(
            start_date, days, live_rates,
            context['entries'], context['profile'], context['guardrails'],
            self.today(),
        )

    # =========================================================================
    # OVERRIDE SUBMISSION
    # =========================================================================

    def build_override_payload(self, property_id, room_type_id, overrides):
        """
        Turn base-room overrides into PMS rate rows.

        Each valid override produces a row for the base room and one per
        differential room that has a PMS rate ID. Non-positive rates are
        dropped.

        Returns:
            (valid overrides, list of {rate_id, date, rate})

        Raises:
            PmsGatewayError: the property has no rate ID map
        """
        prop = self.config_store.get_property(property_id)
        rate_id_map = prop.rate_id_map or {}
        if not rate_id_map:
            raise PmsGatewayError("Rate ID map is missing. Re-sync the property with the PMS.")

        differentials = self.config_store.get_differentials(property_id)
        base_rate_id = rate_id_map.get(str(room_type_id))

        valid = []
        batch = []
        for override in overrides:
            base_rate = to_decimal(override.get('rate'))
            if base_rate <= 0:
                logger.warning("Dropping invalid override %s for %s", override.get('rate'), override.get('date'))
                continue

            stay_date = as_date(override['date']).isoformat()
            valid.append({'date': stay_date, 'rate': base_rate})

            if base_rate_id:
                batch.append({'rate_id': base_rate_id, 'date': stay_date, 'rate': base_rate})

            for rule in differentials:
                if str(rule.room_type_id) == str(room_type_id):
                    continue
                derived_rate_id = rate_id_map.get(str(rule.room_type_id))
                if not derived_rate_id:
                    continue
                derived = calculate_differential(base_rate, rule.room_type_id, differentials)
                if derived is not None:
                    batch.append({'rate_id': derived_rate_id, 'date': stay_date, 'rate': derived})

        return valid, batch

    def record_overrides(self, property_id, room_type_id, overrides):
        """Upsert Manual calendar entries for pushed overrides."""
        with transaction.atomic():
            for override in overrides:
                RateCalendarEntry.objects.update_or_create(
                    hotel_id=property_id,
                    room_type_id=str(room_type_id),
                    stay_date=as_date(override['date']),
                    defaults={'rate': quantize_rate(override['rate']), 'source': SOURCE_MANUAL},
                )

    async def submit_overrides(self, property_id, pms_property_id, room_type_id, overrides):
        """
        Push base-rate overrides (and derived room rates) to the PMS.

        Pushing the same overrides twice leaves the PMS and the calendar
        entries in the same state.

        Returns:
            dict with pushed row count and PMS job IDs
        """
        valid, batch = await sync_to_async(self.build_override_payload)(
            property_id, room_type_id, overrides
        )
        if not valid:
            return {'pushed': 0, 'overrides': 0, 'jobs': []}

        jobs = []
        async with self.client_factory() as client:
            for chunk in chunked(batch, self.chunk_size):
                ack = await client.post_rate_batch(pms_property_id, chunk)
                jobs.append(ack.get('jobReferenceID'))

        await sync_to_async(self.record_overrides)(property_id, room_type_id, valid)
        logger.info(
            "Pushed %d rate rows (%d overrides) for property %s in %d batches",
            len(batch), len(valid), property_id, len(jobs),
        )
        return {'pushed': len(batch), 'overrides': len(valid), 'jobs': jobs}
