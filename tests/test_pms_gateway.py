"""
Tests for the PMS rate client and gateway.

HTTP is served by an httpx.MockTransport, so nothing leaves the process.
"""

from datetime import date, timedelta
from decimal import Decimal
from urllib.parse import parse_qs

import httpx
import pytest
from asgiref.sync import async_to_sync

from rate_manager.domain import GuardrailConfig
from rate_manager.exceptions import PmsGatewayError
from rate_manager.models import Property, RateCalendarEntry, RoomDifferential
from rate_manager.services.pms_gateway import PmsGateway, PmsRateClient, build_preview_days, chunked


START = date(2026, 3, 15)


class FakePms:
    """Records requests and answers like the PMS rate API."""

    def __init__(self, rates=None, fail_endpoint=None, reject_endpoint=None):
        self.rates = rates or {}
        self.fail_endpoint = fail_endpoint
        self.reject_endpoint = reject_endpoint
        self.requests = []
        self.token_calls = 0
        self.jobs = 0

    def handler(self, request):
        self.requests.append(request)
        path = request.url.path

        if path.endswith('access_token'):
            self.token_calls += 1
            return httpx.Response(200, json={'access_token': 'token-123', 'expires_in': 3600})

        endpoint = path.rsplit('/', 1)[-1]
        if endpoint == self.fail_endpoint:
            return httpx.Response(500, text='upstream error')
        if endpoint == self.reject_endpoint:
            return httpx.Response(200, json={'success': False, 'message': 'Invalid rateID'})

        if endpoint == 'getRate':
            detailed = [{'date': d, 'rate': r} for d, r in self.rates.items()]
            return httpx.Response(200, json={'success': True, 'data': {'roomRateDetailed': detailed}})
        if endpoint == 'putRate':
            self.jobs += 1
            return httpx.Response(200, json={'success': True, 'jobReferenceID': f'job-{self.jobs}'})
        return httpx.Response(404)

    @property
    def transport(self):
        return httpx.MockTransport(self.handler)

    def client(self):
        return PmsRateClient(
            client_id='client', client_secret='secret', refresh_token='refresh',
            transport=self.transport,
        )

    def requests_to(self, endpoint):
        return [r for r in self.requests if r.url.path.endswith(endpoint)]


def form_of(request):
    return {k: v[0] for k, v in parse_qs(request.content.decode()).items()}


async def fetch_rates(client, *args):
    async with client:
        return await client.get_rates(*args)


async def post_batch(client, *args):
    async with client:
        return await client.post_rate_batch(*args)


# =============================================================================
# CLIENT
# =============================================================================

class TestPmsRateClient:

    def test_get_rates(self):
        pms = FakePms(rates={'2026-03-15': '120.5', '2026-03-16': 99})
        rates = async_to_sync(fetch_rates)(pms.client(), 'PMS-1', '501', START, START + timedelta(days=1))

        assert rates == [
            {'date': '2026-03-15', 'rate': Decimal('120.5')},
            {'date': '2026-03-16', 'rate': Decimal('99')},
        ]
        token_request = pms.requests_to('access_token')[0]
        assert form_of(token_request)['grant_type'] == 'refresh_token'

        request = pms.requests_to('getRate')[0]
        assert request.headers['Authorization'] == 'Bearer token-123'
        assert request.headers['X-PROPERTY-ID'] == 'PMS-1'
        assert request.url.params['roomTypeID'] == '501'
        assert request.url.params['startDate'] == '2026-03-15'
        assert request.url.params['endDate'] == '2026-03-16'

    def test_token_is_cached(self):
        pms = FakePms()

        async def scenario():
            async with pms.client() as client:
                await client.get_rates('PMS-1', '501', START, START)
                await client.get_rates('PMS-1', '501', START, START)

        async_to_sync(scenario)()
        assert pms.token_calls == 1

    def test_post_rate_batch_form(self):
        pms = FakePms()
        ack = async_to_sync(post_batch)(pms.client(), 'PMS-1', [
            {'rate_id': 'R-501', 'date': '2026-03-15', 'rate': Decimal('120.005')},
            {'rate_id': 'R-502', 'date': '2026-03-15', 'rate': Decimal('144')},
        ])

        assert ack['jobReferenceID'] == 'job-1'
        form = form_of(pms.requests_to('putRate')[0])
        assert form['rates[0][rateID]'] == 'R-501'
        assert form['rates[0][interval][0][startDate]'] == '2026-03-15'
        assert form['rates[0][interval][0][endDate]'] == '2026-03-15'
        assert form['rates[0][interval][0][rate]'] == '120.01'
        assert form['rates[1][interval][0][rate]'] == '144.00'

    def test_empty_batch_sends_nothing(self):
        pms = FakePms()
        ack = async_to_sync(post_batch)(pms.client(), 'PMS-1', [])
        assert ack['success'] is True
        assert pms.requests == []

    def test_http_error_raises(self):
        pms = FakePms(fail_endpoint='getRate')
        with pytest.raises(PmsGatewayError):
            async_to_sync(fetch_rates)(pms.client(), 'PMS-1', '501', START, START)

    def test_unsuccessful_response_raises(self):
        pms = FakePms(reject_endpoint='putRate')
        with pytest.raises(PmsGatewayError, match='Invalid rateID'):
            async_to_sync(post_batch)(pms.client(), 'PMS-1', [
                {'rate_id': 'R-501', 'date': '2026-03-15', 'rate': Decimal('120')},
            ])

    def test_unconfigured_credentials_raise(self, settings):
        settings.RATE_MANAGER = {}
        client = PmsRateClient(transport=FakePms().transport)
        with pytest.raises(PmsGatewayError, match='not configured'):
            async_to_sync(fetch_rates)(client, 'PMS-1', '501', START, START)


# =============================================================================
# PREVIEW
# =============================================================================

class TestBuildPreviewDays:

    def test_preview_chain(self, plain_profile):
        live = {START + timedelta(days=i): Decimal('100') for i in range(4)}
        entries = {
            START + timedelta(days=2): (Decimal('140'), 'Manual'),
            START + timedelta(days=3): (Decimal('111'), 'External'),
        }
        config = GuardrailConfig(rate_freeze_days=1)

        days = build_preview_days(START, 5, live, entries, plain_profile, config, START)

        frozen, open_day, manual, external, missing = days
        assert frozen.is_frozen
        assert frozen.rate == Decimal('100')
        assert frozen.suggested_rate == Decimal('130.00')

        assert not open_day.is_frozen
        assert open_day.rate == Decimal('130.00')
        assert open_day.source == 'AI'

        assert manual.rate == Decimal('140')
        assert manual.source == 'Manual'

        assert external.rate == Decimal('130.00')
        assert external.source == 'External'

        assert missing.live_rate is None
        assert missing.suggested_rate is None
        assert missing.rate == Decimal('0')

    def test_chunked(self):
        assert list(chunked([1, 2, 3, 4, 5], 2)) == [[1, 2], [3, 4], [5]]


# =============================================================================
# GATEWAY
# =============================================================================

@pytest.mark.django_db
class TestPmsGateway:

    def make_gateway(self, pms, chunk_size=30):
        return PmsGateway(client_factory=pms.client, chunk_size=chunk_size, today=lambda: START)

    def test_preview_rates_use_profile_and_manual_entries(self, hotel):
        RateCalendarEntry.objects.create(
            hotel=hotel, room_type_id='501', stay_date=START + timedelta(days=1),
            rate=Decimal('140'), source='Manual',
        )
        pms = FakePms(rates={'2026-03-15': '100', '2026-03-16': '100'})

        days = async_to_sync(self.make_gateway(pms).get_preview_rates)(hotel.id, '501', START, 2)

        # 100 × 1.3 × 0.85 (non-refundable) × 0.90 (mobile)
        assert days[0].rate == Decimal('99.45')
        assert days[0].source == 'AI'
        assert days[1].rate == Decimal('140')
        assert days[1].source == 'Manual'
        assert pms.requests_to('getRate')[0].headers['X-PROPERTY-ID'] == 'PMS-1'

    def test_preview_requires_pms_property(self, hotel):
        Property.objects.filter(pk=hotel.pk).update(pms_property_id='')
        with pytest.raises(PmsGatewayError):
            async_to_sync(self.make_gateway(FakePms()).get_preview_rates)(hotel.id, '501', START, 2)

    def test_submit_pushes_base_and_derived_rooms(self, hotel):
        RoomDifferential.objects.create(hotel=hotel, room_type_id='502', operator='+', value_percent=20)
        RoomDifferential.objects.create(hotel=hotel, room_type_id='503', operator='-', value_percent=10)
        RoomDifferential.objects.create(hotel=hotel, room_type_id='504', operator='+', value_percent=50)
        pms = FakePms()
        overrides = [
            {'date': '2026-03-15', 'rate': Decimal('100.00')},
            {'date': '2026-03-16', 'rate': Decimal('0')},
        ]

        ack = async_to_sync(self.make_gateway(pms, chunk_size=2).submit_overrides)(
            hotel.id, 'PMS-1', '501', overrides,
        )

        assert ack == {'pushed': 3, 'overrides': 1, 'jobs': ['job-1', 'job-2']}
        forms = [form_of(r) for r in pms.requests_to('putRate')]
        pushed = {
            form[f'rates[{i}][rateID]']: form[f'rates[{i}][interval][0][rate]']
            for form in forms for i in range(2) if f'rates[{i}][rateID]' in form
        }
        assert pushed == {'R-501': '100.00', 'R-502': '120.00', 'R-503': '90.00'}

        entry = RateCalendarEntry.objects.get(hotel=hotel, stay_date=START)
        assert entry.source == 'Manual'
        assert entry.rate == Decimal('100.00')
        assert not RateCalendarEntry.objects.filter(stay_date=START + timedelta(days=1)).exists()

    def test_resubmit_is_idempotent(self, hotel):
        gateway = self.make_gateway(FakePms())
        overrides = [{'date': '2026-03-15', 'rate': Decimal('100.00')}]

        async_to_sync(gateway.submit_overrides)(hotel.id, 'PMS-1', '501', overrides)
        async_to_sync(gateway.submit_overrides)(hotel.id, 'PMS-1', '501', overrides)

        assert RateCalendarEntry.objects.filter(hotel=hotel).count() == 1

    def test_no_valid_overrides_pushes_nothing(self, hotel):
        pms = FakePms()
        ack = async_to_sync(self.make_gateway(pms).submit_overrides)(
            hotel.id, 'PMS-1', '501', [{'date': '2026-03-15', 'rate': Decimal('-5')}],
        )
        assert ack == {'pushed': 0, 'overrides': 0, 'jobs': []}
        assert pms.requests == []

    def test_missing_rate_id_map_raises(self, hotel):
        Property.objects.filter(pk=hotel.pk).update(rate_id_map={})
        with pytest.raises(PmsGatewayError, match='Rate ID map'):
            async_to_sync(self.make_gateway(FakePms()).submit_overrides)(
                hotel.id, 'PMS-1', '501', [{'date': '2026-03-15', 'rate': Decimal('100')}],
            )

    def test_failed_push_records_nothing(self, hotel):
        pms = FakePms(fail_endpoint='putRate')
        with pytest.raises(PmsGatewayError):
            async_to_sync(self.make_gateway(pms).submit_overrides)(
                hotel.id, 'PMS-1', '501', [{'date': '2026-03-15', 'rate': Decimal('100')}],
            )
        assert not RateCalendarEntry.objects.exists()
