"""
Management command to show the pricing stack for one date.

Usage:
    python manage.py preview_rate atoll-resorts biosphere-inn --date 2026-03-15 --base-rate 100
    python manage.py preview_rate atoll-resorts biosphere-inn --date 2026-03-15 --sell-rate 130 --targeting
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from django.core.management.base import BaseCommand, CommandError

from rate_manager.domain import RateOptions, quantize_rate
from rate_manager.models import Property


class Command(BaseCommand):
    help = 'Calculate the sell rate for a base rate (or the base rate for a target sell rate)'

    def add_arguments(self, parser):
        parser.add_argument('org_code', type=str)
        parser.add_argument('prop_code', type=str)
        parser.add_argument('--date', type=str, help='Stay date (YYYY-MM-DD), default today')
        parser.add_argument('--base-rate', type=str, help='PMS base rate')
        parser.add_argument('--sell-rate', type=str, help='Target sell rate')
        parser.add_argument('--targeting', action='store_true', help='Include mobile/country rates')

    def handle(self, *args, **options):
        from rate_manager.services import AssetConfigStore, RateFactorCalculator

        try:
            prop = Property.objects.get(organization__code=options['org_code'], code=options['prop_code'])
        except Property.DoesNotExist:
            raise CommandError(f"Property not found: {options['org_code']}/{options['prop_code']}")

        try:
            stay_date = datetime.strptime(options['date'], '%Y-%m-%d').date() if options['date'] else date.today()
            base_rate = Decimal(options['base_rate']) if options['base_rate'] else None
            sell_rate = Decimal(options['sell_rate']) if options['sell_rate'] else None
        except (ValueError, InvalidOperation) as e:
            raise CommandError(f'Invalid argument: {e}')

        if base_rate is None and sell_rate is None:
            raise CommandError('Provide --base-rate or --sell-rate')

        profile = AssetConfigStore().get_config(prop.id)
        calculator = RateFactorCalculator(profile)
        rate_options = RateOptions(include_targeting=options['targeting'])
        member = profile.member_discount_percent

        if sell_rate is not None:
            base_rate = calculator.inverse(sell_rate, member, stay_date, rate_options)
            if base_rate <= 0:
                raise CommandError(f'Cannot satisfy target sell rate {sell_rate}')
            self.stdout.write(f"Required base rate: {quantize_rate(base_rate)}")

        breakdown = calculator.breakdown(base_rate, member, stay_date, rate_options)

        self.stdout.write(f"{prop.name} | {stay_date.isoformat()}")
        self.stdout.write(f"  {'base':<16} {str(quantize_rate(base_rate)):>12}")
        for step in breakdown['steps']:
            self.stdout.write(f"  {step['name']:<16} ×{Decimal(step['factor']):.4f} {step['running_rate']:>12}")
        self.stdout.write(self.style.SUCCESS(f"  Sell rate: {breakdown['sell_rate_display']}"))
