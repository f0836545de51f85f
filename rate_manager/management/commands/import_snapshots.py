"""
Management command to import daily metric or pickup snapshots.

Usage:
    python manage.py import_snapshots atoll-resorts biosphere-inn metrics.xlsx
    python manage.py import_snapshots atoll-resorts biosphere-inn pickup.csv --type pickup
    python manage.py import_snapshots atoll-resorts biosphere-inn pickup.csv --type pickup --snapshot-date 2026-03-01
"""

from datetime import datetime
from pathlib import Path

from django.core.management.base import BaseCommand, CommandError

from rate_manager.models import Property


class Command(BaseCommand):
    help = 'Import daily metric or pickup snapshots from Excel or CSV file'

    def add_arguments(self, parser):
        parser.add_argument('org_code', type=str, help='Organization code')
        parser.add_argument('prop_code', type=str, help='Property code')
        parser.add_argument(
            'file_path',
            type=str,
            help='Path to the Excel or CSV file to import'
        )
        parser.add_argument(
            '--type',
            choices=['metrics', 'pickup'],
            default='metrics',
            help='Snapshot type (default: metrics)'
        )
        parser.add_argument(
            '--snapshot-date',
            type=str,
            help='Snapshot date (YYYY-MM-DD) for pickup files without a Snapshot Date column'
        )

    def handle(self, *args, **options):
        from rate_manager.services import SnapshotImportService

        file_path = Path(options['file_path'])
        if not file_path.exists():
            raise CommandError(f'File not found: {file_path}')
        if file_path.suffix.lower() not in ['.xlsx', '.xls', '.csv']:
            raise CommandError(f'Unsupported file format: {file_path.suffix}')

        try:
            prop = Property.objects.get(
                organization__code=options['org_code'],
                code=options['prop_code'],
            )
        except Property.DoesNotExist:
            raise CommandError(f"Property not found: {options['org_code']}/{options['prop_code']}")

        snapshot_date = None
        if options['snapshot_date']:
            try:
                snapshot_date = datetime.strptime(options['snapshot_date'], '%Y-%m-%d').date()
            except ValueError:
                raise CommandError(f"Invalid snapshot date: {options['snapshot_date']}")

        service = SnapshotImportService(hotel=prop)
        self.stdout.write(f"Importing {options['type']} snapshots for {prop.name} from {file_path.name}")

        if options['type'] == 'pickup':
            result = service.import_pickup(file_path, snapshot_date=snapshot_date)
        else:
            result = service.import_metrics(file_path)

        stats = result['stats']
        if result['success']:
            self.stdout.write(self.style.SUCCESS('✓ Import completed'))
        else:
            self.stdout.write(self.style.ERROR('✗ Import failed'))

        self.stdout.write(f"  Total rows:    {stats['rows_total']}")
        self.stdout.write(self.style.SUCCESS(f"  Created:       {stats['rows_created']}"))
        self.stdout.write(f"  Updated:       {stats['rows_updated']}")
        self.stdout.write(f"  Skipped:       {stats['rows_skipped']}")

        if result['errors']:
            self.stdout.write(self.style.WARNING(f"Errors ({len(result['errors'])}):"))
            for error in result['errors'][:20]:
                self.stdout.write(f"  Row {error['row']}: {error['message']}")
