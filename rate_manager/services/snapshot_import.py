"""
Snapshot import: loads daily metric and pickup snapshots from PMS
exports (Excel/CSV) into DailyMetricSnapshot / DailyPickupSnapshot.
"""

import logging
from datetime import date
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Dict, Optional

import pandas as pd
from django.db import transaction

from rate_manager.models import DailyMetricSnapshot, DailyPickupSnapshot

logger = logging.getLogger(__name__)


class SnapshotImportService:
    """
    Import daily snapshot files for one property.

    Metrics files hold one row per stay date:
        Date | Rooms Sold | Rooms Unsold | ADR

    Pickup files hold rooms sold per stay date as of a snapshot date:
        Snapshot Date | Date | Rooms Sold
    (Snapshot Date may be omitted and passed to import_pickup instead.)

    Usage:
        service = SnapshotImportService(hotel=prop)
        result = service.import_metrics('exports/metrics.xlsx')
        print(result['stats']['rows_created'])
    """

    DEFAULT_COLUMN_MAPPING = {
        'stay_date': ['date', 'stay date', 'stay_date', 'period', 'night'],
        'snapshot_date': ['snapshot date', 'snapshot_date', 'as of', 'as_of'],
        'rooms_sold': ['rooms sold', 'rooms_sold', 'sold', 'room nights', 'rn'],
        'rooms_unsold': ['rooms unsold', 'rooms_unsold', 'unsold', 'available'],
        'adr': ['adr', 'average daily rate'],
    }

    def __init__(self, hotel, column_mapping: Dict = None):
        self.hotel = hotel
        self.column_mapping = column_mapping or self.DEFAULT_COLUMN_MAPPING
        self.errors = []
        self.stats = {
            'rows_total': 0,
            'rows_created': 0,
            'rows_updated': 0,
            'rows_skipped': 0,
        }

    # =========================================================================
    # FILE READING
    # =========================================================================

    def _read_file(self, file_path: Path) -> Optional[pd.DataFrame]:
        """Read Excel or CSV file into a DataFrame."""
        suffix = file_path.suffix.lower()

        if suffix in ['.xlsx', '.xls']:
            return pd.read_excel(file_path)
        if suffix == '.csv':
            for encoding in ['utf-8', 'latin1', 'cp1252']:
                try:
                    return pd.read_csv(file_path, encoding=encoding, index_col=False)
                except UnicodeDecodeError:
                    continue

        self.errors.append({'row': 0, 'message': f'Unsupported file format: {suffix}'})
        return None

    def _map_columns(self, df: pd.DataFrame, required) -> Optional[pd.DataFrame]:
        """Map source columns to standard names; None if a required one is missing."""
        df.columns = [str(col).strip() for col in df.columns]
        column_map = {}

        for standard_name, possible_names in self.column_mapping.items():
            for col in df.columns:
                if col.lower() in possible_names:
                    column_map[col] = standard_name
                    break

        df = df.rename(columns=column_map)
        missing = set(required) - set(column_map.values())
        if missing:
            self.errors.append({
                'row': 0,
                'message': 'Missing required columns: ' + ', '.join(sorted(missing))
            })
            return None
        return df

    # =========================================================================
    # VALUE PARSING
    # =========================================================================

    def _parse_date(self, value) -> Optional[date]:
        if value is None or pd.isna(value):
            return None
        try:
            return pd.to_datetime(value).date()
        except (ValueError, TypeError):
            return None

    def _parse_int(self, value, default: int = 0) -> int:
        if value is None or pd.isna(value):
            return default
        try:
            return int(float(str(value).replace(',', '')))
        except ValueError:
            return default

    def _parse_decimal(self, value, default: Decimal = Decimal('0.00')) -> Decimal:
        if value is None or pd.isna(value):
            return default
        try:
            cleaned = str(value).replace(',', '').replace('$', '').strip()
            return Decimal(cleaned).quantize(Decimal('0.01'))
        except InvalidOperation:
            return default

    # =========================================================================
    # IMPORTS
    # =========================================================================

    def _load(self, file_path, required):
        df = self._read_file(Path(file_path))
        if df is None:
            return None
        return self._map_columns(df, required)

    def import_metrics(self, file_path) -> Dict:
        """
        Import a daily metrics file.

        Returns:
            Dict with success, stats and errors
        """
        df = self._load(file_path, ['stay_date', 'rooms_sold'])
        if df is None:
            return self._build_result()

        self.stats['rows_total'] = len(df)
        with transaction.atomic():
            for index, row in df.iterrows():
                stay_date = self._parse_date(row.get('stay_date'))
                if stay_date is None:
                    self._skip(index, 'Invalid stay date')
                    continue

                _, created = DailyMetricSnapshot.objects.update_or_create(
                    hotel=self.hotel,
                    stay_date=stay_date,
                    defaults={
                        'rooms_sold': self._parse_int(row.get('rooms_sold')),
                        'rooms_unsold': self._parse_int(row.get('rooms_unsold')),
                        'adr': self._parse_decimal(row.get('adr')),
                    },
                )
                self._count(created)

        logger.info("Imported metrics for %s: %s", self.hotel, self.stats)
        return self._build_result()

    def import_pickup(self, file_path, snapshot_date=None) -> Dict:
        """
        Import a pickup snapshot file.

        Args:
            file_path: Excel or CSV file
            snapshot_date: used for rows without a Snapshot Date column

        Returns:
            Dict with success, stats and errors
        """
        df = self._load(file_path, ['stay_date', 'rooms_sold'])
        if df is None:
            return self._build_result()

        self.stats['rows_total'] = len(df)
        with transaction.atomic():
            for index, row in df.iterrows():
                stay_date = self._parse_date(row.get('stay_date'))
                row_snapshot = self._parse_date(row.get('snapshot_date')) or snapshot_date
                if stay_date is None or row_snapshot is None:
                    self._skip(index, 'Missing stay date or snapshot date')
                    continue

                _, created = DailyPickupSnapshot.objects.update_or_create(
                    hotel=self.hotel,
                    snapshot_date=row_snapshot,
                    stay_date=stay_date,
                    defaults={'rooms_sold': self._parse_int(row.get('rooms_sold'))},
                )
                self._count(created)

        logger.info("Imported pickup snapshots for %s: %s", self.hotel, self.stats)
        return self._build_result()

    def _skip(self, index, message):
        self.stats['rows_skipped'] += 1
        # +2: header row and 1-based numbering
        self.errors.append({'row': index + 2, 'message': message})

    def _count(self, created):
        if created:
            self.stats['rows_created'] += 1
        else:
            self.stats['rows_updated'] += 1

    def _build_result(self) -> Dict:
        return {
            'success': not any(e['row'] == 0 for e in self.errors),
            'stats': dict(self.stats),
            'errors': list(self.errors),
        }
