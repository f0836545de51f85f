"""
Calendar models: GuardrailSettings, RateCalendarEntry and the daily
metric/pickup snapshots behind the calendar feeds.
"""

from django.db import models
from decimal import Decimal
from django.core.validators import MinValueValidator

from rate_manager.domain import GuardrailConfig, RATE_SOURCES, SOURCE_AI, to_decimal
from .core import Property


class GuardrailSettings(models.Model):
    """
    Preview guardrails for a property.

    Example:
        rate_freeze_days = 2    → today and tomorrow keep the live PMS rate
        last_minute_floor_*     → never sell Fri/Sat below $120 within 7 days
        monthly_min_rates       → {'dec': '180.00', 'jan': '150.00'}
        guardrail_max = 400     → cap every suggested rate at $400
    """
    hotel = models.OneToOneField(
        Property,
        on_delete=models.CASCADE,
        related_name='guardrail_settings',
    )

    rate_freeze_days = models.PositiveIntegerField(
        default=0,
        help_text="Number of days from today that are frozen (0 = none)"
    )
    guardrail_max = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal('400.00'),
        validators=[MinValueValidator(0)],
        help_text="Maximum rate (0 = no maximum)"
    )

    last_minute_floor_enabled = models.BooleanField(default=False)
    last_minute_floor_rate = models.DecimalField(
        max_digits=10, decimal_places=2, default=Decimal('0.00'),
        validators=[MinValueValidator(0)],
    )
    last_minute_floor_days = models.PositiveIntegerField(
        default=0,
        help_text="Floor applies to dates within this many days of today"
    )
    last_minute_floor_dow = models.JSONField(
        default=list,
        blank=True,
        help_text="Weekdays the floor applies to, e.g. ['fri', 'sat']"
    )

    monthly_min_rates = models.JSONField(
        default=dict,
        blank=True,
        help_text="Minimum rate per month, e.g. {'jan': '150.00'}"
    )

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Guardrail Settings"
        verbose_name_plural = "Guardrail Settings"

    def __str__(self):
        return f"{self.hotel.name} guardrails"

    def to_config(self):
        return GuardrailConfig(
            rate_freeze_days=self.rate_freeze_days,
            guardrail_max=self.guardrail_max,
            last_minute_floor_enabled=self.last_minute_floor_enabled,
            last_minute_floor_rate=self.last_minute_floor_rate,
            last_minute_floor_days=self.last_minute_floor_days,
            last_minute_floor_dow=tuple(d.lower() for d in self.last_minute_floor_dow or []),
            monthly_min_rates=tuple(
                (month.lower(), to_decimal(rate))
                for month, rate in (self.monthly_min_rates or {}).items()
            ),
        )


class RateCalendarEntry(models.Model):
    """
    Rate the rate manager last stored for a room type and stay date.

    Manual entries are written when overrides are submitted and come
    back on the next load as committed overrides.
    """
    SOURCE_CHOICES = [(source, source) for source in RATE_SOURCES]

    hotel = models.ForeignKey(
        Property,
        on_delete=models.CASCADE,
        related_name='rate_calendar_entries',
    )
    room_type_id = models.CharField(max_length=50)
    stay_date = models.DateField(db_index=True)
    rate = models.DecimalField(max_digits=10, decimal_places=2)
    source = models.CharField(max_length=20, choices=SOURCE_CHOICES, default=SOURCE_AI)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['hotel', 'room_type_id', 'stay_date']
        unique_together = ['hotel', 'room_type_id', 'stay_date']
        verbose_name = "Rate Calendar Entry"
        verbose_name_plural = "Rate Calendar Entries"

    def __str__(self):
        return f"{self.hotel.name} {self.room_type_id} {self.stay_date}: {self.rate} ({self.source})"


class DailyMetricSnapshot(models.Model):
    """On-the-books position and ADR for one stay date."""
    hotel = models.ForeignKey(
        Property,
        on_delete=models.CASCADE,
        related_name='daily_metrics',
    )
    stay_date = models.DateField(db_index=True)
    rooms_sold = models.PositiveIntegerField(default=0)
    rooms_unsold = models.PositiveIntegerField(default=0)
    adr = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['hotel', 'stay_date']
        unique_together = ['hotel', 'stay_date']
        verbose_name = "Daily Metric Snapshot"
        verbose_name_plural = "Daily Metric Snapshots"

    def __str__(self):
        return f"{self.hotel.name}: {self.stay_date} sold {self.rooms_sold}"

    @property
    def occupancy(self):
        total = self.rooms_sold + self.rooms_unsold
        if total > 0:
            return (Decimal(self.rooms_sold) / total * 100).quantize(Decimal('0.01'))
        return Decimal('0.00')


class DailyPickupSnapshot(models.Model):
    """
    Rooms sold for a stay date as seen on a snapshot date.

    Pickup for a stay date = latest rooms_sold minus rooms_sold in the
    snapshot taken lookback_days earlier.
    """
    hotel = models.ForeignKey(
        Property,
        on_delete=models.CASCADE,
        related_name='pickup_snapshots',
    )
    snapshot_date = models.DateField(db_index=True)
    stay_date = models.DateField(db_index=True)
    rooms_sold = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-snapshot_date', 'stay_date']
        unique_together = ['hotel', 'snapshot_date', 'stay_date']
        verbose_name = "Daily Pickup Snapshot"
        verbose_name_plural = "Daily Pickup Snapshots"
        indexes = [
            models.Index(fields=['hotel', 'stay_date', 'snapshot_date'], name='rm_pickup_hotel_stay_snap_idx'),
        ]

    def __str__(self):
        return f"{self.hotel.name}: {self.snapshot_date} → {self.stay_date}: {self.rooms_sold} RN"
