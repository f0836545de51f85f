"""
Calculator models: CalculatorSettings, Campaign, RoomDifferential.
"""

from django.db import models
from decimal import Decimal
from django.core.validators import MinValueValidator, MaxValueValidator

from rate_manager.domain import CampaignRule, DiscountToggle, TAX_INCLUSIVE, TAX_EXCLUSIVE
from .core import Property


PERCENT_VALIDATORS = [MinValueValidator(0), MaxValueValidator(100)]


class CalculatorSettings(models.Model):
    """
    Pricing stack configuration for a property.

    One row per property, created automatically with the property.
    The calculator never reads this model directly: it is converted to
    an immutable CalculatorProfile by the config store.

    Stack order:
        base × multiplier → non-refundable → tax → campaigns / member → targeting
    """
    TAX_MODE_CHOICES = [
        (TAX_INCLUSIVE, 'Inclusive (tax already in rate)'),
        (TAX_EXCLUSIVE, 'Exclusive (tax added on top)'),
    ]

    hotel = models.OneToOneField(
        Property,
        on_delete=models.CASCADE,
        related_name='calculator_settings',
        help_text="Property these settings belong to"
    )

    multiplier = models.DecimalField(
        max_digits=6,
        decimal_places=3,
        default=Decimal('1.300'),
        validators=[MinValueValidator(0)],
        help_text="Strategic multiplier applied to the PMS base rate (e.g., 1.30)"
    )

    tax_mode = models.CharField(
        max_length=20,
        choices=TAX_MODE_CHOICES,
        default=TAX_INCLUSIVE,
    )
    tax_percent = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=PERCENT_VALIDATORS,
        help_text="Tax percentage, only used for exclusive-tax properties"
    )

    # Rate plan
    non_refundable_active = models.BooleanField(default=True)
    non_refundable_percent = models.DecimalField(
        max_digits=5, decimal_places=2, default=Decimal('15.00'),
        validators=PERCENT_VALIDATORS,
    )

    # Targeting
    mobile_active = models.BooleanField(default=True)
    mobile_percent = models.DecimalField(
        max_digits=5, decimal_places=2, default=Decimal('10.00'),
        validators=PERCENT_VALIDATORS,
    )
    country_active = models.BooleanField(default=False)
    country_percent = models.DecimalField(
        max_digits=5, decimal_places=2, default=Decimal('5.00'),
        validators=PERCENT_VALIDATORS,
    )

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Calculator Settings"
        verbose_name_plural = "Calculator Settings"

    def __str__(self):
        return f"{self.hotel.name}: ×{self.multiplier}"

    def non_refundable_toggle(self):
        return DiscountToggle(self.non_refundable_active, self.non_refundable_percent)

    def mobile_toggle(self):
        return DiscountToggle(self.mobile_active, self.mobile_percent)

    def country_toggle(self):
        return DiscountToggle(self.country_active, self.country_percent)


class Campaign(models.Model):
    """
    Time-bounded promotion.

    The slug decides how the campaign stacks:
        black-friday, limited-time            → deep deal, applied alone
        early-deal, late-escape, getaway-deal → also switch off the mobile rate
        anything else                         → ordinary, best one wins
    """
    settings = models.ForeignKey(
        CalculatorSettings,
        on_delete=models.CASCADE,
        related_name='campaigns',
    )
    slug = models.SlugField(max_length=50)
    name = models.CharField(max_length=100, blank=True)
    discount_percent = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        validators=PERCENT_VALIDATORS,
        help_text="Discount percentage (e.g., 20.00 for 20%)"
    )
    start_date = models.DateField(null=True, blank=True, help_text="Start date (inclusive)")
    end_date = models.DateField(null=True, blank=True, help_text="End date (inclusive)")
    active = models.BooleanField(default=True)
    sort_order = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ['sort_order', 'id']
        verbose_name = "Campaign"
        verbose_name_plural = "Campaigns"

    def __str__(self):
        status = "" if self.active else " [INACTIVE]"
        return f"{self.name or self.slug} (-{self.discount_percent}%){status}"

    def clean(self):
        """Validate that end_date is not before start_date."""
        from django.core.exceptions import ValidationError

        if self.end_date and self.start_date and self.end_date < self.start_date:
            raise ValidationError({
                'end_date': 'End date cannot be before start date.'
            })

    def to_rule(self):
        return CampaignRule(
            id=self.id,
            slug=self.slug,
            name=self.name,
            discount_percent=self.discount_percent,
            start_date=self.start_date,
            end_date=self.end_date,
            active=self.active,
        )


class RoomDifferential(models.Model):
    """
    Price a derived room type relative to the base room.

    Example:
        Deluxe '+' 20 → Deluxe rate = base rate × 1.20
    """
    OPERATOR_CHOICES = [
        ('+', 'Premium (+%)'),
        ('-', 'Discount (-%)'),
    ]

    hotel = models.ForeignKey(
        Property,
        on_delete=models.CASCADE,
        related_name='room_differentials',
    )
    room_type_id = models.CharField(max_length=50, help_text="PMS room type ID")
    operator = models.CharField(max_length=1, choices=OPERATOR_CHOICES, default='+')
    value_percent = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        validators=PERCENT_VALIDATORS,
    )

    class Meta:
        ordering = ['hotel', 'room_type_id']
        unique_together = ['hotel', 'room_type_id']
        verbose_name = "Room Differential"
        verbose_name_plural = "Room Differentials"

    def __str__(self):
        return f"{self.room_type_id}: {self.operator}{self.value_percent}%"
