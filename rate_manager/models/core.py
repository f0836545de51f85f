"""
Core models: Organization and Property.

A Property is one PMS-connected hotel; everything else in the rate
manager hangs off it.
"""

from decimal import Decimal

from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models


class Organization(models.Model):
    """Hotel group. Properties are addressed as /org/<code>/<property code>/."""
    name = models.CharField(max_length=200)
    code = models.SlugField(unique=True, help_text="Used in API URLs")
    currency_symbol = models.CharField(max_length=5, default='$', help_text="Fallback for its properties")
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.name

    @property
    def property_count(self):
        return self.properties.filter(is_active=True).count()


class Property(models.Model):
    """
    Hotel connected to a PMS.

    Holds the PMS identifiers needed to read live rates and push
    overrides, plus the member (loyalty) discount that the sell-rate
    calculation stacks on top of the base rate.
    """
    organization = models.ForeignKey(Organization, on_delete=models.PROTECT, related_name='properties')
    name = models.CharField(max_length=200)
    code = models.SlugField(help_text="Used in API URLs, unique within the organization")

    # PMS connection
    pms_property_id = models.CharField(max_length=50, blank=True, help_text="Sent as X-PROPERTY-ID")
    base_room_type_id = models.CharField(
        max_length=50,
        blank=True,
        help_text="Room type the rate calendar is priced on; other rooms follow via differentials"
    )
    rate_id_map = models.JSONField(
        default=dict,
        blank=True,
        help_text="Room type ID → PMS rate ID, e.g. {'501': 'R-501'}"
    )

    member_discount_percent = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(0), MaxValueValidator(100)],
        help_text="Loyalty discount stacked after the rate plan (10.00 = 10%)"
    )

    currency_symbol = models.CharField(max_length=5, blank=True)
    location = models.CharField(max_length=255, blank=True)
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['organization', 'name']
        unique_together = ['organization', 'code']
        verbose_name_plural = "Properties"

    def __str__(self):
        return f"{self.name} ({self.organization.name})"

    def get_currency_symbol(self):
        return self.currency_symbol or self.organization.currency_symbol

    def get_rate_id(self, room_type_id):
        """PMS rate ID for a room type, or None."""
        return (self.rate_id_map or {}).get(str(room_type_id))

    def get_absolute_url(self):
        from django.urls import reverse
        return reverse('rate_manager:rate_calendar', kwargs={
            'org_code': self.organization.code,
            'prop_code': self.code,
        })
