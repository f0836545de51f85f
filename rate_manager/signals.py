"""
Signal handlers for auto-creating per-property settings.
"""

from django.db.models.signals import post_save
from django.dispatch import receiver
from .models import Property, CalculatorSettings, GuardrailSettings


@receiver(post_save, sender=Property)
def create_property_settings(sender, instance, created, **kwargs):
    """
    When a property is created, give it default calculator and
    guardrail settings so the calendar can be loaded right away.
    """
    if created:
        CalculatorSettings.objects.get_or_create(hotel=instance)
        GuardrailSettings.objects.get_or_create(hotel=instance)
