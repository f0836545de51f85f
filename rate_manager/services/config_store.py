"""
Asset Configuration Store
=========================

Loads and saves the per-property pricing configuration.

The ORM rows (CalculatorSettings, Campaign, GuardrailSettings,
RoomDifferential) are converted to the frozen value types in
rate_manager.domain so the calculator never touches the database.
"""

import logging

from asgiref.sync import sync_to_async
from django.db import transaction

from rate_manager.domain import (
    CalculatorProfile,
    CampaignRule,
    DiscountToggle,
    TAX_EXCLUSIVE,
    TAX_INCLUSIVE,
    as_date,
    to_decimal,
)
from rate_manager.models import (
    CalculatorSettings,
    Campaign,
    GuardrailSettings,
    Property,
    RoomDifferential,
)

logger = logging.getLogger(__name__)


def _toggle_from_dict(data, default):
    if data is None:
        return default
    return DiscountToggle(
        active=bool(data.get('active', default.active)),
        percent=to_decimal(data.get('percent'), default.percent),
    )


def profile_from_dict(data, member_discount_percent=None):
    """
    Build a CalculatorProfile from a JSON payload.

    Missing keys fall back to the CalculatorProfile defaults.

    Raises:
        ValueError: unknown tax mode or malformed number/date
    """
    defaults = CalculatorProfile()
    tax_mode = data.get('tax_mode', defaults.tax_mode)
    if tax_mode not in (TAX_INCLUSIVE, TAX_EXCLUSIVE):
        raise ValueError(f"Unknown tax mode: {tax_mode}")

    try:
        campaigns = tuple(
            CampaignRule(
                id=item.get('id'),
                slug=item['slug'],
                name=item.get('name', ''),
                discount_percent=to_decimal(item.get('discount_percent')),
                start_date=as_date(item.get('start_date') or None),
                end_date=as_date(item.get('end_date') or None),
                active=bool(item.get('active', True)),
            )
            for item in data.get('campaigns', [])
        )
        return CalculatorProfile(
            multiplier=to_decimal(data.get('multiplier'), defaults.multiplier),
            tax_mode=tax_mode,
            tax_percent=to_decimal(data.get('tax_percent'), defaults.tax_percent),
            non_refundable=_toggle_from_dict(data.get('non_refundable'), defaults.non_refundable),
            mobile=_toggle_from_dict(data.get('mobile'), defaults.mobile),
            country=_toggle_from_dict(data.get('country'), defaults.country),
            campaigns=campaigns,
            member_discount_percent=to_decimal(
                member_discount_percent if member_discount_percent is not None
                else data.get('member_discount_percent'),
                defaults.member_discount_percent,
            ),
        )
    except KeyError as e:
        raise ValueError(f"Campaign is missing {e}") from e
    except ArithmeticError as e:
        raise ValueError(f"Invalid number in calculator config: {e}") from e


class AssetConfigStore:
    """
    Usage:
        store = AssetConfigStore()
        profile = store.get_config(prop.id)
        store.save_config(prop.id, profile)
    """

    def get_property(self, property_id):
        return Property.objects.select_related('organization').get(pk=property_id)

    def _settings_for(self, prop):
        settings, created = CalculatorSettings.objects.get_or_create(hotel=prop)
        if created:
            logger.info("Created default calculator settings for %s", prop)
        return settings

    def get_config(self, property_id):
        """
        Calculator profile for a property.

        Returns:
            CalculatorProfile (campaigns in sort order)

        Raises:
            Property.DoesNotExist
        """
        prop = self.get_property(property_id)
        settings = self._settings_for(prop)
        campaigns = tuple(c.to_rule() for c in settings.campaigns.all())

        return CalculatorProfile(
            multiplier=settings.multiplier,
            tax_mode=settings.tax_mode,
            tax_percent=settings.tax_percent,
            non_refundable=settings.non_refundable_toggle(),
            mobile=settings.mobile_toggle(),
            country=settings.country_toggle(),
            campaigns=campaigns,
            member_discount_percent=prop.member_discount_percent,
        )

    def save_config(self, property_id, profile):
        """
        Persist a profile, replacing the property's campaigns.

        Runs in a single transaction: either the settings and every
        campaign are saved, or nothing is.
        """
        prop = self.get_property(property_id)

        with transaction.atomic():
            settings = self._settings_for(prop)
            settings.multiplier = profile.multiplier
            settings.tax_mode = profile.tax_mode
            settings.tax_percent = profile.tax_percent
            settings.non_refundable_active = profile.non_refundable.active
            settings.non_refundable_percent = profile.non_refundable.percent
            settings.mobile_active = profile.mobile.active
            settings.mobile_percent = profile.mobile.percent
            settings.country_active = profile.country.active
            settings.country_percent = profile.country.percent
            settings.full_clean()
            settings.save()

            settings.campaigns.all().delete()
            for order, rule in enumerate(profile.campaigns):
                campaign = Campaign(
                    settings=settings,
                    slug=rule.slug,
                    name=rule.name,
                    discount_percent=rule.discount_percent,
                    start_date=rule.start_date,
                    end_date=rule.end_date,
                    active=rule.active,
                    sort_order=order,
                )
                campaign.full_clean(exclude=['settings'])
                campaign.save()

            if profile.member_discount_percent != prop.member_discount_percent:
                prop.member_discount_percent = profile.member_discount_percent
                prop.save(update_fields=['member_discount_percent', 'updated_at'])

        logger.info(
            "Saved calculator config for %s (%d campaigns)",
            prop, len(profile.campaigns),
        )
        return self.get_config(property_id)

    def get_guardrails(self, property_id):
        """Guardrail settings for a property as a GuardrailConfig."""
        settings, _ = GuardrailSettings.objects.get_or_create(hotel_id=property_id)
        return settings.to_config()

    def get_differentials(self, property_id):
        """Room differential rules (room_type_id, operator, value_percent)."""
        return list(RoomDifferential.objects.filter(hotel_id=property_id))

    # =========================================================================
    # ASYNC WRAPPERS
    # =========================================================================

    async def aget_config(self, property_id):
        return await sync_to_async(self.get_config)(property_id)

    async def aget_guardrails(self, property_id):
        return await sync_to_async(self.get_guardrails)(property_id)

    async def aget_differentials(self, property_id):
        return await sync_to_async(self.get_differentials)(property_id)
