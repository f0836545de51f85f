"""
Rate manager admin configuration.

Supports:
- Organization and property management
- Per-property calculator settings with campaign inlines
- Guardrails, room differentials
- Stored calendar entries and feed snapshots (read-mostly)
"""

from django.contrib import admin
from django.urls import reverse
from django.utils.html import format_html

from .models import (
    Organization, Property,
    CalculatorSettings, Campaign, RoomDifferential,
    GuardrailSettings, RateCalendarEntry, DailyMetricSnapshot, DailyPickupSnapshot,
)


# =============================================================================
# ORGANIZATION & PROPERTY ADMIN
# =============================================================================

class PropertyInline(admin.TabularInline):
    """Inline for properties within an organization."""
    model = Property
    extra = 0
    fields = ['name', 'code', 'pms_property_id', 'is_active']
    show_change_link = True


@admin.register(Organization)
class OrganizationAdmin(admin.ModelAdmin):
    list_display = ['name', 'code', 'property_count_display', 'is_active', 'created_at']
    list_filter = ['is_active']
    search_fields = ['name', 'code']
    prepopulated_fields = {'code': ('name',)}
    ordering = ['name']
    inlines = [PropertyInline]

    def property_count_display(self, obj):
        """Display count of active properties."""
        count = obj.property_count
        if count > 0:
            url = reverse('admin:rate_manager_property_changelist') + f'?organization__id__exact={obj.id}'
            return format_html('<a href="{}">{} properties</a>', url, count)
        return '0'
    property_count_display.short_description = 'Properties'


class RoomDifferentialInline(admin.TabularInline):
    """Inline for derived room pricing within a property."""
    model = RoomDifferential
    extra = 0
    fields = ['room_type_id', 'operator', 'value_percent']


@admin.register(Property)
class PropertyAdmin(admin.ModelAdmin):
    list_display = ['name', 'organization', 'code', 'pms_property_id', 'base_room_type_id', 'is_active']
    list_filter = ['organization', 'is_active']
    search_fields = ['name', 'code', 'pms_property_id']
    prepopulated_fields = {'code': ('name',)}
    ordering = ['organization', 'name']

    fieldsets = (
        (None, {
            'fields': ('organization', 'name', 'code', 'location', 'is_active')
        }),
        ('PMS Connection', {
            'fields': ('pms_property_id', 'base_room_type_id', 'rate_id_map'),
            'description': 'rate_id_map maps each PMS room type ID to the rate ID overrides are pushed to'
        }),
        ('Pricing', {
            'fields': ('member_discount_percent', 'currency_symbol'),
        }),
    )

    inlines = [RoomDifferentialInline]


# =============================================================================
# CALCULATOR ADMIN
# =============================================================================

class CampaignInline(admin.TabularInline):
    model = Campaign
    extra = 0
    fields = ['slug', 'name', 'discount_percent', 'start_date', 'end_date', 'active', 'sort_order']
    ordering = ['sort_order']


@admin.register(CalculatorSettings)
class CalculatorSettingsAdmin(admin.ModelAdmin):
    list_display = ['hotel', 'multiplier', 'tax_mode', 'tax_percent', 'non_refundable_active',
                    'mobile_active', 'country_active', 'campaign_count', 'updated_at']
    list_filter = ['tax_mode', 'hotel__organization']

    fieldsets = (
        (None, {
            'fields': ('hotel', 'multiplier')
        }),
        ('Tax', {
            'fields': ('tax_mode', 'tax_percent'),
        }),
        ('Rate Plan', {
            'fields': ('non_refundable_active', 'non_refundable_percent'),
        }),
        ('Targeting', {
            'fields': ('mobile_active', 'mobile_percent', 'country_active', 'country_percent'),
            'description': 'Only applied when a rate is calculated with targeting included'
        }),
    )

    inlines = [CampaignInline]

    def campaign_count(self, obj):
        return obj.campaigns.filter(active=True).count()
    campaign_count.short_description = 'Active campaigns'


@admin.register(GuardrailSettings)
class GuardrailSettingsAdmin(admin.ModelAdmin):
    list_display = ['hotel', 'rate_freeze_days', 'guardrail_max', 'last_minute_floor_enabled', 'updated_at']

    fieldsets = (
        (None, {
            'fields': ('hotel', 'rate_freeze_days', 'guardrail_max')
        }),
        ('Last-minute Floor', {
            'fields': ('last_minute_floor_enabled', 'last_minute_floor_rate',
                       'last_minute_floor_days', 'last_minute_floor_dow'),
        }),
        ('Monthly Minimums', {
            'fields': ('monthly_min_rates',),
        }),
    )


# =============================================================================
# CALENDAR DATA ADMIN
# =============================================================================

@admin.register(RateCalendarEntry)
class RateCalendarEntryAdmin(admin.ModelAdmin):
    list_display = ['hotel', 'room_type_id', 'stay_date', 'rate', 'source_display', 'updated_at']
    list_filter = ['hotel', 'source', 'room_type_id']
    date_hierarchy = 'stay_date'
    ordering = ['-stay_date']

    def source_display(self, obj):
        color = '#2563eb' if obj.source == 'Manual' else '#6b7280'
        return format_html('<span style="color: {};">{}</span>', color, obj.source)
    source_display.short_description = 'Source'


@admin.register(DailyMetricSnapshot)
class DailyMetricSnapshotAdmin(admin.ModelAdmin):
    list_display = ['hotel', 'stay_date', 'rooms_sold', 'rooms_unsold', 'occupancy', 'adr']
    list_filter = ['hotel']
    date_hierarchy = 'stay_date'


@admin.register(DailyPickupSnapshot)
class DailyPickupSnapshotAdmin(admin.ModelAdmin):
    list_display = ['hotel', 'snapshot_date', 'stay_date', 'rooms_sold']
    list_filter = ['hotel', 'snapshot_date']
    date_hierarchy = 'snapshot_date'
