from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='Organization',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200)),
                ('code', models.SlugField(help_text='Used in API URLs', unique=True)),
                ('currency_symbol', models.CharField(default='$', help_text='Fallback for its properties', max_length=5)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Property',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200)),
                ('code', models.SlugField(help_text='Used in API URLs, unique within the organization')),
                ('pms_property_id', models.CharField(blank=True, help_text='Sent as X-PROPERTY-ID', max_length=50)),
                ('base_room_type_id', models.CharField(blank=True, help_text='Room type the rate calendar is priced on; other rooms follow via differentials', max_length=50)),
                ('rate_id_map', models.JSONField(blank=True, default=dict, help_text="Room type ID → PMS rate ID, e.g. {'501': 'R-501'}")),
                ('member_discount_percent', models.DecimalField(decimal_places=2, default=Decimal('0.00'), help_text='Loyalty discount stacked after the rate plan (10.00 = 10%)', max_digits=5, validators=[django.core.validators.MinValueValidator(0), django.core.validators.MaxValueValidator(100)])),
                ('currency_symbol', models.CharField(blank=True, max_length=5)),
                ('location', models.CharField(blank=True, max_length=255)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('organization', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='properties', to='rate_manager.organization')),
            ],
            options={
                'verbose_name_plural': 'Properties',
                'ordering': ['organization', 'name'],
                'unique_together': {('organization', 'code')},
            },
        ),
        migrations.CreateModel(
            name='CalculatorSettings',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('multiplier', models.DecimalField(decimal_places=3, default=Decimal('1.300'), help_text='Strategic multiplier applied to the PMS base rate (e.g., 1.30)', max_digits=6, validators=[django.core.validators.MinValueValidator(0)])),
                ('tax_mode', models.CharField(choices=[('inclusive', 'Inclusive (tax already in rate)'), ('exclusive', 'Exclusive (tax added on top)')], default='inclusive', max_length=20)),
                ('tax_percent', models.DecimalField(decimal_places=2, default=Decimal('0.00'), help_text='Tax percentage, only used for exclusive-tax properties', max_digits=5, validators=[django.core.validators.MinValueValidator(0), django.core.validators.MaxValueValidator(100)])),
                ('non_refundable_active', models.BooleanField(default=True)),
                ('non_refundable_percent', models.DecimalField(decimal_places=2, default=Decimal('15.00'), max_digits=5, validators=[django.core.validators.MinValueValidator(0), django.core.validators.MaxValueValidator(100)])),
                ('mobile_active', models.BooleanField(default=True)),
                ('mobile_percent', models.DecimalField(decimal_places=2, default=Decimal('10.00'), max_digits=5, validators=[django.core.validators.MinValueValidator(0), django.core.validators.MaxValueValidator(100)])),
                ('country_active', models.BooleanField(default=False)),
                ('country_percent', models.DecimalField(decimal_places=2, default=Decimal('5.00'), max_digits=5, validators=[django.core.validators.MinValueValidator(0), django.core.validators.MaxValueValidator(100)])),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('hotel', models.OneToOneField(help_text='Property these settings belong to', on_delete=django.db.models.deletion.CASCADE, related_name='calculator_settings', to='rate_manager.property')),
            ],
            options={
                'verbose_name': 'Calculator Settings',
                'verbose_name_plural': 'Calculator Settings',
            },
        ),
        migrations.CreateModel(
            name='Campaign',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('slug', models.SlugField()),
                ('name', models.CharField(blank=True, max_length=100)),
                ('discount_percent', models.DecimalField(decimal_places=2, help_text='Discount percentage (e.g., 20.00 for 20%)', max_digits=5, validators=[django.core.validators.MinValueValidator(0), django.core.validators.MaxValueValidator(100)])),
                ('start_date', models.DateField(blank=True, help_text='Start date (inclusive)', null=True)),
                ('end_date', models.DateField(blank=True, help_text='End date (inclusive)', null=True)),
                ('active', models.BooleanField(default=True)),
                ('sort_order', models.PositiveIntegerField(default=0)),
                ('settings', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='campaigns', to='rate_manager.calculatorsettings')),
            ],
            options={
                'verbose_name': 'Campaign',
                'verbose_name_plural': 'Campaigns',
                'ordering': ['sort_order', 'id'],
            },
        ),
        migrations.CreateModel(
            name='RoomDifferential',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('room_type_id', models.CharField(help_text='PMS room type ID', max_length=50)),
                ('operator', models.CharField(choices=[('+', 'Premium (+%)'), ('-', 'Discount (-%)')], default='+', max_length=1)),
                ('value_percent', models.DecimalField(decimal_places=2, max_digits=5, validators=[django.core.validators.MinValueValidator(0), django.core.validators.MaxValueValidator(100)])),
                ('hotel', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='room_differentials', to='rate_manager.property')),
            ],
            options={
                'verbose_name': 'Room Differential',
                'verbose_name_plural': 'Room Differentials',
                'ordering': ['hotel', 'room_type_id'],
                'unique_together': {('hotel', 'room_type_id')},
            },
        ),
        migrations.CreateModel(
            name='GuardrailSettings',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('rate_freeze_days', models.PositiveIntegerField(default=0, help_text='Number of days from today that are frozen (0 = none)')),
                ('guardrail_max', models.DecimalField(decimal_places=2, default=Decimal('400.00'), help_text='Maximum rate (0 = no maximum)', max_digits=10, validators=[django.core.validators.MinValueValidator(0)])),
                ('last_minute_floor_enabled', models.BooleanField(default=False)),
                ('last_minute_floor_rate', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10, validators=[django.core.validators.MinValueValidator(0)])),
                ('last_minute_floor_days', models.PositiveIntegerField(default=0, help_text='Floor applies to dates within this many days of today')),
                ('last_minute_floor_dow', models.JSONField(blank=True, default=list, help_text="Weekdays the floor applies to, e.g. ['fri', 'sat']")),
                ('monthly_min_rates', models.JSONField(blank=True, default=dict, help_text="Minimum rate per month, e.g. {'jan': '150.00'}")),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('hotel', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='guardrail_settings', to='rate_manager.property')),
            ],
            options={
                'verbose_name': 'Guardrail Settings',
                'verbose_name_plural': 'Guardrail Settings',
            },
        ),
        migrations.CreateModel(
            name='RateCalendarEntry',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('room_type_id', models.CharField(max_length=50)),
                ('stay_date', models.DateField(db_index=True)),
                ('rate', models.DecimalField(decimal_places=2, max_digits=10)),
                ('source', models.CharField(choices=[('AI', 'AI'), ('Manual', 'Manual'), ('External', 'External')], default='AI', max_length=20)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('hotel', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='rate_calendar_entries', to='rate_manager.property')),
            ],
            options={
                'verbose_name': 'Rate Calendar Entry',
                'verbose_name_plural': 'Rate Calendar Entries',
                'ordering': ['hotel', 'room_type_id', 'stay_date'],
                'unique_together': {('hotel', 'room_type_id', 'stay_date')},
            },
        ),
        migrations.CreateModel(
            name='DailyMetricSnapshot',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('stay_date', models.DateField(db_index=True)),
                ('rooms_sold', models.PositiveIntegerField(default=0)),
                ('rooms_unsold', models.PositiveIntegerField(default=0)),
                ('adr', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('hotel', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='daily_metrics', to='rate_manager.property')),
            ],
            options={
                'verbose_name': 'Daily Metric Snapshot',
                'verbose_name_plural': 'Daily Metric Snapshots',
                'ordering': ['hotel', 'stay_date'],
                'unique_together': {('hotel', 'stay_date')},
            },
        ),
        migrations.CreateModel(
            name='DailyPickupSnapshot',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('snapshot_date', models.DateField(db_index=True)),
                ('stay_date', models.DateField(db_index=True)),
                ('rooms_sold', models.PositiveIntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('hotel', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='pickup_snapshots', to='rate_manager.property')),
            ],
            options={
                'verbose_name': 'Daily Pickup Snapshot',
                'verbose_name_plural': 'Daily Pickup Snapshots',
                'ordering': ['-snapshot_date', 'stay_date'],
                'indexes': [models.Index(fields=['hotel', 'stay_date', 'snapshot_date'], name='rm_pickup_hotel_stay_snap_idx')],
                'unique_together': {('hotel', 'snapshot_date', 'stay_date')},
            },
        ),
    ]
