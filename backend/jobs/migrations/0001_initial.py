# Generated manually

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('parties', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='LogisticsJob',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('job_number', models.CharField(editable=False, max_length=30, unique=True)),
                ('title', models.CharField(max_length=255)),
                ('job_type', models.CharField(choices=[('AIR_FREIGHT_IMPORT', 'Air Freight Import'), ('AIR_FREIGHT_EXPORT', 'Air Freight Export'), ('SEA_FREIGHT_IMPORT', 'Sea Freight Import'), ('SEA_FREIGHT_EXPORT', 'Sea Freight Export'), ('ROAD_FREIGHT_IMPORT', 'Road Freight Import'), ('ROAD_FREIGHT_EXPORT', 'Road Freight Export')], max_length=30)),
                ('status', models.CharField(choices=[('OPEN', 'Open'), ('IN_PROGRESS', 'In Progress'), ('DELIVERED', 'Delivered'), ('CANCELLED', 'Cancelled')], default='OPEN', max_length=20)),
                ('port_of_loading', models.CharField(blank=True, max_length=200, null=True)),
                ('port_of_discharge', models.CharField(blank=True, max_length=200, null=True)),
                ('gross_weight', models.DecimalField(blank=True, decimal_places=2, help_text='kg', max_digits=12, null=True)),
                ('chargeable_weight', models.DecimalField(blank=True, decimal_places=2, help_text='kg', max_digits=12, null=True)),
                ('shipper', models.CharField(blank=True, max_length=255, null=True)),
                ('consignee', models.CharField(blank=True, max_length=255, null=True)),
                ('package', models.CharField(blank=True, max_length=255, null=True)),
                ('good_description', models.TextField(blank=True, null=True)),
                ('master_air_waybill', models.CharField(blank=True, max_length=100, null=True)),
                ('house_air_waybill', models.CharField(blank=True, max_length=100, null=True)),
                ('master_bl', models.CharField(blank=True, max_length=100, null=True)),
                ('house_bl', models.CharField(blank=True, max_length=100, null=True)),
                ('plate_number', models.CharField(blank=True, max_length=50, null=True)),
                ('container_number', models.CharField(blank=True, max_length=50, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('client', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='jobs', to='parties.client')),
                ('user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='jobs', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'logistics_jobs',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['job_type', 'status'], name='logistics_j_job_typ_5e2a1c_idx'),
                    models.Index(fields=['-created_at'], name='logistics_j_created_8b4d7f_idx'),
                ],
            },
        ),
    ]
