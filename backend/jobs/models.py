from django.conf import settings
from django.db import models


class LogisticsJob(models.Model):
    """A freight shipment handled for a client"""
    JOB_TYPE_CHOICES = [
        ('AIR_FREIGHT_IMPORT', 'Air Freight Import'),
        ('AIR_FREIGHT_EXPORT', 'Air Freight Export'),
        ('SEA_FREIGHT_IMPORT', 'Sea Freight Import'),
        ('SEA_FREIGHT_EXPORT', 'Sea Freight Export'),
        ('ROAD_FREIGHT_IMPORT', 'Road Freight Import'),
        ('ROAD_FREIGHT_EXPORT', 'Road Freight Export'),
    ]

    STATUS_CHOICES = [
        ('OPEN', 'Open'),
        ('IN_PROGRESS', 'In Progress'),
        ('DELIVERED', 'Delivered'),
        ('CANCELLED', 'Cancelled'),
    ]

    # Type-specific columns, keyed by freight mode
    FREIGHT_MODE_FIELDS = {
        'air': ('master_air_waybill', 'house_air_waybill'),
        'sea': ('master_bl', 'house_bl'),
        'road': ('plate_number', 'container_number'),
    }

    job_number = models.CharField(max_length=30, unique=True, editable=False)
    title = models.CharField(max_length=255)
    client = models.ForeignKey('parties.Client', on_delete=models.PROTECT, related_name='jobs')
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='jobs')
    job_type = models.CharField(max_length=30, choices=JOB_TYPE_CHOICES)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='OPEN')

    # Route
    port_of_loading = models.CharField(max_length=200, blank=True, null=True)
    port_of_discharge = models.CharField(max_length=200, blank=True, null=True)

    # Cargo
    gross_weight = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True, help_text="kg")
    chargeable_weight = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True, help_text="kg")
    shipper = models.CharField(max_length=255, blank=True, null=True)
    consignee = models.CharField(max_length=255, blank=True, null=True)
    package = models.CharField(max_length=255, blank=True, null=True)
    good_description = models.TextField(blank=True, null=True)

    # Air waybill
    master_air_waybill = models.CharField(max_length=100, blank=True, null=True)
    house_air_waybill = models.CharField(max_length=100, blank=True, null=True)
    # Bill of lading
    master_bl = models.CharField(max_length=100, blank=True, null=True)
    house_bl = models.CharField(max_length=100, blank=True, null=True)
    # Road transport
    plate_number = models.CharField(max_length=50, blank=True, null=True)
    container_number = models.CharField(max_length=50, blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    @staticmethod
    def freight_mode_for(job_type):
        """'air', 'sea' or 'road' for a job type, None when unknown"""
        if not job_type:
            return None
        prefix = job_type.split('_', 1)[0]
        return {'AIR': 'air', 'SEA': 'sea', 'ROAD': 'road'}.get(prefix)

    @property
    def freight_mode(self):
        return self.freight_mode_for(self.job_type)

    def __str__(self):
        return f"{self.job_number} - {self.title}"

    class Meta:
        db_table = 'logistics_jobs'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['job_type', 'status'], name='logistics_j_job_typ_5e2a1c_idx'),
            models.Index(fields=['-created_at'], name='logistics_j_created_8b4d7f_idx'),
        ]
