from decimal import Decimal

from django.db import models


class ServiceItem(models.Model):
    """Billable service with a list price, used to prefill invoice lines"""
    name = models.CharField(max_length=200)
    price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    currency = models.CharField(max_length=3, default='USD')
    vat = models.BooleanField(default=False, help_text="Whether VAT applies to this service")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.name} ({self.price} {self.currency})"

    class Meta:
        db_table = 'service_items'
        ordering = ['name']
