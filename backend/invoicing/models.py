from decimal import Decimal

from django.conf import settings
from django.db import models


class Invoice(models.Model):
    """Client invoice, optionally raised against a logistics job"""
    STATUS_CHOICES = [
        ('DRAFT', 'Draft'),
        ('PENDING', 'Pending'),
        ('PAID', 'Paid'),
        ('UNPAID', 'Unpaid'),
        ('OVERDUE', 'Overdue'),
        ('CANCELLED', 'Cancelled'),
    ]

    number = models.CharField(max_length=30, unique=True, editable=False)
    client = models.ForeignKey('parties.Client', on_delete=models.PROTECT, related_name='invoices')
    job = models.ForeignKey('jobs.LogisticsJob', on_delete=models.SET_NULL, null=True, blank=True, related_name='invoices')
    job_number = models.CharField(max_length=30, blank=True, null=True)
    booking_number = models.CharField(max_length=100, blank=True, null=True)
    invoice_date = models.DateField()
    due_date = models.DateField(blank=True, null=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='UNPAID')
    currency = models.CharField(max_length=3, default='USD')
    sub_total = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    total = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    amount_in_words = models.TextField(blank=True, null=True)
    remarks = models.TextField(blank=True, null=True)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='invoices')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def get_tax_total(self):
        """Sum of line item VAT"""
        return sum((item.tax_amount or Decimal('0.00') for item in self.line_items.all()), Decimal('0.00'))

    def __str__(self):
        return f"{self.number} - {self.client}"

    class Meta:
        db_table = 'invoices'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status'], name='invoices_status_4c1e9b_idx'),
            models.Index(fields=['-invoice_date'], name='invoices_invoice_7d2a6e_idx'),
        ]


class InvoiceLineItem(models.Model):
    """One billed line; billing_amount = amount + tax_amount"""
    invoice = models.ForeignKey(Invoice, on_delete=models.CASCADE, related_name='line_items')
    description = models.CharField(max_length=255)
    based_on = models.CharField(max_length=100, blank=True, null=True)
    rate = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    currency = models.CharField(max_length=3, default='USD')
    amount = models.DecimalField(max_digits=14, decimal_places=2)
    tax_percent = models.DecimalField(max_digits=5, decimal_places=2, blank=True, null=True)
    tax_amount = models.DecimalField(max_digits=14, decimal_places=2, blank=True, null=True)
    billing_amount = models.DecimalField(max_digits=14, decimal_places=2)

    def __str__(self):
        return f"{self.description} ({self.billing_amount} {self.currency})"

    class Meta:
        db_table = 'invoice_line_items'
        ordering = ['id']
