from django.db import models


class Expense(models.Model):
    """Money paid out, optionally against a job and/or to a supplier"""
    title = models.CharField(max_length=255)
    amount = models.DecimalField(max_digits=14, decimal_places=2)
    currency = models.CharField(max_length=3, default='USD')
    job = models.ForeignKey('jobs.LogisticsJob', on_delete=models.SET_NULL, null=True, blank=True, related_name='expenses')
    job_number = models.CharField(max_length=30, blank=True, null=True)
    supplier = models.ForeignKey('parties.Supplier', on_delete=models.SET_NULL, null=True, blank=True, related_name='expenses')
    supplier_name = models.CharField(max_length=200, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.title} ({self.amount} {self.currency})"

    class Meta:
        db_table = 'expenses'
        ordering = ['-created_at']
