from django.db import models


class Client(models.Model):
    """Customers billed for logistics jobs"""
    name = models.CharField(max_length=200)
    email = models.EmailField(blank=True, null=True)
    phone = models.CharField(max_length=30, blank=True, null=True)
    address = models.TextField(blank=True, null=True)
    tin = models.CharField(max_length=50, blank=True, null=True, help_text="Taxpayer identification number")
    contact_person = models.CharField(max_length=200, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'clients'
        ordering = ['name']


class Supplier(models.Model):
    """Vendors that expenses are paid to"""
    name = models.CharField(max_length=200)
    contact = models.CharField(max_length=200, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'suppliers'
        ordering = ['name']
