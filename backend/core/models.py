from django.contrib.auth.models import AbstractUser
from django.core.serializers.json import DjangoJSONEncoder
from django.db import models


class User(AbstractUser):
    """Back-office staff and client accounts. Email is the login identifier."""
    ROLE_CHOICES = [
        ('ADMIN', 'Admin'),
        ('FINANCE', 'Finance'),
        ('OPERATIONS', 'Operations'),
        ('SALES', 'Sales'),
        ('CLIENT', 'Client'),
    ]

    name = models.CharField(max_length=200, blank=True)
    email = models.EmailField(unique=True)
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default='CLIENT')
    department = models.CharField(max_length=100, blank=True, null=True)
    phone = models.CharField(max_length=20, blank=True, null=True)
    # base64 data URL, see PROFILE_PICTURE_MAX_LENGTH
    profile_picture = models.TextField(blank=True, null=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def save(self, *args, **kwargs):
        if self.email:
            self.email = self.email.strip().lower()
            self.username = self.email
        super().save(*args, **kwargs)

    def __str__(self):
        return self.name or self.email

    class Meta:
        db_table = 'users'
        ordering = ['name']


class AuditLog(models.Model):
    """Audit log for back-office mutations"""
    ACTION_CHOICES = [
        ('create', 'Create'),
        ('update', 'Update'),
        ('delete', 'Delete'),
        ('login', 'Login'),
        ('profile_update', 'Profile Updated'),
        ('job_create', 'Job Created'),
        ('invoice_create', 'Invoice Created'),
        ('invoice_from_job', 'Invoice Created From Job'),
        ('expense_create', 'Expense Created'),
    ]

    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, related_name='audit_logs')
    action = models.CharField(max_length=50, choices=ACTION_CHOICES)
    model_name = models.CharField(max_length=100)
    object_id = models.CharField(max_length=100)
    object_reference = models.CharField(max_length=255, blank=True, null=True, help_text="Reference identifier (e.g., job number, invoice number)")
    changes = models.JSONField(default=dict, blank=True, encoder=DjangoJSONEncoder)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'audit_logs'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['-created_at'], name='audit_logs_created_0b1f2e_idx'),
            models.Index(fields=['action'], name='audit_logs_action_6c0d9a_idx'),
            models.Index(fields=['model_name'], name='audit_logs_model_n_3a7e51_idx'),
            models.Index(fields=['object_reference'], name='audit_logs_object__9d42c8_idx'),
        ]
