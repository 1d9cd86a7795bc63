from django.contrib import admin

from .models import LogisticsJob


@admin.register(LogisticsJob)
class LogisticsJobAdmin(admin.ModelAdmin):
    list_display = ['job_number', 'title', 'client', 'job_type', 'status', 'created_at']
    list_filter = ['job_type', 'status', 'created_at']
    search_fields = ['job_number', 'title', 'client__name', 'shipper', 'consignee']
    ordering = ['-created_at']
    readonly_fields = ['job_number', 'created_at', 'updated_at']
    raw_id_fields = ['client', 'user']
