from django.contrib import admin

from .models import ServiceItem


@admin.register(ServiceItem)
class ServiceItemAdmin(admin.ModelAdmin):
    list_display = ['name', 'price', 'currency', 'vat', 'updated_at']
    list_filter = ['currency', 'vat']
    search_fields = ['name']
    ordering = ['name']
