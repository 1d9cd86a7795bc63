from django.contrib import admin

from .models import Client, Supplier


@admin.register(Client)
class ClientAdmin(admin.ModelAdmin):
    list_display = ['name', 'email', 'phone', 'tin', 'contact_person', 'created_at']
    search_fields = ['name', 'email', 'phone', 'tin']
    ordering = ['name']


@admin.register(Supplier)
class SupplierAdmin(admin.ModelAdmin):
    list_display = ['name', 'contact', 'created_at']
    search_fields = ['name', 'contact']
    ordering = ['name']
