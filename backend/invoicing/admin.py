from django.contrib import admin

from .models import Invoice, InvoiceLineItem


class InvoiceLineItemInline(admin.TabularInline):
    model = InvoiceLineItem
    extra = 0


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    list_display = ['number', 'client', 'job_number', 'invoice_date', 'status', 'currency', 'total', 'created_at']
    list_filter = ['status', 'currency', 'invoice_date']
    search_fields = ['number', 'client__name', 'job_number', 'booking_number']
    ordering = ['-created_at']
    readonly_fields = ['number', 'created_at', 'updated_at']
    raw_id_fields = ['client', 'job', 'user']
    inlines = [InvoiceLineItemInline]
