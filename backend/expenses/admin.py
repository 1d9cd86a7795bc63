from django.contrib import admin

from .models import Expense


@admin.register(Expense)
class ExpenseAdmin(admin.ModelAdmin):
    list_display = ['title', 'amount', 'currency', 'job_number', 'supplier_name', 'created_at']
    list_filter = ['currency', 'created_at']
    search_fields = ['title', 'job_number', 'supplier_name']
    ordering = ['-created_at']
    raw_id_fields = ['job', 'supplier']
