from rest_framework import serializers

from .models import Client, Supplier


class ClientSerializer(serializers.ModelSerializer):
    job_count = serializers.SerializerMethodField()
    invoice_count = serializers.SerializerMethodField()

    class Meta:
        model = Client
        fields = ['id', 'name', 'email', 'phone', 'address', 'tin', 'contact_person',
                  'job_count', 'invoice_count', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def get_job_count(self, obj):
        count = getattr(obj, 'annotated_job_count', None)
        return count if count is not None else obj.jobs.count()

    def get_invoice_count(self, obj):
        count = getattr(obj, 'annotated_invoice_count', None)
        return count if count is not None else obj.invoices.count()


class SupplierSerializer(serializers.ModelSerializer):
    expense_count = serializers.SerializerMethodField()

    class Meta:
        model = Supplier
        fields = ['id', 'name', 'contact', 'expense_count', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def get_expense_count(self, obj):
        count = getattr(obj, 'annotated_expense_count', None)
        return count if count is not None else obj.expenses.count()
