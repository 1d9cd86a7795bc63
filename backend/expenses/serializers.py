from rest_framework import serializers

from backend.core.utils import blank_to_none
from .models import Expense


class ExpenseSerializer(serializers.ModelSerializer):
    job_title = serializers.CharField(source='job.title', read_only=True, default=None)
    currency = serializers.CharField(max_length=3, required=False)

    class Meta:
        model = Expense
        fields = ['id', 'title', 'amount', 'currency', 'job', 'job_number', 'job_title',
                  'supplier', 'supplier_name', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def validate_currency(self, value):
        return (value or 'USD').strip().upper()

    def validate(self, attrs):
        blank_to_none(attrs, ['job_number', 'supplier_name'])
        # Denormalised copies follow the linked job and supplier
        job = attrs.get('job')
        if job is not None:
            attrs['job_number'] = job.job_number
        supplier = attrs.get('supplier')
        if supplier is not None and not attrs.get('supplier_name'):
            attrs['supplier_name'] = supplier.name
        return attrs
