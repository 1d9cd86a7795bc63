from collections.abc import Mapping
from decimal import Decimal

from rest_framework import serializers

from backend.core.numbering import create_with_unique_number
from .models import LogisticsJob
from .numbering import generate_job_number


class AirWaybillSerializer(serializers.Serializer):
    master_air_waybill = serializers.CharField(max_length=100, required=False, allow_blank=True, allow_null=True)
    house_air_waybill = serializers.CharField(max_length=100, required=False, allow_blank=True, allow_null=True)


class BillOfLadingSerializer(serializers.Serializer):
    master_bl = serializers.CharField(max_length=100, required=False, allow_blank=True, allow_null=True)
    house_bl = serializers.CharField(max_length=100, required=False, allow_blank=True, allow_null=True)


class RoadTransportSerializer(serializers.Serializer):
    plate_number = serializers.CharField(max_length=50, required=False, allow_blank=True, allow_null=True)
    container_number = serializers.CharField(max_length=50, required=False, allow_blank=True, allow_null=True)


# Nested block name for each freight mode
MODE_BLOCKS = {
    'air': 'awb',
    'sea': 'bill_of_lading',
    'road': 'road',
}

WEIGHT_FIELDS = ('gross_weight', 'chargeable_weight')


class LogisticsJobSerializer(serializers.ModelSerializer):
    """
    Jobs are exposed as a tagged union on ``freight_mode``: the common fields
    plus exactly one of ``awb`` (air), ``bill_of_lading`` (sea) or ``road``.
    Flat type-specific fields are accepted on write and folded into their block;
    fields belonging to other modes are cleared on save.
    """
    client_name = serializers.CharField(source='client.name', read_only=True)
    user_name = serializers.CharField(source='user.name', read_only=True, default=None)
    freight_mode = serializers.CharField(read_only=True)
    awb = AirWaybillSerializer(source='*', required=False)
    bill_of_lading = BillOfLadingSerializer(source='*', required=False)
    road = RoadTransportSerializer(source='*', required=False)
    total_expenses = serializers.SerializerMethodField()
    expense_count = serializers.SerializerMethodField()
    invoice_count = serializers.SerializerMethodField()

    class Meta:
        model = LogisticsJob
        fields = [
            'id', 'job_number', 'title', 'client', 'client_name', 'user', 'user_name',
            'job_type', 'freight_mode', 'status',
            'port_of_loading', 'port_of_discharge',
            'gross_weight', 'chargeable_weight', 'shipper', 'consignee', 'package', 'good_description',
            'awb', 'bill_of_lading', 'road',
            'total_expenses', 'expense_count', 'invoice_count',
            'created_at', 'updated_at',
        ]
        read_only_fields = ['job_number', 'user', 'created_at', 'updated_at']

    def to_internal_value(self, data):
        if not isinstance(data, Mapping):
            return super().to_internal_value(data)
        data = dict(data.items())
        for mode, block_name in MODE_BLOCKS.items():
            block = data.get(block_name)
            if block is None:
                data.pop(block_name, None)
                block = {}
            elif not isinstance(block, dict):
                # let the nested serializer report the type error
                continue
            else:
                block = dict(block)
            flat = {field: data.pop(field) for field in LogisticsJob.FREIGHT_MODE_FIELDS[mode] if field in data}
            for field, value in flat.items():
                block.setdefault(field, value)
            if block:
                data[block_name] = block
        for field in WEIGHT_FIELDS:
            if data.get(field) == '':
                data[field] = None
        return super().to_internal_value(data)

    def validate(self, attrs):
        job_type = attrs.get('job_type') or getattr(self.instance, 'job_type', None)
        mode = LogisticsJob.freight_mode_for(job_type)
        for other_mode, fields in LogisticsJob.FREIGHT_MODE_FIELDS.items():
            if other_mode == mode:
                for field in fields:
                    if attrs.get(field) == '':
                        attrs[field] = None
                continue
            for field in fields:
                attrs[field] = None
        return attrs

    def to_representation(self, instance):
        data = super().to_representation(instance)
        mode = instance.freight_mode
        for block_mode, block_name in MODE_BLOCKS.items():
            if block_mode != mode:
                data.pop(block_name, None)
        return data

    def get_total_expenses(self, obj):
        return sum((expense.amount for expense in obj.expenses.all()), Decimal('0.00'))

    def get_expense_count(self, obj):
        return len(obj.expenses.all())

    def get_invoice_count(self, obj):
        return len(obj.invoices.all())

    def create(self, validated_data):
        job_type = validated_data['job_type']

        def _create(number):
            return LogisticsJob.objects.create(job_number=number, **validated_data)

        return create_with_unique_number(
            _create,
            lambda attempt: generate_job_number(job_type, offset=attempt),
        )


class LogisticsJobDetailSerializer(LogisticsJobSerializer):
    expenses = serializers.SerializerMethodField()
    invoices = serializers.SerializerMethodField()

    class Meta(LogisticsJobSerializer.Meta):
        fields = LogisticsJobSerializer.Meta.fields + ['expenses', 'invoices']

    def get_expenses(self, obj):
        return [
            {
                'id': expense.id,
                'title': expense.title,
                'amount': expense.amount,
                'currency': expense.currency,
                'supplier_name': expense.supplier_name,
                'created_at': expense.created_at,
            }
            for expense in obj.expenses.all()
        ]

    def get_invoices(self, obj):
        return [
            {
                'id': invoice.id,
                'number': invoice.number,
                'status': invoice.status,
                'currency': invoice.currency,
                'total': invoice.total,
            }
            for invoice in obj.invoices.all()
        ]


class JobSummarySerializer(serializers.ModelSerializer):
    client_name = serializers.CharField(source='client.name', read_only=True)

    class Meta:
        model = LogisticsJob
        fields = ['id', 'job_number', 'title', 'job_type', 'status', 'client', 'client_name', 'created_at']
        read_only_fields = fields
