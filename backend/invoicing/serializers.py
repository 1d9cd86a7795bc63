from decimal import Decimal

from rest_framework import serializers

from backend.catalog.models import ServiceItem
from backend.core.numbering import create_with_unique_number
from .aggregation import number_to_words
from .models import Invoice, InvoiceLineItem
from .numbering import generate_invoice_number


class InvoiceLineItemSerializer(serializers.ModelSerializer):
    currency = serializers.CharField(max_length=3, required=False)
    billing_amount = serializers.DecimalField(max_digits=14, decimal_places=2, required=False)

    class Meta:
        model = InvoiceLineItem
        fields = ['id', 'description', 'based_on', 'rate', 'currency', 'amount',
                  'tax_percent', 'tax_amount', 'billing_amount']

    def validate(self, attrs):
        # line items are always written whole, even on PATCH
        if attrs.get('amount') is None:
            raise serializers.ValidationError({'amount': 'This field is required.'})
        if not attrs.get('description'):
            raise serializers.ValidationError({'description': 'This field is required.'})
        if attrs.get('billing_amount') is None:
            attrs['billing_amount'] = attrs['amount'] + (attrs.get('tax_amount') or Decimal('0.00'))
        if attrs.get('currency'):
            attrs['currency'] = attrs['currency'].upper()
        return attrs


def create_invoice_with_items(invoice_data, items_data):
    """
    Create an invoice with a fresh number and its line items in one savepoint.
    Line items without a currency inherit the invoice's.
    """
    def _create(number):
        invoice = Invoice.objects.create(number=number, **invoice_data)
        InvoiceLineItem.objects.bulk_create([
            InvoiceLineItem(invoice=invoice, **{'currency': invoice.currency, **item})
            for item in items_data
        ])
        return invoice

    return create_with_unique_number(_create, lambda attempt: generate_invoice_number(offset=attempt))


class InvoiceSerializer(serializers.ModelSerializer):
    line_items = InvoiceLineItemSerializer(many=True, required=False)
    client_name = serializers.CharField(source='client.name', read_only=True)
    job_title = serializers.CharField(source='job.title', read_only=True, default=None)
    user_name = serializers.CharField(source='user.name', read_only=True, default=None)
    tax_total = serializers.SerializerMethodField()
    line_item_count = serializers.SerializerMethodField()

    class Meta:
        model = Invoice
        fields = [
            'id', 'number', 'client', 'client_name', 'job', 'job_number', 'job_title', 'booking_number',
            'invoice_date', 'due_date', 'status', 'currency', 'sub_total', 'tax_total', 'total',
            'amount_in_words', 'remarks', 'user', 'user_name',
            'line_items', 'line_item_count', 'created_at', 'updated_at',
        ]
        read_only_fields = ['number', 'user', 'created_at', 'updated_at']

    def get_tax_total(self, obj):
        return obj.get_tax_total()

    def get_line_item_count(self, obj):
        return len(obj.line_items.all())

    def validate_currency(self, value):
        return value.strip().upper()

    def validate(self, attrs):
        job = attrs.get('job')
        if job is not None and not attrs.get('job_number'):
            attrs['job_number'] = job.job_number

        # Keep the printed amount in step with the total unless one was sent
        if ('total' in attrs or 'currency' in attrs) and not attrs.get('amount_in_words'):
            currency = attrs.get('currency') or getattr(self.instance, 'currency', None) or 'USD'
            total = attrs['total'] if 'total' in attrs else getattr(self.instance, 'total', None)
            try:
                if total is not None:
                    attrs['amount_in_words'] = number_to_words(total, currency)
            except ValueError as e:
                raise serializers.ValidationError({'total': str(e)})
        return attrs

    def create(self, validated_data):
        items_data = validated_data.pop('line_items', [])
        return create_invoice_with_items(validated_data, items_data)

    def update(self, instance, validated_data):
        items_data = validated_data.pop('line_items', None)
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        instance.save()

        # Sent line items replace the existing ones
        if items_data is not None:
            instance.line_items.all().delete()
            InvoiceLineItem.objects.bulk_create([
                InvoiceLineItem(invoice=instance, **{'currency': instance.currency, **item})
                for item in items_data
            ])
        return instance


class ServiceLineSerializer(serializers.Serializer):
    """One service line for the invoice preview, optionally prefilled from the catalog"""
    service = serializers.PrimaryKeyRelatedField(queryset=ServiceItem.objects.all(), required=False, allow_null=True)
    description = serializers.CharField(max_length=255, required=False, allow_blank=True)
    amount = serializers.DecimalField(max_digits=14, decimal_places=2, required=False, allow_null=True)
    currency = serializers.CharField(max_length=3, required=False)
    vat_enabled = serializers.BooleanField(required=False, allow_null=True, default=None)
    vat_percent = serializers.DecimalField(max_digits=5, decimal_places=2, required=False, allow_null=True)

    def validate(self, attrs):
        service = attrs.pop('service', None)
        if service is not None:
            attrs.setdefault('description', service.name)
            if attrs.get('amount') is None:
                attrs['amount'] = service.price
            attrs.setdefault('currency', service.currency)
            if attrs.get('vat_enabled') is None:
                attrs['vat_enabled'] = service.vat
        if attrs.get('amount') is None:
            raise serializers.ValidationError({'amount': 'Amount is required when no service is selected'})
        if attrs['amount'] < 0:
            raise serializers.ValidationError({'amount': 'Amount cannot be negative'})
        attrs['currency'] = (attrs.get('currency') or 'USD').upper()
        attrs['vat_enabled'] = bool(attrs.get('vat_enabled'))
        return attrs


class InvoicePreviewSerializer(serializers.Serializer):
    services = ServiceLineSerializer(many=True, allow_empty=False)
