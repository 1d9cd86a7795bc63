from rest_framework import serializers

from .models import ServiceItem


class ServiceItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = ServiceItem
        fields = ['id', 'name', 'price', 'currency', 'vat', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def validate_currency(self, value):
        return (value or 'USD').strip().upper()

    def validate_price(self, value):
        if value < 0:
            raise serializers.ValidationError("Price cannot be negative")
        return value
