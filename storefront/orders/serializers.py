from rest_framework import serializers

from .models import Order


class OrderSerializer(serializers.ModelSerializer):
    tenant = serializers.SlugRelatedField(slug_field='code', read_only=True)

    class Meta:
        model = Order
        fields = ['id', 'number', 'state', 'email', 'tenant', 'created_at', 'updated_at']
        read_only_fields = fields
