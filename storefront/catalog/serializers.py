"""
Catalog API serializers.
"""
from rest_framework import serializers

from tenants.models import Tenant

from .models import Product, ProductImage, Taxon, Taxonomy


class ProductImageSerializer(serializers.ModelSerializer):

    class Meta:
        model = ProductImage
        fields = ['url', 'alt', 'position']
        read_only_fields = fields


class ProductSerializer(serializers.ModelSerializer):
    """Товар для витрины."""

    price = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True, allow_null=True)
    in_stock = serializers.BooleanField(read_only=True)
    images = ProductImageSerializer(many=True, read_only=True)

    class Meta:
        model = Product
        fields = [
            'id', 'name', 'permalink', 'description', 'price',
            'in_stock', 'images',
        ]
        read_only_fields = fields


class TaxonSerializer(serializers.ModelSerializer):

    class Meta:
        model = Taxon
        fields = ['id', 'name', 'permalink', 'parent', 'position']
        read_only_fields = fields


class TaxonomySerializer(serializers.ModelSerializer):
    taxons = TaxonSerializer(many=True, read_only=True)

    class Meta:
        model = Taxonomy
        fields = ['id', 'name', 'taxons']
        read_only_fields = fields


class AdminProductSerializer(serializers.ModelSerializer):
    """Товар для админского API. tenants — список id магазинов (пусто = глобальный)."""

    tenants = serializers.PrimaryKeyRelatedField(
        many=True, required=False, queryset=Tenant.objects.all(),
    )

    class Meta:
        model = Product
        fields = [
            'id', 'name', 'permalink', 'description', 'available_on',
            'deleted_at', 'count_on_hand', 'tenants', 'taxons',
            'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']
        extra_kwargs = {'taxons': {'required': False}}
