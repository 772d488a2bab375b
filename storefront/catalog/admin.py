"""
Catalog admin configuration.
"""
from django.contrib import admin

from .hooks import add_to_all_tenants
from .models import Product, ProductGroup, ProductImage, Taxon, Taxonomy, Variant


class VariantInline(admin.TabularInline):
    model = Variant
    extra = 0


class ProductImageInline(admin.TabularInline):
    model = ProductImage
    extra = 0


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ['name', 'permalink', 'count_on_hand', 'tenants_display', 'available_on', 'deleted_at']
    list_filter = ['tenants', 'taxons']
    search_fields = ['name', 'permalink', 'description']
    prepopulated_fields = {'permalink': ('name',)}
    filter_horizontal = ['tenants', 'taxons']
    inlines = [VariantInline, ProductImageInline]

    def save_related(self, request, form, formsets, change):
        super().save_related(request, form, formsets, change)
        if not change:
            add_to_all_tenants(form.instance)

    def tenants_display(self, obj):
        codes = [t.code for t in obj.tenants.all()]
        return ', '.join(codes) if codes else 'все магазины'
    tenants_display.short_description = 'Магазины'


class TaxonInline(admin.TabularInline):
    model = Taxon
    extra = 0
    raw_id_fields = ['parent']


@admin.register(Taxonomy)
class TaxonomyAdmin(admin.ModelAdmin):
    list_display = ['name', 'tenant', 'position']
    list_filter = ['tenant']
    inlines = [TaxonInline]


@admin.register(ProductGroup)
class ProductGroupAdmin(admin.ModelAdmin):
    list_display = ['name', 'permalink', 'order_scope']
    search_fields = ['name', 'permalink']
    prepopulated_fields = {'permalink': ('name',)}
