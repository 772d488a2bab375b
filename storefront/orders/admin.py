from django.contrib import admin

from .models import Order


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ['number', 'tenant', 'state', 'email', 'created_at']
    list_filter = ['state', 'tenant']
    search_fields = ['number', 'email', 'user__email']
    readonly_fields = ['number', 'created_at', 'updated_at']
    raw_id_fields = ['user']
