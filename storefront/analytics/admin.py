from django.contrib import admin

from .models import Tracker


@admin.register(Tracker)
class TrackerAdmin(admin.ModelAdmin):
    list_display = ['analytics_id', 'tenant', 'environment', 'is_active']
    list_filter = ['environment', 'is_active', 'tenant']
    search_fields = ['analytics_id', 'tenant__name']
