from django.contrib import admin

from .models import Tenant, TenantDomain


class TenantDomainInline(admin.TabularInline):
    model = TenantDomain
    extra = 0


@admin.register(Tenant)
class TenantAdmin(admin.ModelAdmin):
    list_display = ('name', 'code', 'is_default', 'is_active', 'created_at')
    list_filter = ('is_active', 'is_default')
    search_fields = ('name', 'code', 'domains__host')
    readonly_fields = ('created_at', 'updated_at')
    prepopulated_fields = {'code': ('name',)}
    inlines = [TenantDomainInline]

    fieldsets = (
        ('Основное', {
            'fields': ('name', 'code', 'is_default', 'is_active')
        }),
        ('Даты', {
            'fields': ('created_at', 'updated_at')
        }),
    )


@admin.register(TenantDomain)
class TenantDomainAdmin(admin.ModelAdmin):
    list_display = ('host', 'tenant', 'is_active')
    list_filter = ('is_active', 'tenant')
    search_fields = ('host', 'tenant__name')
    raw_id_fields = ('tenant',)
