"""
Django System Checks для конфигурации магазинов.

  - python manage.py check                       → W001
  - python manage.py check --database default    → W001 + W002
"""
from django.conf import settings
from django.core.checks import Tags, Warning, register
from django.db import DatabaseError

MIDDLEWARE_PATH = 'tenants.middleware.TenantMiddleware'


@register(Tags.security)
def check_tenant_middleware_installed(app_configs, **kwargs):
    """Без TenantMiddleware request.tenant не выставляется и все запросы глобальные."""
    if MIDDLEWARE_PATH in getattr(settings, 'MIDDLEWARE', []):
        return []
    return [
        Warning(
            f'{MIDDLEWARE_PATH} is not in MIDDLEWARE.',
            hint='Add it after AuthenticationMiddleware so that request.tenant is resolved.',
            id='tenants.W001',
        )
    ]


@register(Tags.database)
def check_single_default_tenant(app_configs, databases=None, **kwargs):
    """Несколько магазинов по умолчанию — fallback зависит от порядка pk."""
    if not databases:
        return []

    from .models import Tenant

    try:
        defaults = list(Tenant.objects.default().values_list('code', flat=True))
    except DatabaseError:
        # Таблица ещё не создана (миграции не применены)
        return []

    if len(defaults) <= 1:
        return []
    return [
        Warning(
            f'More than one default tenant: {", ".join(defaults)}.',
            hint='Keep is_default=True on a single active tenant; the one with the lowest pk is used.',
            id='tenants.W002',
        )
    ]
