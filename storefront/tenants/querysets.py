"""
QuerySet для моделей с FK на магазин (Taxonomy, Order, Tracker).
"""
from django.db import models

from .context import get_current_tenant


class TenantScopedQuerySet(models.QuerySet):
    """Фильтрация по FK `tenant`. Без магазина (None) — без фильтра."""

    tenant_field = 'tenant'

    def for_tenant(self, tenant):
        if tenant is None:
            return self
        return self.filter(**{self.tenant_field: tenant})

    def for_current_tenant(self):
        """Фильтр по магазину из context var (вне request)."""
        return self.for_tenant(get_current_tenant())
