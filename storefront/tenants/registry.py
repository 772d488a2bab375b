"""
TenantRegistry — поиск магазина по домену и магазина по умолчанию.

Чистый lookup по БД, без кеша: кешированием занимается вызывающий код
(TenantResolver, один раз на запрос).
"""
import logging

from .models import Tenant

logger = logging.getLogger(__name__)


class TenantRegistry:

    def find_by_domain(self, host):
        """Магазин по точному hostname (без wildcard/поддоменов) или None."""
        if not host:
            return None
        return (
            Tenant.objects.active()
            .filter(domains__host=host.lower(), domains__is_active=True)
            .first()
        )

    def find_default(self):
        """Активный магазин с is_default=True или None."""
        return Tenant.objects.default().order_by('pk').first()
