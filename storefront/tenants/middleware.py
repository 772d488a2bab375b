"""
Tenant Middleware — определяет магазин по hostname и кладёт в request.tenant.

Логика (см. TenantResolver):
  1. shop-a.example.com → TenantDomain(host='shop-a.example.com').tenant
  2. неизвестный host   → Tenant(is_default=True)
  3. нет default        → None, запрос обслуживается без магазина

Магазин определяется один раз на запрос; кеша между запросами нет,
поэтому изменения Tenant/TenantDomain в админке видны сразу.
"""

import logging

from storefront.sentry_config import set_tenant_context

from .context import set_current_tenant, clear_current_tenant
from .resolver import TenantResolver

logger = logging.getLogger(__name__)


class TenantMiddleware:
    """
    Ставить в MIDDLEWARE ПОСЛЕ SessionMiddleware/AuthenticationMiddleware.

    Ставит:
      - request.tenant = Tenant instance (или None)
      - context var current_tenant (на время запроса)
    """

    def __init__(self, get_response, resolver=None):
        self.get_response = get_response
        self.resolver = resolver or TenantResolver()

    def __call__(self, request):
        tenant = self.resolver.resolve(request)
        request.tenant = tenant
        set_tenant_context(tenant)

        token = set_current_tenant(tenant)
        try:
            response = self.get_response(request)
        finally:
            clear_current_tenant(token)

        return response
