"""
TenantResolver — определяет магазин для запроса.

Порядок:
  1. TenantDomain с host запроса
  2. Tenant(is_default=True)
  3. None — магазин не определён, всё работает "глобально"

Результат (в т.ч. None) запоминается на самом request и больше не
перезапрашивается до конца запроса. Между запросами ничего не кешируется.
"""
import logging

from django.http.request import split_domain_port

from .registry import TenantRegistry

logger = logging.getLogger(__name__)

# Атрибут request, в котором лежит результат (может быть None)
_CACHE_ATTR = '_resolved_tenant'


def get_request_host(request):
    """Hostname запроса без порта, в нижнем регистре ([::1]:8000 → [::1])."""
    domain, _ = split_domain_port(request.get_host())
    return domain


class TenantResolver:

    def __init__(self, registry=None):
        self.registry = registry or TenantRegistry()

    def resolve(self, request):
        if hasattr(request, _CACHE_ATTR):
            return getattr(request, _CACHE_ATTR)

        host = get_request_host(request)
        tenant = self.registry.find_by_domain(host)
        if tenant is None:
            tenant = self.registry.find_default()
            if tenant is not None:
                logger.debug('Unknown host %s, using default tenant %s', host, tenant.code)
            else:
                logger.info('Unknown host %s and no default tenant, serving unscoped', host)

        setattr(request, _CACHE_ATTR, tenant)
        return tenant


_default_resolver = TenantResolver()


def resolve_tenant(request):
    """Shortcut: магазин текущего запроса через общий resolver."""
    return _default_resolver.resolve(request)
