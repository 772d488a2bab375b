from core.config import get_storefront_config

from .selectors import current_tracker


def analytics_tracker(request):
    """
    Трекер в контексте шаблонов. Имя сайта — STOREFRONT['SITE_NAME'],
    если не задано — имя магазина текущего запроса.
    """
    config = get_storefront_config()
    site_name = config.site_name
    if not site_name:
        tenant = getattr(request, 'tenant', None)
        site_name = tenant.name if tenant is not None else ''

    def _load():
        return current_tracker(config.environment, site_name) if site_name else None

    return {'analytics_tracker': _load}
