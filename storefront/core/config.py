"""
Конфигурация витрины.

Все настройки витрины собраны в settings.STOREFRONT и читаются в один
неизменяемый объект StorefrontConfig. Объект явно передаётся в SearchPipeline
и TemplatePathStrategy — компоненты не лезут в settings сами.
"""
from dataclasses import dataclass

from django.conf import settings

DEFAULTS = {
    'PRODUCTS_PER_PAGE': 10,
    'MAX_PER_PAGE': 100,
    'SHOW_ZERO_STOCK_PRODUCTS': False,
    'SEARCH_PROVIDER': 'catalog.search.BasicSearchProvider',
    'LAYOUTS_DIR': 'layouts',
    'DEFAULT_LAYOUT': 'application',
    'ENVIRONMENT': 'development',
    'SITE_NAME': '',
}


@dataclass(frozen=True)
class StorefrontConfig:
    products_per_page: int = DEFAULTS['PRODUCTS_PER_PAGE']
    max_per_page: int = DEFAULTS['MAX_PER_PAGE']
    show_zero_stock_products: bool = DEFAULTS['SHOW_ZERO_STOCK_PRODUCTS']
    search_provider: str = DEFAULTS['SEARCH_PROVIDER']
    layouts_dir: str = DEFAULTS['LAYOUTS_DIR']
    default_layout: str = DEFAULTS['DEFAULT_LAYOUT']
    environment: str = DEFAULTS['ENVIRONMENT']
    site_name: str = DEFAULTS['SITE_NAME']


def get_storefront_config() -> StorefrontConfig:
    """Собрать StorefrontConfig из settings.STOREFRONT (недостающие ключи — дефолты)."""
    values = {**DEFAULTS, **getattr(settings, 'STOREFRONT', {})}
    return StorefrontConfig(
        products_per_page=int(values['PRODUCTS_PER_PAGE']),
        max_per_page=int(values['MAX_PER_PAGE']),
        show_zero_stock_products=bool(values['SHOW_ZERO_STOCK_PRODUCTS']),
        search_provider=values['SEARCH_PROVIDER'],
        layouts_dir=values['LAYOUTS_DIR'].strip('/'),
        default_layout=values['DEFAULT_LAYOUT'],
        environment=values['ENVIRONMENT'],
        site_name=values['SITE_NAME'],
    )
