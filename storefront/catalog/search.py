"""
Поиск товаров с учётом магазина.

SearchPipeline собирает один queryset из фильтров в фиксированном порядке:

    активные товары (или товары сохранённой группы)
      → магазин (его товары + глобальные) → таксон → ключевые слова → наличие
      → фильтры группы товаров
      → страница + общее количество

Фильтры группы накладываются ПОВЕРХ магазина/таксона/наличия, а не вместо них.
Страница и количество считаются по одному и тому же queryset.

Поисковый провайдер (settings.STOREFRONT['SEARCH_PROVIDER']) получает
нормализованные параметры в prepare(); queryset он не строит.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from django.utils.module_loading import import_string

from .models import Product, ProductGroup, Taxon

logger = logging.getLogger(__name__)


def _to_int(value):
    """'3' → 3, '' / None / 'abc' → 0."""
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return 0


def _route_tokens(value):
    """product_group_query: список токенов или строка 'a/b/c'."""
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value if str(v)]
    return [token for token in str(value).split('/') if token]


@dataclass
class PagedResult:
    items: List[Product]
    page: int
    per_page: int
    total_count: int

    @property
    def num_pages(self):
        if not self.total_count:
            return 1
        return (self.total_count + self.per_page - 1) // self.per_page


class BaseSearchProvider:
    """
    Контракт поискового провайдера.

    manage_pagination = True — провайдер сам ведёт пагинацию (например, через
    page token), и SearchPipeline всегда запрашивает у БД первую страницу.
    """

    manage_pagination = False

    def prepare(self, params):
        raise NotImplementedError


class BasicSearchProvider(BaseSearchProvider):
    """Провайдер по умолчанию: запоминает параметры, пагинация на стороне БД."""

    def __init__(self):
        self.properties = {}

    def prepare(self, params):
        self.properties = {
            key: params.get(key)
            for key in ('taxon', 'keywords', 'page', 'per_page', 'search')
        }


def load_search_provider(config):
    return import_string(config.search_provider)()


class SearchPipeline:
    """
    Один экземпляр — один поиск (состояние последнего поиска остаётся
    в атрибутах: taxon, keywords, product_group, cached_product_group,
    products_scope).

    Args:
        config: core.config.StorefrontConfig
        provider: BaseSearchProvider; по умолчанию — из config.search_provider
    """

    def __init__(self, config, provider=None):
        self.config = config
        self.provider = provider if provider is not None else load_search_provider(config)
        self.params: Dict[str, Any] = {}
        self.taxon: Optional[Taxon] = None
        self.keywords: Optional[str] = None
        self.product_group: Optional[ProductGroup] = None
        self.cached_product_group: Optional[ProductGroup] = None
        self.products_scope = None

    def search(self, params, tenant=None, taxon=None):
        """
        Args:
            params: параметры запроса (taxon, keywords, per_page, page,
                    order_by_price, product_group_name, product_group_query, search)
            tenant: магазин или None (без фильтра по магазину)
            taxon: таксон, уже определённый вызывающим кодом (URL таксона)

        Returns:
            (PagedResult, total_count)
        """
        scope = self.build_scope(params, tenant=tenant, taxon=taxon)

        per_page = self.params['per_page']
        page = 1 if self.provider.manage_pagination else self.params['page']
        offset = (page - 1) * per_page

        total_count = scope.count()
        # Страница за концом выдачи — без запроса (огромный OFFSET БД не примет)
        if offset < total_count:
            items = list(scope.with_display_data()[offset:offset + per_page])
        else:
            items = []
        logger.debug(
            'Product search tenant=%s page=%s per_page=%s total=%s',
            tenant.code if tenant is not None else None, page, per_page, total_count,
        )
        return PagedResult(items=items, page=page, per_page=per_page, total_count=total_count), total_count

    def build_scope(self, params, tenant=None, taxon=None):
        """Отфильтрованный queryset до пагинации."""
        self.params = dict(params or {})
        self.taxon = taxon if taxon is not None else self._find_taxon(self.params.get('taxon'))
        if self.taxon is not None:
            self.params['taxon'] = self.taxon.pk
        self.keywords = self.params.get('keywords')

        self._normalize_pagination()
        self.provider.prepare(self.params)
        self._build_product_group()

        if self.cached_product_group is not None:
            scope = self.cached_product_group.products().active()
        else:
            scope = Product.objects.active()

        if tenant is not None:
            scope = scope.visible_to(tenant)
        if self.taxon is not None:
            scope = scope.in_taxon(self.taxon)
        if self.keywords:
            scope = scope.keywords(self.keywords)
        if not self.config.show_zero_stock_products:
            scope = scope.on_hand()

        self.products_scope = self.product_group.apply_on(scope)
        return self.products_scope

    def _find_taxon(self, value):
        if value in (None, ''):
            return None
        taxon_id = _to_int(value)
        if taxon_id <= 0:
            return None
        return Taxon.objects.filter(pk=taxon_id).first()

    def _normalize_pagination(self):
        per_page = _to_int(self.params.get('per_page'))
        if per_page <= 0 or per_page > self.config.max_per_page:
            per_page = self.config.products_per_page
        self.params['per_page'] = per_page
        page = _to_int(self.params.get('page'))
        self.params['page'] = page if page > 0 else 1

    def _build_product_group(self):
        """Первое совпадение: order_by_price → product_group_name → product_group_query."""
        params = self.params
        self.cached_product_group = None

        if params.get('order_by_price'):
            self.product_group = ProductGroup().from_route(
                [f"{params['order_by_price']}_by_master_price"]
            )
        elif params.get('product_group_name'):
            self.cached_product_group = ProductGroup.objects.filter(
                permalink=params['product_group_name'],
            ).first()
            if self.cached_product_group is None:
                logger.debug('Product group %r not found', params['product_group_name'])
            self.product_group = ProductGroup()
        elif params.get('product_group_query'):
            self.product_group = ProductGroup().from_route(
                _route_tokens(params['product_group_query'])
            )
        else:
            self.product_group = ProductGroup()

        if params.get('search'):
            self.product_group = self.product_group.from_search(params['search'])
