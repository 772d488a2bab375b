"""
Catalog views: JSON API (DRF) и HTML-страницы витрины.

Магазин берётся из request.tenant (TenantMiddleware). Если магазин не
определён — каталог отдаётся без фильтра по магазину.
"""
import logging

from django.db import transaction
from django.http import Http404
from django.shortcuts import get_object_or_404
from django.views.generic import TemplateView
from rest_framework import viewsets
from rest_framework.exceptions import NotFound
from rest_framework.permissions import AllowAny, IsAdminUser
from rest_framework.response import Response
from rest_framework.views import APIView

from core.config import get_storefront_config
from tenants.templates import TenantLayoutMixin

from .hooks import add_to_all_tenants, reset_tenants_unless_supplied
from .models import Product, Taxon, Taxonomy
from .search import SearchPipeline
from .serializers import (
    AdminProductSerializer, ProductSerializer, TaxonomySerializer,
)
from .visibility import can_show, ensure_visible

logger = logging.getLogger(__name__)


def search_params_from_query(query_params):
    """
    QueryDict → параметры SearchPipeline.

    search[name_contains]=shirt&search[order]=ascend_by_name
        → {'search': {'name_contains': 'shirt', 'order': 'ascend_by_name'}}
    product_group_query=a&product_group_query=b → ['a', 'b']
    """
    params = {}
    search = {}
    for key, value in query_params.items():
        if key.startswith('search[') and key.endswith(']'):
            search[key[len('search['):-1]] = value
        else:
            params[key] = value

    route = query_params.getlist('product_group_query')
    if len(route) > 1:
        params['product_group_query'] = route
    if search:
        params['search'] = search
    return params


def _page_payload(result):
    return {
        'count': result.total_count,
        'page': result.page,
        'per_page': result.per_page,
        'num_pages': result.num_pages,
        'results': ProductSerializer(result.items, many=True).data,
    }


class ProductSearchView(APIView):
    """
    GET /api/products/?keywords=&taxon=&page=&per_page=&order_by_price=
                       &product_group_name=&product_group_query=&search[...]=
    Поиск товаров текущего магазина.
    """
    permission_classes = [AllowAny]

    def get(self, request):
        pipeline = SearchPipeline(get_storefront_config())
        result, _ = pipeline.search(
            search_params_from_query(request.query_params),
            tenant=getattr(request, 'tenant', None),
        )
        return Response(_page_payload(result))


class TaxonProductsView(APIView):
    """
    GET /api/t/<permalink>/
    Товары таксона (и его потомков). Таксон чужого магазина → 404.
    """
    permission_classes = [AllowAny]

    def get(self, request, permalink):
        tenant = getattr(request, 'tenant', None)
        taxon = Taxon.objects.select_related('taxonomy').filter(permalink=permalink).first()
        if taxon is None or not taxon.is_visible_to(tenant):
            raise NotFound('Категория не найдена.')

        pipeline = SearchPipeline(get_storefront_config())
        result, _ = pipeline.search(
            search_params_from_query(request.query_params),
            tenant=tenant,
            taxon=taxon,
        )
        return Response(_page_payload(result))


class ProductDetailView(APIView):
    """
    GET /api/products/<permalink>/
    Товар, скрытый для текущего магазина, отдаётся как 404.
    """
    permission_classes = [AllowAny]

    def get(self, request, permalink):
        product = Product.objects.active().with_display_data().filter(permalink=permalink).first()
        if product is None:
            raise NotFound('Товар не найден.')
        ensure_visible(product, getattr(request, 'tenant', None))
        return Response(ProductSerializer(product).data)


class TaxonomyListView(APIView):
    """
    GET /api/taxonomies/
    Таксономии текущего магазина (без магазина — все).
    """
    permission_classes = [AllowAny]

    def get(self, request):
        taxonomies = (
            Taxonomy.objects.for_tenant(getattr(request, 'tenant', None))
            .prefetch_related('taxons')
        )
        return Response(TaxonomySerializer(taxonomies, many=True).data)


class AdminProductViewSet(viewsets.ModelViewSet):
    """
    /api/admin/products/
    CRUD товаров для администратора.

    При обновлении без поля `tenants` товар становится глобальным.
    """
    queryset = Product.objects.all().prefetch_related('tenants', 'taxons')
    serializer_class = AdminProductSerializer
    permission_classes = [IsAdminUser]
    lookup_field = 'permalink'

    def perform_create(self, serializer):
        product = serializer.save()
        add_to_all_tenants(product)
        logger.info('Product %s created by %s', product.permalink, self.request.user)

    def perform_update(self, serializer):
        # Сброс магазинов откатывается вместе с неудачным сохранением
        with transaction.atomic():
            reset_tenants_unless_supplied(serializer.instance, self.request.data)
            serializer.save()


# ═══════════════════════════════════════════════════════════════
# HTML
# ═══════════════════════════════════════════════════════════════

class ProductListPage(TenantLayoutMixin, TemplateView):
    """GET /products/ — страница поиска в теме магазина."""
    template_name = 'catalog/product_list.html'

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        pipeline = SearchPipeline(get_storefront_config())
        result, total_count = pipeline.search(
            search_params_from_query(self.request.GET),
            tenant=getattr(self.request, 'tenant', None),
        )
        context.update({
            'products': result.items,
            'page': result,
            'products_count': total_count,
            'taxon': pipeline.taxon,
            'keywords': pipeline.keywords,
        })
        return context


class ProductDetailPage(TenantLayoutMixin, TemplateView):
    """GET /products/<permalink>/ — карточка товара; скрытый товар → 404."""
    template_name = 'catalog/product_detail.html'

    def get_context_data(self, **kwargs):
        product = get_object_or_404(
            Product.objects.active().with_display_data(),
            permalink=kwargs['permalink'],
        )
        if not can_show(product, getattr(self.request, 'tenant', None)):
            raise Http404('Товар не найден.')

        context = super().get_context_data(**kwargs)
        context['product'] = product
        return context
