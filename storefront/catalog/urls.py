"""
Catalog URL configuration.
"""
from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import (
    AdminProductViewSet, ProductDetailPage, ProductDetailView, ProductListPage,
    ProductSearchView, TaxonomyListView, TaxonProductsView,
)

router = DefaultRouter()
router.register(r'admin/products', AdminProductViewSet, basename='admin-product')

api_urlpatterns = [
    path('products/', ProductSearchView.as_view(), name='product-search'),
    path('products/<slug:permalink>/', ProductDetailView.as_view(), name='product-detail'),
    path('t/<slug:permalink>/', TaxonProductsView.as_view(), name='taxon-products'),
    path('taxonomies/', TaxonomyListView.as_view(), name='taxonomy-list'),
    path('', include(router.urls)),
]

page_urlpatterns = [
    path('', ProductListPage.as_view(), name='product-list-page'),
    path('<slug:permalink>/', ProductDetailPage.as_view(), name='product-detail-page'),
]
