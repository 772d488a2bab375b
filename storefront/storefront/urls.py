"""
URL configuration for storefront project.
"""
from django.contrib import admin
from django.http import JsonResponse
from django.urls import path, include

from catalog.urls import api_urlpatterns as catalog_api_urls
from catalog.urls import page_urlpatterns as catalog_page_urls


def health(request):
    tenant = getattr(request, 'tenant', None)
    return JsonResponse({
        'status': 'ok',
        'service': 'storefront',
        'tenant': tenant.code if tenant is not None else None,
    })


urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/health/', health, name='health'),
    path('api/orders/', include('orders.urls')),
    path('api/', include(catalog_api_urls)),
    path('products/', include(catalog_page_urls)),
]
