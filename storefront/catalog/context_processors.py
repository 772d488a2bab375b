from .models import Taxonomy


def taxonomies(request):
    """
    Таксономии текущего магазина для навигации (лениво, только если шаблон обратится).

    request без атрибута tenant (рендер вне TenantMiddleware, например письма
    из сервисного кода) — магазин берётся из context var.
    """
    has_tenant = hasattr(request, 'tenant')
    tenant = getattr(request, 'tenant', None)

    def _load():
        if has_tenant:
            queryset = Taxonomy.objects.for_tenant(tenant)
        else:
            queryset = Taxonomy.objects.for_current_tenant()
        return list(queryset.prefetch_related('taxons'))

    return {'taxonomies': _load}
