def current_tenant(request):
    """Магазин текущего запроса в контексте шаблонов."""
    return {
        'current_tenant': getattr(request, 'tenant', None),
    }
