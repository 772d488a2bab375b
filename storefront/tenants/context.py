"""
Tenant context — магазин текущего запроса для кода без доступа к request
(сигналы, сервисные функции).

contextvars (async-safe): значение не протекает между конкурентными запросами.
Middleware ставит значение в начале запроса и сбрасывает в конце.
"""
import contextvars

_current_tenant: contextvars.ContextVar = contextvars.ContextVar(
    'current_tenant', default=None
)


def set_current_tenant(tenant):
    """Установить текущий магазин. Возвращает token для reset."""
    return _current_tenant.set(tenant)


def get_current_tenant():
    """Текущий магазин или None."""
    return _current_tenant.get()


def clear_current_tenant(token=None):
    """Сбросить магазин: к значению до set (по token) или в None."""
    if token is not None:
        _current_tenant.reset(token)
    else:
        _current_tenant.set(None)
