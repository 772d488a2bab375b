"""
Текущий заказ (корзина) покупателя.

current_order       — найти заказ из сессии, при необходимости создать
bind_tenant         — декоратор: после accessor'а привязать заказ к магазину
get_current_order   — current_order + привязка к магазину (использовать во views)
"""
import logging
from functools import wraps

from tenants.resolver import resolve_tenant

from .models import Order

logger = logging.getLogger(__name__)

SESSION_KEY = 'order_id'
_REQUEST_ATTR = '_current_order'


def current_order(request, create_order_if_necessary=False):
    """
    Заказ покупателя из сессии (оформленные заказы не считаются корзиной).
    Результат запоминается на request.
    """
    order = getattr(request, _REQUEST_ATTR, None)
    if order is not None:
        return order

    order_id = request.session.get(SESSION_KEY)
    if order_id:
        order = Order.objects.exclude(state=Order.STATE_COMPLETE).filter(pk=order_id).first()

    if order is None and create_order_if_necessary:
        user = request.user if getattr(request, 'user', None) and request.user.is_authenticated else None
        order = Order.objects.create(user=user, email=getattr(user, 'email', '') or '')
        request.session[SESSION_KEY] = order.pk
        logger.info('Order %s created', order.number)

    setattr(request, _REQUEST_ATTR, order)
    return order


def bind_tenant(accessor):
    """
    Оборачивает accessor текущего заказа: если заказ есть, магазин определён,
    а у заказа магазина ещё нет — сохраняет магазин (одно поле, один UPDATE).
    Уже привязанный заказ не перепривязывается.
    """
    @wraps(accessor)
    def wrapper(request, create_order_if_necessary=False):
        order = accessor(request, create_order_if_necessary)
        if order is None or order.tenant_id is not None:
            return order

        tenant = resolve_tenant(request)
        if tenant is not None:
            order.tenant = tenant
            order.save(update_fields=['tenant'])
            logger.info('Order %s bound to tenant %s', order.number, tenant.code)
        return order

    return wrapper


get_current_order = bind_tenant(current_order)
