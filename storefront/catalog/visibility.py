"""
Видимость товара в магазине.

Товар без магазинов — глобальный. Товар с магазинами виден только в них.
Невидимый товар для покупателя не существует: ответ 404, а не 403,
чтобы не раскрывать наличие товаров других магазинов.
"""
from rest_framework.exceptions import NotFound


class ProductNotVisible(NotFound):
    """Товар не виден в текущем магазине (отдаётся как обычный 404)."""
    default_detail = 'Товар не найден.'


def can_show(product, tenant):
    """True если у товара нет магазинов или tenant среди них."""
    tenant_ids = {t.pk for t in product.tenants.all()}
    if not tenant_ids:
        return True
    return tenant is not None and tenant.pk in tenant_ids


def ensure_visible(product, tenant):
    if not can_show(product, tenant):
        raise ProductNotVisible()
    return product
