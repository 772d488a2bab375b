"""
Хуки админки товаров для привязки к магазинам.
"""
import logging

logger = logging.getLogger(__name__)

TENANTS_FIELD = 'tenants'


def reset_tenants_unless_supplied(product, payload, field=TENANTS_FIELD):
    """
    Перед обновлением: если в запросе нет поля магазинов — товар становится
    глобальным (связи очищаются), а не сохраняет старые магазины.
    """
    if field in payload:
        return False
    product.tenants.clear()
    logger.info('Product %s: %s not supplied, visibility reset to global', product.pk, field)
    return True


def add_to_all_tenants(product):
    """
    После создания. Новый товар остаётся глобальным (пустой набор магазинов
    и так означает «виден везде»), поэтому привязки не создаются.
    """
    return product
