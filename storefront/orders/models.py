"""
Order — заказ/корзина покупателя.

Магазин заказа выставляется один раз (при создании или при первом обращении
к текущему заказу) и дальше не меняется.
"""
import secrets

from django.conf import settings
from django.db import models

from tenants.querysets import TenantScopedQuerySet


def generate_order_number():
    return 'R' + ''.join(secrets.choice('0123456789') for _ in range(9))


class Order(models.Model):

    STATE_CART = 'cart'
    STATE_ADDRESS = 'address'
    STATE_COMPLETE = 'complete'
    STATE_CANCELED = 'canceled'

    STATE_CHOICES = [
        (STATE_CART, 'Корзина'),
        (STATE_ADDRESS, 'Оформление'),
        (STATE_COMPLETE, 'Оформлен'),
        (STATE_CANCELED, 'Отменен'),
    ]

    number = models.CharField('Номер', max_length=15, unique=True, default=generate_order_number)
    state = models.CharField('Статус', max_length=20, choices=STATE_CHOICES, default=STATE_CART)
    email = models.EmailField('Email', blank=True)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True, blank=True,
        related_name='orders',
        verbose_name='Пользователь',
    )
    tenant = models.ForeignKey(
        'tenants.Tenant',
        on_delete=models.PROTECT,
        null=True, blank=True,
        related_name='orders',
        verbose_name='Магазин',
    )

    created_at = models.DateTimeField('Создан', auto_now_add=True)
    updated_at = models.DateTimeField('Обновлен', auto_now=True)

    objects = TenantScopedQuerySet.as_manager()

    class Meta:
        verbose_name = 'Заказ'
        verbose_name_plural = 'Заказы'
        ordering = ['-created_at']

    def __str__(self):
        return f'Заказ {self.number} ({self.get_state_display()})'

    @property
    def is_complete(self):
        return self.state == self.STATE_COMPLETE
