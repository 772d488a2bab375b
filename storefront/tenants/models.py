"""
Tenant models — магазины и их домены.
"""

from django.db import models


class TenantQuerySet(models.QuerySet):

    def active(self):
        return self.filter(is_active=True)

    def default(self):
        return self.active().filter(is_default=True)


class Tenant(models.Model):
    """
    Магазин (tenant). Свой каталог, тема оформления, заказы и трекер аналитики.
    """

    name = models.CharField(max_length=200, help_text='Название магазина')
    code = models.SlugField(
        max_length=50, unique=True, db_index=True,
        help_text='Короткий код, используется для каталога шаблонов layouts/<code>/',
    )
    is_default = models.BooleanField(
        default=False,
        help_text='Магазин по умолчанию — для запросов с неизвестного домена',
    )
    is_active = models.BooleanField(default=True, help_text='Активен')

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = TenantQuerySet.as_manager()

    class Meta:
        ordering = ['name']
        verbose_name = 'Магазин'
        verbose_name_plural = 'Магазины'

    def __str__(self):
        return f'{self.name} ({self.code})'

    def save(self, *args, **kwargs):
        self.code = (self.code or '').lower()
        super().save(*args, **kwargs)

    @property
    def domain_names(self):
        return {d.host for d in self.domains.all()}


class TenantDomain(models.Model):
    """
    Домен, привязанный к магазину. host — без порта, в нижнем регистре,
    уникален глобально (один домен → один магазин).
    """

    tenant = models.ForeignKey(
        Tenant, on_delete=models.CASCADE,
        related_name='domains',
        verbose_name='Магазин',
    )
    host = models.CharField(
        max_length=255, unique=True,
        help_text='Домен без порта, например shop.example.com',
    )
    is_active = models.BooleanField(default=True)

    class Meta:
        verbose_name = 'Домен магазина'
        verbose_name_plural = 'Домены магазинов'
        indexes = [
            models.Index(fields=['tenant', 'is_active'], name='domain_tenant_active_idx'),
        ]

    def __str__(self):
        return f'{self.host} → {self.tenant.code}'

    def save(self, *args, **kwargs):
        self.host = (self.host or '').strip().lower()
        super().save(*args, **kwargs)
