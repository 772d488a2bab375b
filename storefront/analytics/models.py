"""
Tracker — настройки счётчика веб-аналитики магазина.
"""
from django.db import models

from tenants.querysets import TenantScopedQuerySet


class TrackerQuerySet(TenantScopedQuerySet):

    def active_for(self, environment):
        return self.filter(is_active=True, environment=environment)


class Tracker(models.Model):

    ENV_PRODUCTION = 'production'
    ENV_STAGING = 'staging'
    ENV_DEVELOPMENT = 'development'

    ENVIRONMENT_CHOICES = [
        (ENV_PRODUCTION, 'Production'),
        (ENV_STAGING, 'Staging'),
        (ENV_DEVELOPMENT, 'Development'),
    ]

    tenant = models.ForeignKey(
        'tenants.Tenant',
        on_delete=models.CASCADE,
        related_name='trackers',
        verbose_name='Магазин',
    )
    analytics_id = models.CharField('ID счётчика', max_length=100)
    environment = models.CharField(
        'Окружение', max_length=20,
        choices=ENVIRONMENT_CHOICES, default=ENV_PRODUCTION,
    )
    is_active = models.BooleanField('Активен', default=True)

    objects = TrackerQuerySet.as_manager()

    class Meta:
        verbose_name = 'Трекер аналитики'
        verbose_name_plural = 'Трекеры аналитики'
        ordering = ['pk']

    def __str__(self):
        return f'{self.analytics_id} ({self.tenant.code}, {self.environment})'
