from django.apps import AppConfig


class TenantsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'tenants'
    verbose_name = 'Магазины (Multi-Tenant)'

    def ready(self):
        # Django system checks для конфигурации магазинов
        import tenants.checks  # noqa: F401
