"""
Sentry Integration для storefront.
Отправляет ошибки в Sentry.

Включается переменной окружения SENTRY_DSN; без неё init_sentry() ничего не делает.
Вызывается в конце settings.py.

К каждому событию добавляется тег `tenant` (code магазина, определённого
TenantMiddleware), чтобы ошибки можно было разделять по магазинам.
"""
import logging
import os

import sentry_sdk
from sentry_sdk.integrations.django import DjangoIntegration
from sentry_sdk.integrations.logging import LoggingIntegration

logger = logging.getLogger(__name__)

# 404: штатная ситуация для витрины (в т.ч. товар скрыт для магазина)
IGNORED_EXCEPTIONS = {'Http404', 'NotFound', 'ProductNotVisible'}


def init_sentry():
    """
    Инициализирует Sentry SDK.
    Возвращает True, если SDK был инициализирован.
    """
    sentry_dsn = os.environ.get('SENTRY_DSN', '')

    if not sentry_dsn:
        logger.info("Sentry: DSN not configured, skipping initialization")
        return False

    environment = os.environ.get('DJANGO_ENV', 'production')
    if os.environ.get('DEBUG', 'False').lower() in ('true', '1', 'yes'):
        environment = 'development'

    logging_integration = LoggingIntegration(
        level=logging.INFO,        # breadcrumbs
        event_level=logging.ERROR  # события
    )

    sentry_sdk.init(
        dsn=sentry_dsn,
        integrations=[
            DjangoIntegration(transaction_style='url'),
            logging_integration,
        ],
        environment=environment,
        release=os.environ.get('APP_VERSION', 'unknown'),
        traces_sample_rate=float(os.environ.get('SENTRY_TRACES_SAMPLE_RATE', '0.1')),
        send_default_pii=False,
        ignore_errors=['django.security.DisallowedHost'],
        before_send=before_send_callback,
    )

    logger.info("Sentry: initialized for %s environment", environment)
    return True


def before_send_callback(event, hint):
    """Фильтрация событий перед отправкой в Sentry."""
    if 'exc_info' in hint:
        exc_type, _, _ = hint['exc_info']
        if exc_type.__name__ in IGNORED_EXCEPTIONS:
            return None

    # Маскируем Authorization header
    request_data = event.get('request')
    if isinstance(request_data, dict):
        headers = request_data.get('headers')
        if isinstance(headers, dict) and 'Authorization' in headers:
            headers['Authorization'] = '[FILTERED]'

    return event


def set_tenant_context(tenant):
    """Тег магазина для всех последующих событий текущего scope."""
    sentry_sdk.set_tag('tenant', tenant.code if tenant else 'none')
