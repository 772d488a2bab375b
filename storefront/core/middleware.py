"""
Middleware для логирования метрик запросов
"""
import time
import logging
from django.utils.deprecation import MiddlewareMixin

logger = logging.getLogger('request_metrics')

SLOW_REQUEST_SECONDS = 2.0


class RequestMetricsMiddleware(MiddlewareMixin):
    """
    Одна строка лога на запрос:
    - Метод и путь
    - Статус код
    - Время обработки
    - Магазин (code), определённый TenantMiddleware
    """

    def process_request(self, request):
        request._start_time = time.monotonic()
        return None

    def process_response(self, request, response):
        if not hasattr(request, '_start_time'):
            return response

        duration = time.monotonic() - request._start_time
        tenant = getattr(request, 'tenant', None)
        tenant_code = tenant.code if tenant is not None else '-'

        logger.info(
            'method=%s path=%s status=%s duration=%.3fs tenant=%s',
            request.method, request.path, response.status_code, duration, tenant_code,
        )
        response['X-Request-Duration'] = f'{duration:.3f}'

        if duration > SLOW_REQUEST_SECONDS:
            logger.warning(
                'SLOW_REQUEST: %s %s took %.3fs (tenant=%s)',
                request.method, request.path, duration, tenant_code,
            )

        return response
