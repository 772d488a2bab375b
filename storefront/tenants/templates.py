"""
Выбор layout-шаблона для магазина.

Каждый магазин может иметь свою тему: layouts/<code>/<layout>.<format>.
Без магазина используется общий каталог layouts/.
"""
import logging
import mimetypes
import posixpath

from django.template import TemplateDoesNotExist, loader

from core.config import get_storefront_config

logger = logging.getLogger(__name__)

HTML_MIME_TYPES = {'text/html', 'application/xhtml+xml'}


def is_html_format(fmt):
    """html / htm / xhtml → True, json / xml / txt → False."""
    mime_type, _ = mimetypes.guess_type(f'layout.{fmt}')
    return mime_type in HTML_MIME_TYPES


class TemplatePathStrategy:
    """
    Args:
        config: core.config.StorefrontConfig (используется layouts_dir)
        tenant: магазин текущего запроса или None
    """

    def __init__(self, config, tenant=None):
        self.config = config
        self.tenant = tenant

    @property
    def layout_dir(self):
        if self.tenant is not None:
            return posixpath.join(self.config.layouts_dir, self.tenant.code.lower())
        return self.config.layouts_dir

    def candidate_path(self, layout):
        """Путь layout'а без расширения формата."""
        layout = str(layout)
        if layout.startswith('/') or f'{self.config.layouts_dir}/' in layout:
            return layout
        return posixpath.join(self.layout_dir, layout)

    def resolve_layout_template(self, layout, fmt='html'):
        """
        Найти layout для формата.

        Для HTML отсутствие шаблона — исключение TemplateDoesNotExist
        (вызывающий код сам переходит на общий layout). Для остальных форматов
        возвращает None: у JSON/XML ответов нет тем магазинов.
        """
        path = f'{self.candidate_path(layout)}.{fmt}'
        try:
            return loader.get_template(path)
        except TemplateDoesNotExist:
            if is_html_format(fmt):
                raise
            logger.debug('No %s layout at %s, rendering without layout', fmt, path)
            return None


class TenantLayoutMixin:
    """
    Mixin для Django CBV (TemplateView и т.п.) — кладёт в контекст
    `layout_template` с темой текущего магазина.

    Шаблон страницы:
        {% extends layout_template %}

    Если у магазина нет своего layout'а — берётся общий layouts/<layout>.
    """

    layout = None
    layout_format = 'html'

    def get_layout_name(self):
        return self.layout or get_storefront_config().default_layout

    def get_layout_template(self):
        config = get_storefront_config()
        layout = self.get_layout_name()
        strategy = TemplatePathStrategy(config, getattr(self.request, 'tenant', None))
        try:
            return strategy.resolve_layout_template(layout, self.layout_format)
        except TemplateDoesNotExist:
            logger.debug('Tenant layout %s missing, falling back to global layout', layout)
            global_strategy = TemplatePathStrategy(config, tenant=None)
            return global_strategy.resolve_layout_template(layout, self.layout_format)

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context['layout_template'] = self.get_layout_template()
        return context
