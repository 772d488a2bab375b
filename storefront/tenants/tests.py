"""
Тесты tenants app: определение магазина по hostname, middleware, выбор layout.

Запуск: python manage.py test tenants -v2
"""
from unittest.mock import MagicMock

from django.http import HttpResponse
from django.template import TemplateDoesNotExist
from django.test import RequestFactory, SimpleTestCase, TestCase, override_settings
from django.views.generic import TemplateView

from core.config import StorefrontConfig
from tenants.checks import check_single_default_tenant, check_tenant_middleware_installed
from tenants.context import clear_current_tenant, get_current_tenant, set_current_tenant
from tenants.middleware import TenantMiddleware
from tenants.models import Tenant, TenantDomain
from tenants.registry import TenantRegistry
from tenants.resolver import TenantResolver, get_request_host, resolve_tenant
from tenants.templates import TemplatePathStrategy, TenantLayoutMixin, is_html_format


def make_tenant(code, hosts=(), is_default=False, is_active=True, name=None):
    tenant = Tenant.objects.create(
        name=name or code.title(), code=code,
        is_default=is_default, is_active=is_active,
    )
    for host in hosts:
        TenantDomain.objects.create(tenant=tenant, host=host)
    return tenant


class TenantModelTests(TestCase):

    def test_code_is_lowercased_on_save(self):
        tenant = Tenant.objects.create(name='Shop A', code='Shop_A')
        self.assertEqual(tenant.code, 'shop_a')

    def test_domain_host_is_normalized(self):
        tenant = make_tenant('shop_a')
        domain = TenantDomain.objects.create(tenant=tenant, host='  Shop-A.Test ')
        self.assertEqual(domain.host, 'shop-a.test')
        self.assertEqual(tenant.domain_names, {'shop-a.test'})


class TenantRegistryTests(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.shop_a = make_tenant('shop_a', hosts=['shop-a.test', 'www.shop-a.test'])
        cls.shop_b = make_tenant('shop_b', hosts=['shop-b.test'])
        cls.main = make_tenant('main', hosts=['main.test'], is_default=True)

    def setUp(self):
        self.registry = TenantRegistry()

    def test_find_by_domain_exact_match(self):
        self.assertEqual(self.registry.find_by_domain('shop-a.test'), self.shop_a)
        self.assertEqual(self.registry.find_by_domain('www.shop-a.test'), self.shop_a)
        self.assertEqual(self.registry.find_by_domain('shop-b.test'), self.shop_b)

    def test_find_by_domain_is_case_insensitive(self):
        self.assertEqual(self.registry.find_by_domain('SHOP-A.test'), self.shop_a)

    def test_find_by_domain_no_subdomain_matching(self):
        self.assertIsNone(self.registry.find_by_domain('eu.shop-a.test'))
        self.assertIsNone(self.registry.find_by_domain('shop-a'))

    def test_find_by_domain_unknown_or_empty(self):
        self.assertIsNone(self.registry.find_by_domain('unknown.test'))
        self.assertIsNone(self.registry.find_by_domain(''))

    def test_inactive_domain_and_inactive_tenant_are_ignored(self):
        TenantDomain.objects.filter(host='shop-b.test').update(is_active=False)
        self.assertIsNone(self.registry.find_by_domain('shop-b.test'))

        make_tenant('closed', hosts=['closed.test'], is_active=False)
        self.assertIsNone(self.registry.find_by_domain('closed.test'))

    def test_find_default(self):
        self.assertEqual(self.registry.find_default(), self.main)

    def test_find_default_none_when_not_configured(self):
        Tenant.objects.update(is_default=False)
        self.assertIsNone(self.registry.find_default())


@override_settings(ALLOWED_HOSTS=['*'])
class TenantResolverTests(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.shop_a = make_tenant('shop_a', hosts=['shop-a.test'])
        cls.main = make_tenant('main', is_default=True)

    def setUp(self):
        self.factory = RequestFactory()
        self.resolver = TenantResolver()

    def test_known_host_resolves_its_tenant(self):
        request = self.factory.get('/', HTTP_HOST='shop-a.test')
        self.assertEqual(self.resolver.resolve(request), self.shop_a)

    def test_port_is_ignored(self):
        request = self.factory.get('/', HTTP_HOST='shop-a.test:8000')
        self.assertEqual(self.resolver.resolve(request), self.shop_a)

    def test_ipv6_host_keeps_address(self):
        request = self.factory.get('/', HTTP_HOST='[::1]:8000')
        self.assertEqual(get_request_host(request), '[::1]')

        local = make_tenant('local', hosts=['[::1]'])
        request = self.factory.get('/', HTTP_HOST='[::1]:8000')
        self.assertEqual(self.resolver.resolve(request), local)

    def test_host_is_lowercased_without_trailing_dot(self):
        request = self.factory.get('/', HTTP_HOST='Shop-A.test.:443')
        self.assertEqual(get_request_host(request), 'shop-a.test')
        self.assertEqual(self.resolver.resolve(request), self.shop_a)

    def test_unknown_host_falls_back_to_default(self):
        request = self.factory.get('/', HTTP_HOST='unknown.test')
        self.assertEqual(self.resolver.resolve(request), self.main)

    def test_unknown_host_without_default_is_none(self):
        Tenant.objects.update(is_default=False)
        request = self.factory.get('/', HTTP_HOST='unknown.test')
        self.assertIsNone(self.resolver.resolve(request))

    def test_result_is_memoized_per_request(self):
        request = self.factory.get('/', HTTP_HOST='shop-a.test')
        with self.assertNumQueries(1):
            first = self.resolver.resolve(request)
        with self.assertNumQueries(0):
            second = self.resolver.resolve(request)
            third = resolve_tenant(request)
        self.assertIs(first, second)
        self.assertIs(first, third)

    def test_none_result_is_memoized_too(self):
        registry = MagicMock()
        registry.find_by_domain.return_value = None
        registry.find_default.return_value = None
        resolver = TenantResolver(registry=registry)
        request = self.factory.get('/', HTTP_HOST='nowhere.test')

        self.assertIsNone(resolver.resolve(request))
        self.assertIsNone(resolver.resolve(request))
        registry.find_by_domain.assert_called_once_with('nowhere.test')
        registry.find_default.assert_called_once_with()

    def test_default_not_queried_when_host_matches(self):
        registry = MagicMock()
        registry.find_by_domain.return_value = self.shop_a
        resolver = TenantResolver(registry=registry)

        resolver.resolve(self.factory.get('/', HTTP_HOST='shop-a.test'))
        registry.find_default.assert_not_called()

    def test_memo_does_not_leak_between_requests(self):
        first = self.factory.get('/', HTTP_HOST='shop-a.test')
        self.assertEqual(self.resolver.resolve(first), self.shop_a)

        TenantDomain.objects.filter(host='shop-a.test').delete()
        second = self.factory.get('/', HTTP_HOST='shop-a.test')
        self.assertEqual(self.resolver.resolve(second), self.main)
        # Первый запрос по-прежнему видит свой результат
        self.assertEqual(self.resolver.resolve(first), self.shop_a)


class TenantContextTests(SimpleTestCase):
    """contextvars-based tenant context."""

    def test_default_is_none(self):
        self.assertIsNone(get_current_tenant())

    def test_set_and_reset_by_token(self):
        tenant = MagicMock(name='tenant')
        token = set_current_tenant(tenant)
        self.assertIs(get_current_tenant(), tenant)
        clear_current_tenant(token)
        self.assertIsNone(get_current_tenant())

    def test_clear_without_token(self):
        set_current_tenant(MagicMock())
        clear_current_tenant()
        self.assertIsNone(get_current_tenant())


@override_settings(ALLOWED_HOSTS=['*'])
class TenantMiddlewareTests(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.shop_a = make_tenant('shop_a', hosts=['shop-a.test'])

    def setUp(self):
        self.factory = RequestFactory()
        self.seen = {}

        def view(request):
            self.seen['tenant'] = request.tenant
            self.seen['context'] = get_current_tenant()
            return HttpResponse('ok')

        self.middleware = TenantMiddleware(view)

    def test_sets_request_tenant_and_context(self):
        response = self.middleware(self.factory.get('/', HTTP_HOST='shop-a.test'))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.seen['tenant'], self.shop_a)
        self.assertEqual(self.seen['context'], self.shop_a)
        # После ответа context очищен
        self.assertIsNone(get_current_tenant())

    def test_unresolved_tenant_does_not_fail_request(self):
        response = self.middleware(self.factory.get('/', HTTP_HOST='unknown.test'))

        self.assertEqual(response.status_code, 200)
        self.assertIsNone(self.seen['tenant'])

    def test_context_cleared_when_view_raises(self):
        def failing_view(request):
            raise RuntimeError('boom')

        middleware = TenantMiddleware(failing_view)
        with self.assertRaises(RuntimeError):
            middleware(self.factory.get('/', HTTP_HOST='shop-a.test'))
        self.assertIsNone(get_current_tenant())

    def test_health_endpoint_reports_tenant(self):
        response = self.client.get('/api/health/', HTTP_HOST='shop-a.test')
        self.assertEqual(response.json()['tenant'], 'shop_a')


LAYOUTS = {
    'layouts/application.html': 'GLOBAL',
    'layouts/shop_a/application.html': 'SHOP A',
    'layouts/shop_a/application.xhtml': 'SHOP A XHTML',
    'layouts/custom/special.html': 'CUSTOM',
    'layouts/application.json': '{"layout": "global"}',
}

LOCMEM_TEMPLATES = [{
    'BACKEND': 'django.template.backends.django.DjangoTemplates',
    'DIRS': [],
    'APP_DIRS': False,
    'OPTIONS': {
        'loaders': [('django.template.loaders.locmem.Loader', LAYOUTS)],
    },
}]


@override_settings(TEMPLATES=LOCMEM_TEMPLATES)
class TemplatePathStrategyTests(SimpleTestCase):

    def setUp(self):
        self.config = StorefrontConfig()
        self.shop_a = Tenant(name='Shop A', code='Shop_A')
        self.shop_b = Tenant(name='Shop B', code='shop_b')

    def render(self, template):
        return template.render({})

    def test_tenant_layout_directory_uses_lowercased_code(self):
        strategy = TemplatePathStrategy(self.config, self.shop_a)
        self.assertEqual(strategy.candidate_path('application'), 'layouts/shop_a/application')
        self.assertEqual(self.render(strategy.resolve_layout_template('application', 'html')), 'SHOP A')

    def test_without_tenant_uses_global_directory(self):
        strategy = TemplatePathStrategy(self.config, None)
        self.assertEqual(strategy.candidate_path('application'), 'layouts/application')
        self.assertEqual(self.render(strategy.resolve_layout_template('application', 'html')), 'GLOBAL')

    def test_explicit_layout_paths_are_used_verbatim(self):
        strategy = TemplatePathStrategy(self.config, self.shop_a)
        self.assertEqual(strategy.candidate_path('/srv/themes/application'), '/srv/themes/application')
        self.assertEqual(strategy.candidate_path('layouts/custom/special'), 'layouts/custom/special')
        self.assertEqual(self.render(strategy.resolve_layout_template('layouts/custom/special', 'html')), 'CUSTOM')

    def test_missing_html_layout_raises(self):
        strategy = TemplatePathStrategy(self.config, self.shop_b)
        with self.assertRaises(TemplateDoesNotExist):
            strategy.resolve_layout_template('application', 'html')

    def test_missing_xhtml_layout_raises(self):
        strategy = TemplatePathStrategy(self.config, self.shop_b)
        with self.assertRaises(TemplateDoesNotExist):
            strategy.resolve_layout_template('application', 'xhtml')

    def test_missing_non_html_layout_returns_none(self):
        strategy = TemplatePathStrategy(self.config, self.shop_b)
        self.assertIsNone(strategy.resolve_layout_template('application', 'json'))
        self.assertIsNone(strategy.resolve_layout_template('application', 'xml'))

    def test_existing_non_html_layout_is_returned(self):
        strategy = TemplatePathStrategy(self.config, None)
        template = strategy.resolve_layout_template('application', 'json')
        self.assertEqual(self.render(template), '{"layout": "global"}')

    def test_custom_layouts_dir(self):
        config = StorefrontConfig(layouts_dir='themes')
        strategy = TemplatePathStrategy(config, self.shop_a)
        self.assertEqual(strategy.candidate_path('application'), 'themes/shop_a/application')
        self.assertEqual(strategy.candidate_path('themes/x/y'), 'themes/x/y')

    def test_is_html_format(self):
        for fmt in ('html', 'htm', 'xhtml'):
            self.assertTrue(is_html_format(fmt), fmt)
        for fmt in ('json', 'xml', 'txt', 'js'):
            self.assertFalse(is_html_format(fmt), fmt)


class _LayoutPage(TenantLayoutMixin, TemplateView):
    template_name = 'unused.html'


@override_settings(TEMPLATES=LOCMEM_TEMPLATES)
class TenantLayoutMixinTests(SimpleTestCase):

    def _view(self, tenant):
        request = RequestFactory().get('/')
        request.tenant = tenant
        view = _LayoutPage()
        view.setup(request)
        return view

    def test_tenant_layout_is_used(self):
        view = self._view(Tenant(name='Shop A', code='shop_a'))
        self.assertEqual(view.get_layout_template().render({}), 'SHOP A')

    def test_falls_back_to_global_layout(self):
        view = self._view(Tenant(name='Shop B', code='shop_b'))
        self.assertEqual(view.get_layout_template().render({}), 'GLOBAL')

    def test_layout_in_context(self):
        view = self._view(None)
        context = view.get_context_data()
        self.assertEqual(context['layout_template'].render({}), 'GLOBAL')


class TenantChecksTests(TestCase):

    @override_settings(MIDDLEWARE=['django.middleware.common.CommonMiddleware'])
    def test_missing_middleware_warns(self):
        warnings = check_tenant_middleware_installed(None)
        self.assertEqual([w.id for w in warnings], ['tenants.W001'])

    def test_middleware_installed(self):
        self.assertEqual(check_tenant_middleware_installed(None), [])

    def test_several_default_tenants_warn(self):
        make_tenant('one', is_default=True)
        make_tenant('two', is_default=True)
        warnings = check_single_default_tenant(None, databases=['default'])
        self.assertEqual([w.id for w in warnings], ['tenants.W002'])

    def test_default_check_skipped_without_databases(self):
        make_tenant('one', is_default=True)
        make_tenant('two', is_default=True)
        self.assertEqual(check_single_default_tenant(None), [])
