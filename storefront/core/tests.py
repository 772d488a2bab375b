from django.test import SimpleTestCase, TestCase, override_settings

from core.config import StorefrontConfig, get_storefront_config
from tenants.models import Tenant, TenantDomain


class StorefrontConfigTests(SimpleTestCase):

    @override_settings(STOREFRONT={})
    def test_defaults(self):
        self.assertEqual(get_storefront_config(), StorefrontConfig())

    @override_settings(STOREFRONT={'PRODUCTS_PER_PAGE': '24', 'MAX_PER_PAGE': '50', 'LAYOUTS_DIR': '/themes/'})
    def test_values_from_settings(self):
        config = get_storefront_config()
        self.assertEqual(config.products_per_page, 24)
        self.assertEqual(config.max_per_page, 50)
        self.assertEqual(config.layouts_dir, 'themes')
        self.assertEqual(config.default_layout, 'application')

    def test_config_is_frozen(self):
        config = StorefrontConfig()
        with self.assertRaises(AttributeError):
            config.products_per_page = 5


@override_settings(ALLOWED_HOSTS=['*'])
class RequestMetricsMiddlewareTests(TestCase):

    @classmethod
    def setUpTestData(cls):
        tenant = Tenant.objects.create(name='Shop A', code='shop_a')
        TenantDomain.objects.create(tenant=tenant, host='shop-a.test')

    def test_logs_request_with_tenant(self):
        with self.assertLogs('request_metrics', level='INFO') as logs:
            response = self.client.get('/api/health/', HTTP_HOST='shop-a.test')

        self.assertEqual(response.status_code, 200)
        self.assertIn('X-Request-Duration', response)
        self.assertIn('path=/api/health/', logs.output[0])
        self.assertIn('tenant=shop_a', logs.output[0])

    def test_unknown_host_logged_without_tenant(self):
        with self.assertLogs('request_metrics', level='INFO') as logs:
            self.client.get('/api/health/', HTTP_HOST='unknown.test')
        self.assertIn('tenant=-', logs.output[0])
