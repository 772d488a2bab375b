"""
Тесты выбора трекера аналитики.
"""
from django.test import RequestFactory, TestCase, override_settings

from analytics.context_processors import analytics_tracker
from analytics.models import Tracker
from analytics.selectors import current_tracker
from tenants.models import Tenant


class CurrentTrackerTests(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.shop_a = Tenant.objects.create(name='Shop A', code='shop_a')
        cls.shop_b = Tenant.objects.create(name='Shop B', code='shop_b')
        cls.a_prod = Tracker.objects.create(tenant=cls.shop_a, analytics_id='G-A-PROD', environment='production')
        cls.a_dev = Tracker.objects.create(tenant=cls.shop_a, analytics_id='G-A-DEV', environment='development')
        cls.b_prod = Tracker.objects.create(tenant=cls.shop_b, analytics_id='G-B-PROD', environment='production')

    def test_tracker_for_site_and_environment(self):
        self.assertEqual(current_tracker('production', 'Shop A'), self.a_prod)
        self.assertEqual(current_tracker('development', 'Shop A'), self.a_dev)
        self.assertEqual(current_tracker('production', 'Shop B'), self.b_prod)

    def test_unknown_site_or_environment_is_none(self):
        self.assertIsNone(current_tracker('production', 'Shop C'))
        self.assertIsNone(current_tracker('staging', 'Shop A'))
        self.assertIsNone(current_tracker('development', 'Shop B'))

    def test_inactive_tracker_is_ignored(self):
        Tracker.objects.filter(pk=self.b_prod.pk).update(is_active=False)
        self.assertIsNone(current_tracker('production', 'Shop B'))

    def test_trackers_for_tenant(self):
        self.assertEqual(set(Tracker.objects.for_tenant(self.shop_a)), {self.a_prod, self.a_dev})


class AnalyticsContextProcessorTests(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.shop_a = Tenant.objects.create(name='Shop A', code='shop_a')
        cls.shop_b = Tenant.objects.create(name='Shop B', code='shop_b')
        cls.a_prod = Tracker.objects.create(tenant=cls.shop_a, analytics_id='G-A-PROD', environment='production')
        cls.b_prod = Tracker.objects.create(tenant=cls.shop_b, analytics_id='G-B-PROD', environment='production')

    def make_request(self, tenant=None):
        request = RequestFactory().get('/')
        request.tenant = tenant
        return request

    @override_settings(STOREFRONT={'ENVIRONMENT': 'production', 'SITE_NAME': 'Shop A'})
    def test_site_name_from_settings(self):
        context = analytics_tracker(self.make_request(self.shop_b))
        self.assertEqual(context['analytics_tracker'](), self.a_prod)

    @override_settings(STOREFRONT={'ENVIRONMENT': 'production', 'SITE_NAME': ''})
    def test_falls_back_to_request_tenant_name(self):
        context = analytics_tracker(self.make_request(self.shop_b))
        self.assertEqual(context['analytics_tracker'](), self.b_prod)

    @override_settings(STOREFRONT={'ENVIRONMENT': 'production', 'SITE_NAME': ''})
    def test_no_site_no_tracker(self):
        context = analytics_tracker(self.make_request())
        self.assertIsNone(context['analytics_tracker']())

    @override_settings(STOREFRONT={'ENVIRONMENT': 'staging', 'SITE_NAME': 'Shop A'})
    def test_lazy_lookup(self):
        with self.assertNumQueries(0):
            context = analytics_tracker(self.make_request(self.shop_a))
        self.assertIsNone(context['analytics_tracker']())

    @override_settings(
        ALLOWED_HOSTS=['*'],
        STOREFRONT={'ENVIRONMENT': 'production', 'SITE_NAME': 'Shop A'},
    )
    def test_snippet_rendered_in_layout(self):
        response = self.client.get('/products/')
        self.assertContains(response, 'G-A-PROD')
