"""
Тесты текущего заказа и его привязки к магазину.

Запуск: python manage.py test orders -v2
"""
from unittest.mock import MagicMock

from django.contrib.auth.models import AnonymousUser
from django.contrib.sessions.backends.db import SessionStore
from django.test import RequestFactory, TestCase, override_settings
from rest_framework.test import APIClient

from orders.current import SESSION_KEY, bind_tenant, current_order, get_current_order
from orders.models import Order
from tenants.models import Tenant, TenantDomain


def make_tenant(code, host, is_default=False):
    tenant = Tenant.objects.create(name=code.title(), code=code, is_default=is_default)
    TenantDomain.objects.create(tenant=tenant, host=host)
    return tenant


@override_settings(ALLOWED_HOSTS=['*'])
class CurrentOrderTests(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.shop_a = make_tenant('shop_a', 'shop-a.test')
        cls.shop_b = make_tenant('shop_b', 'shop-b.test')

    def make_request(self, host='shop-a.test', session=None):
        request = RequestFactory().get('/', HTTP_HOST=host)
        request.session = session if session is not None else SessionStore()
        request.user = AnonymousUser()
        return request

    def test_no_order_without_create(self):
        self.assertIsNone(current_order(self.make_request()))
        self.assertEqual(Order.objects.count(), 0)

    def test_create_stores_order_in_session(self):
        request = self.make_request()
        order = current_order(request, create_order_if_necessary=True)
        self.assertEqual(request.session[SESSION_KEY], order.pk)
        self.assertEqual(order.state, Order.STATE_CART)
        self.assertTrue(order.number.startswith('R'))

    def test_order_is_found_from_session(self):
        first = self.make_request()
        order = current_order(first, create_order_if_necessary=True)
        second = self.make_request(session=first.session)
        self.assertEqual(current_order(second), order)

    def test_complete_order_is_not_current(self):
        first = self.make_request()
        order = current_order(first, create_order_if_necessary=True)
        Order.objects.filter(pk=order.pk).update(state=Order.STATE_COMPLETE)
        self.assertIsNone(current_order(self.make_request(session=first.session)))

    def test_result_is_memoized_on_request(self):
        request = self.make_request()
        order = current_order(request, create_order_if_necessary=True)
        with self.assertNumQueries(0):
            self.assertIs(current_order(request), order)

    def test_get_current_order_binds_tenant(self):
        order = get_current_order(self.make_request('shop-a.test'), create_order_if_necessary=True)
        order.refresh_from_db()
        self.assertEqual(order.tenant, self.shop_a)

    def test_bound_tenant_is_never_overridden(self):
        first = self.make_request('shop-a.test')
        order = get_current_order(first, create_order_if_necessary=True)

        second = self.make_request('shop-b.test', session=first.session)
        again = get_current_order(second)
        self.assertEqual(again.pk, order.pk)
        again.refresh_from_db()
        self.assertEqual(again.tenant, self.shop_a)

    def test_order_stays_unbound_without_tenant(self):
        order = get_current_order(self.make_request('unknown.test'), create_order_if_necessary=True)
        order.refresh_from_db()
        self.assertIsNone(order.tenant)

    def test_unbound_order_is_bound_later(self):
        first = self.make_request('unknown.test')
        order = get_current_order(first, create_order_if_necessary=True)
        get_current_order(self.make_request('shop-b.test', session=first.session))
        order.refresh_from_db()
        self.assertEqual(order.tenant, self.shop_b)

    def test_bind_saves_only_tenant_column(self):
        order = MagicMock(tenant_id=None)
        accessor = MagicMock(return_value=order)
        result = bind_tenant(accessor)(self.make_request('shop-a.test'), True)

        self.assertIs(result, order)
        accessor.assert_called_once()
        self.assertEqual(order.tenant, self.shop_a)
        order.save.assert_called_once_with(update_fields=['tenant'])

    def test_bind_skips_missing_order(self):
        accessor = MagicMock(return_value=None)
        self.assertIsNone(bind_tenant(accessor)(self.make_request()))

    def test_bind_keeps_wrapped_name(self):
        self.assertEqual(get_current_order.__name__, 'current_order')


@override_settings(ALLOWED_HOSTS=['*'])
class CurrentOrderApiTests(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.shop_a = make_tenant('shop_a', 'shop-a.test')
        cls.shop_b = make_tenant('shop_b', 'shop-b.test')

    def setUp(self):
        self.client = APIClient()

    def test_get_without_cart_is_404(self):
        response = self.client.get('/api/orders/current/', HTTP_HOST='shop-a.test')
        self.assertEqual(response.status_code, 404)

    def test_post_creates_cart_bound_to_store(self):
        response = self.client.post('/api/orders/current/', HTTP_HOST='shop-a.test')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['tenant'], 'shop_a')
        self.assertEqual(response.data['state'], 'cart')

    def test_cart_created_in_one_store_keeps_it(self):
        created = self.client.post('/api/orders/current/', HTTP_HOST='shop-a.test')
        response = self.client.get('/api/orders/current/', HTTP_HOST='shop-b.test')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['number'], created.data['number'])
        self.assertEqual(response.data['tenant'], 'shop_a')

    def test_orders_for_tenant(self):
        self.client.post('/api/orders/current/', HTTP_HOST='shop-a.test')
        Order.objects.create()
        self.assertEqual(Order.objects.for_tenant(self.shop_a).count(), 1)
        self.assertEqual(Order.objects.for_tenant(self.shop_b).count(), 0)
        self.assertEqual(Order.objects.for_tenant(None).count(), 2)
