"""
Тесты поиска товаров (SearchPipeline) и API/страниц каталога.

Запуск: python manage.py test catalog.tests_search -v2
"""
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.db import DatabaseError
from django.http import QueryDict
from django.test import TestCase, override_settings
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

from catalog.models import Product, ProductGroup, Taxon, Taxonomy
from catalog.search import BaseSearchProvider, BasicSearchProvider, PagedResult, SearchPipeline
from catalog.serializers import AdminProductSerializer
from catalog.tests import make_product, make_tenant
from catalog.views import search_params_from_query
from core.config import StorefrontConfig

User = get_user_model()


class RecordingProvider(BaseSearchProvider):
    """Запоминает параметры, переданные в prepare()."""

    def __init__(self, manage_pagination=False):
        self.manage_pagination = manage_pagination
        self.prepared = None

    def prepare(self, params):
        self.prepared = dict(params)


def permalinks(result):
    return {p.permalink for p in result.items}


class StoreScenarioMixin:
    """
    shop_a: p1, p2; shop_b: p4; p3 — глобальный.
    """

    @classmethod
    def setUpTestData(cls):
        cls.shop_a = make_tenant('shop_a', hosts=['shop-a.test'])
        cls.shop_b = make_tenant('shop_b', hosts=['shop-b.test'])
        cls.p1 = make_product('p1', tenants=[cls.shop_a], name='Red shirt', price='20.00')
        cls.p2 = make_product('p2', tenants=[cls.shop_a], name='Blue shirt', price='25.00')
        cls.p3 = make_product('p3', name='Coffee mug', price='5.00')
        cls.p4 = make_product('p4', tenants=[cls.shop_b], name='Green shirt', price='30.00')


class SearchPipelineTenantTests(StoreScenarioMixin, TestCase):

    def setUp(self):
        self.pipeline = SearchPipeline(StorefrontConfig(), provider=RecordingProvider())

    def test_tenant_a_sees_own_and_global(self):
        result, total = self.pipeline.search({}, tenant=self.shop_a)
        self.assertEqual(permalinks(result), {'p1', 'p2', 'p3'})
        self.assertEqual(total, 3)

    def test_tenant_b_sees_own_and_global(self):
        result, total = self.pipeline.search({}, tenant=self.shop_b)
        self.assertEqual(permalinks(result), {'p3', 'p4'})
        self.assertEqual(total, 2)

    def test_without_tenant_no_store_filter(self):
        result, total = self.pipeline.search({})
        self.assertEqual(permalinks(result), {'p1', 'p2', 'p3', 'p4'})
        self.assertEqual(total, 4)

    def test_results_are_visible_in_store(self):
        for tenant in (self.shop_a, self.shop_b):
            result, _ = self.pipeline.search({'per_page': 50}, tenant=tenant)
            for product in result.items:
                tenant_ids = {t.pk for t in product.tenants.all()}
                self.assertTrue(not tenant_ids or tenant.pk in tenant_ids)

    def test_inactive_products_are_excluded(self):
        Product.objects.filter(pk=self.p1.pk).update(deleted_at=timezone.now())
        result, _ = self.pipeline.search({}, tenant=self.shop_a)
        self.assertEqual(permalinks(result), {'p2', 'p3'})


class SearchPipelinePaginationTests(StoreScenarioMixin, TestCase):

    def search(self, params, **config):
        provider = RecordingProvider()
        pipeline = SearchPipeline(StorefrontConfig(**config), provider=provider)
        result, total = pipeline.search(params)
        return pipeline, provider, result, total

    def test_per_page_defaults_from_config(self):
        for value in (None, '', '0', 0, -5, 'abc'):
            params = {} if value is None else {'per_page': value}
            pipeline, _, result, _ = self.search(params, products_per_page=3)
            self.assertEqual(pipeline.params['per_page'], 3, value)
            self.assertEqual(result.per_page, 3)

    def test_per_page_from_params(self):
        pipeline, _, result, _ = self.search({'per_page': '25'})
        self.assertEqual(pipeline.params['per_page'], 25)
        self.assertEqual(result.per_page, 25)

    def test_page_defaults_to_first(self):
        for value in (None, '-1', 0, 'abc'):
            params = {} if value is None else {'page': value}
            pipeline, _, result, _ = self.search(params)
            self.assertEqual(pipeline.params['page'], 1, value)
            self.assertEqual(result.page, 1)

    def test_page_from_params(self):
        pipeline, _, result, _ = self.search({'page': '3', 'per_page': '1'})
        self.assertEqual(pipeline.params['page'], 3)
        self.assertEqual(result.page, 3)
        self.assertEqual(len(result.items), 1)

    def test_provider_receives_normalized_params(self):
        _, provider, _, _ = self.search({'page': '2', 'per_page': 'x', 'keywords': 'shirt'}, products_per_page=2)
        self.assertEqual(provider.prepared['page'], 2)
        self.assertEqual(provider.prepared['per_page'], 2)
        self.assertEqual(provider.prepared['keywords'], 'shirt')

    def test_provider_managed_pagination_always_reads_first_page(self):
        provider = RecordingProvider(manage_pagination=True)
        pipeline = SearchPipeline(StorefrontConfig(), provider=provider)
        result, total = pipeline.search({'page': '3', 'per_page': '2'})
        self.assertEqual(result.page, 1)
        self.assertEqual(len(result.items), 2)
        self.assertEqual(total, 4)
        self.assertEqual(provider.prepared['page'], 3)

    def test_count_is_independent_of_page(self):
        counts = set()
        seen = []
        for page in (1, 2, 3):
            _, _, result, total = self.search({'page': page, 'per_page': 2})
            counts.add(total)
            self.assertEqual(result.total_count, total)
            seen.extend(p.permalink for p in result.items)
        self.assertEqual(counts, {4})
        self.assertEqual(sorted(seen), ['p1', 'p2', 'p3', 'p4'])

    def test_equal_names_are_paged_without_repeats(self):
        self.assertEqual(Product._meta.ordering, ['name', 'pk'])
        for index in range(5):
            make_product(f'same-{index}', name='Same name')
        seen = []
        for page in range(1, 5):
            _, _, result, _ = self.search({'keywords': 'same', 'page': page, 'per_page': 2})
            seen.extend(p.permalink for p in result.items)
        self.assertEqual(sorted(seen), [f'same-{index}' for index in range(5)])

    def test_page_past_the_end_is_empty(self):
        _, _, result, total = self.search({'page': 10})
        self.assertEqual(result.items, [])
        self.assertEqual(total, 4)

    def test_huge_page_is_empty_not_an_error(self):
        pipeline, _, result, total = self.search({'page': '99999999999999999999'})
        self.assertEqual(pipeline.params['page'], 99999999999999999999)
        self.assertEqual(result.items, [])
        self.assertEqual(total, 4)

    def test_per_page_above_limit_falls_back_to_default(self):
        for value in ('99999999999999999999', '101'):
            pipeline, _, result, total = self.search({'per_page': value}, products_per_page=3)
            self.assertEqual(pipeline.params['per_page'], 3, value)
            self.assertEqual(len(result.items), 3)
            self.assertEqual(total, 4)

    def test_per_page_at_limit_is_kept(self):
        pipeline, _, result, _ = self.search({'per_page': '100'})
        self.assertEqual(pipeline.params['per_page'], 100)
        self.assertEqual(len(result.items), 4)

    @override_settings(ALLOWED_HOSTS=['*'])
    def test_huge_numbers_through_api(self):
        response = APIClient().get(
            '/api/products/',
            {'page': '99999999999999999999', 'per_page': '99999999999999999999'},
            HTTP_HOST='shop-a.test',
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['results'], [])
        self.assertEqual(response.data['count'], 3)

    def test_num_pages(self):
        self.assertEqual(PagedResult(items=[], page=1, per_page=2, total_count=5).num_pages, 3)
        self.assertEqual(PagedResult(items=[], page=1, per_page=2, total_count=0).num_pages, 1)

    def test_default_provider_from_config(self):
        pipeline = SearchPipeline(StorefrontConfig())
        self.assertIsInstance(pipeline.provider, BasicSearchProvider)
        pipeline.search({'keywords': 'mug'})
        self.assertEqual(pipeline.provider.properties['keywords'], 'mug')


class SearchPipelineFilterTests(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.shop_a = make_tenant('shop_a')
        cls.shop_b = make_tenant('shop_b')

        taxonomy = Taxonomy.objects.create(name='Категории', tenant=cls.shop_a)
        cls.clothing = Taxon.objects.create(taxonomy=taxonomy, name='Одежда', permalink='clothing')
        cls.shirts = Taxon.objects.create(taxonomy=taxonomy, parent=cls.clothing, name='Рубашки', permalink='shirts')
        cls.mugs = Taxon.objects.create(taxonomy=taxonomy, name='Кружки', permalink='mugs')

        make_product('red-shirt', tenants=[cls.shop_a], taxons=[cls.shirts], name='Red shirt', price='20.00')
        make_product('blue-shirt', taxons=[cls.shirts], name='Blue shirt', price='10.00')
        make_product('wool-coat', taxons=[cls.clothing], name='Wool coat', price='90.00', description='warm')
        make_product('mug', taxons=[cls.mugs], name='Mug', price='5.00')
        make_product('old-shirt', taxons=[cls.shirts], name='Old shirt', count_on_hand=0, price='1.00')
        make_product('b-shirt', tenants=[cls.shop_b], taxons=[cls.shirts], name='B shirt', price='15.00')

    def search(self, params, tenant=None, taxon=None, **config):
        pipeline = SearchPipeline(StorefrontConfig(**config), provider=RecordingProvider())
        result, total = pipeline.search(dict(params, per_page=50), tenant=tenant, taxon=taxon)
        return pipeline, result, total

    def test_taxon_by_id_includes_descendants(self):
        pipeline, result, _ = self.search({'taxon': str(self.clothing.pk)}, tenant=self.shop_a)
        self.assertEqual(pipeline.taxon, self.clothing)
        self.assertEqual(permalinks(result), {'red-shirt', 'blue-shirt', 'wool-coat'})

    def test_bound_taxon_is_reinjected_into_params(self):
        pipeline, result, _ = self.search({'taxon': 'ignored'}, tenant=self.shop_a, taxon=self.shirts)
        self.assertEqual(pipeline.params['taxon'], self.shirts.pk)
        self.assertEqual(permalinks(result), {'red-shirt', 'blue-shirt'})

    def test_unknown_or_garbage_taxon_means_no_taxon(self):
        for value in ('999999', 'abc', ''):
            pipeline, _, total = self.search({'taxon': value}, tenant=self.shop_a)
            self.assertIsNone(pipeline.taxon)
            self.assertEqual(total, 4)

    def test_keywords(self):
        pipeline, result, _ = self.search({'keywords': 'warm mug'})
        self.assertEqual(pipeline.keywords, 'warm mug')
        self.assertEqual(permalinks(result), {'wool-coat', 'mug'})

    def test_zero_stock_hidden_by_default(self):
        _, result, _ = self.search({})
        self.assertNotIn('old-shirt', permalinks(result))

    def test_zero_stock_shown_when_configured(self):
        _, result, _ = self.search({}, show_zero_stock_products=True)
        self.assertIn('old-shirt', permalinks(result))

    def test_adding_filters_never_grows_result(self):
        steps = [
            {},
            {'taxon': str(self.clothing.pk)},
            {'taxon': str(self.clothing.pk), 'keywords': 'shirt'},
            {'taxon': str(self.clothing.pk), 'keywords': 'shirt', 'search': {'master_price_gte': '15'}},
        ]
        for tenant in (None, self.shop_a, self.shop_b):
            previous = None
            for params in steps:
                _, result, total = self.search(params, tenant=tenant)
                ids = permalinks(result)
                if previous is not None:
                    self.assertTrue(ids <= previous, (tenant, params))
                previous = ids

    def test_order_by_price_builds_route_group(self):
        pipeline, result, _ = self.search({'order_by_price': 'descend'}, tenant=self.shop_a)
        self.assertEqual(pipeline.product_group.order_scope, 'descend_by_master_price')
        self.assertEqual(
            [p.permalink for p in result.items],
            ['wool-coat', 'red-shirt', 'blue-shirt', 'mug'],
        )

    def test_order_by_price_wins_over_group_name(self):
        ProductGroup.objects.create(name='Кружки', permalink='mugs-group',
                                    product_scopes=[{'name': 'name_contains', 'arguments': ['mug']}])
        pipeline, _, total = self.search({'order_by_price': 'ascend', 'product_group_name': 'mugs-group'})
        self.assertIsNone(pipeline.cached_product_group)
        self.assertEqual(total, 5)

    def test_product_group_name_uses_cached_group(self):
        group = ProductGroup.objects.create(
            name='Рубашки', permalink='shirts-group',
            product_scopes=[{'name': 'name_contains', 'arguments': ['shirt']}],
        )
        pipeline, result, _ = self.search({'product_group_name': 'shirts-group'}, tenant=self.shop_a)
        self.assertEqual(pipeline.cached_product_group, group)
        self.assertEqual(pipeline.product_group.product_scopes, [])
        self.assertEqual(permalinks(result), {'red-shirt', 'blue-shirt'})

    def test_unknown_product_group_name_is_ignored(self):
        pipeline, _, total = self.search({'product_group_name': 'missing'}, tenant=self.shop_a)
        self.assertIsNone(pipeline.cached_product_group)
        self.assertEqual(total, 4)

    def test_product_group_query_route(self):
        pipeline, result, _ = self.search(
            {'product_group_query': ['name_contains', 'shirt', 'ascend_by_master_price']},
        )
        self.assertEqual(pipeline.product_group.order_scope, 'ascend_by_master_price')
        self.assertEqual([p.permalink for p in result.items], ['blue-shirt', 'b-shirt', 'red-shirt'])

    def test_product_group_query_as_path(self):
        _, result, _ = self.search({'product_group_query': 'name_contains/coat'})
        self.assertEqual(permalinks(result), {'wool-coat'})

    def test_search_refines_group(self):
        pipeline, result, _ = self.search(
            {'product_group_query': 'name_contains/shirt', 'search': {'name_contains': 'red'}},
        )
        self.assertEqual(len(pipeline.product_group.product_scopes), 2)
        self.assertEqual(permalinks(result), {'red-shirt'})

    def test_group_does_not_override_tenant_scope(self):
        _, result, _ = self.search({'product_group_query': 'name_contains/shirt'}, tenant=self.shop_b)
        self.assertEqual(permalinks(result), {'blue-shirt', 'b-shirt'})

    def test_products_scope_is_kept_on_pipeline(self):
        pipeline, _, total = self.search({'keywords': 'shirt'})
        self.assertEqual(pipeline.products_scope.count(), total)


class SearchParamsFromQueryTests(TestCase):

    def test_nested_search_and_route_list(self):
        query = QueryDict(
            'keywords=mug&search[name_contains]=red&search[order]=ascend_by_name'
            '&product_group_query=name_contains&product_group_query=shirt'
        )
        params = search_params_from_query(query)
        self.assertEqual(params['keywords'], 'mug')
        self.assertEqual(params['search'], {'name_contains': 'red', 'order': 'ascend_by_name'})
        self.assertEqual(params['product_group_query'], ['name_contains', 'shirt'])

    def test_single_route_value_stays_string(self):
        params = search_params_from_query(QueryDict('product_group_query=name_contains/shirt'))
        self.assertEqual(params['product_group_query'], 'name_contains/shirt')
        self.assertNotIn('search', params)


@override_settings(ALLOWED_HOSTS=['*'])
class CatalogApiTests(StoreScenarioMixin, TestCase):

    def setUp(self):
        self.client = APIClient()

    def get(self, url, host, **params):
        return self.client.get(url, params, HTTP_HOST=host)

    def test_search_is_scoped_by_host(self):
        response = self.get('/api/products/', 'shop-a.test')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 3)
        self.assertEqual({p['permalink'] for p in response.data['results']}, {'p1', 'p2', 'p3'})

        response = self.get('/api/products/', 'shop-b.test')
        self.assertEqual({p['permalink'] for p in response.data['results']}, {'p3', 'p4'})

    def test_search_pagination_payload(self):
        response = self.get('/api/products/', 'shop-a.test', per_page=2, page=2)
        self.assertEqual(response.data['page'], 2)
        self.assertEqual(response.data['per_page'], 2)
        self.assertEqual(response.data['num_pages'], 2)
        self.assertEqual(len(response.data['results']), 1)

    def test_search_result_fields(self):
        response = self.get('/api/products/', 'shop-a.test', keywords='mug')
        item = response.data['results'][0]
        self.assertEqual(item['permalink'], 'p3')
        self.assertEqual(item['price'], '5.00')
        self.assertTrue(item['in_stock'])
        self.assertEqual(item['images'], [])

    def test_detail_visible_product(self):
        response = self.get('/api/products/p1/', 'shop-a.test')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['name'], 'Red shirt')

    def test_detail_of_other_store_product_is_404(self):
        response = self.get('/api/products/p1/', 'shop-b.test')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_detail_of_global_product_everywhere(self):
        for host in ('shop-a.test', 'shop-b.test'):
            self.assertEqual(self.get('/api/products/p3/', host).status_code, status.HTTP_200_OK)

    def test_detail_unknown_product_is_404(self):
        self.assertEqual(self.get('/api/products/nope/', 'shop-a.test').status_code, status.HTTP_404_NOT_FOUND)


@override_settings(ALLOWED_HOSTS=['*'])
class TaxonApiTests(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.shop_a = make_tenant('shop_a', hosts=['shop-a.test'])
        cls.shop_b = make_tenant('shop_b', hosts=['shop-b.test'])
        taxonomy_a = Taxonomy.objects.create(name='Категории A', tenant=cls.shop_a)
        taxonomy_b = Taxonomy.objects.create(name='Категории B', tenant=cls.shop_b)
        cls.shirts = Taxon.objects.create(taxonomy=taxonomy_a, name='Рубашки', permalink='shirts')
        cls.b_mugs = Taxon.objects.create(taxonomy=taxonomy_b, name='Кружки', permalink='b-mugs')
        make_product('red-shirt', tenants=[cls.shop_a], taxons=[cls.shirts])
        make_product('plain-shirt', taxons=[cls.shirts])
        make_product('mug', taxons=[cls.b_mugs])

    def setUp(self):
        self.client = APIClient()

    def test_taxon_products(self):
        response = self.client.get('/api/t/shirts/', HTTP_HOST='shop-a.test')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual({p['permalink'] for p in response.data['results']}, {'red-shirt', 'plain-shirt'})

    def test_other_store_taxon_is_404(self):
        response = self.client.get('/api/t/shirts/', HTTP_HOST='shop-b.test')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_unknown_taxon_is_404(self):
        response = self.client.get('/api/t/nothing/', HTTP_HOST='shop-a.test')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_taxonomies_of_current_store(self):
        response = self.client.get('/api/taxonomies/', HTTP_HOST='shop-a.test')
        self.assertEqual([t['name'] for t in response.data], ['Категории A'])
        self.assertEqual([t['permalink'] for t in response.data[0]['taxons']], ['shirts'])

    def test_taxonomies_without_store(self):
        response = self.client.get('/api/taxonomies/', HTTP_HOST='unknown.test')
        self.assertEqual(len(response.data), 2)


@override_settings(ALLOWED_HOSTS=['*'])
class AdminProductApiTests(StoreScenarioMixin, TestCase):

    def setUp(self):
        self.client = APIClient()
        self.admin = User.objects.create_user(username='admin', password='x', is_staff=True)
        self.client.force_authenticate(self.admin)

    def test_update_without_tenants_makes_product_global(self):
        self.p1.tenants.add(self.shop_b)
        response = self.client.patch('/api/admin/products/p1/', {'name': 'Red shirt XL'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['tenants'], [])
        self.p1.refresh_from_db()
        self.assertEqual(self.p1.name, 'Red shirt XL')
        self.assertEqual(self.p1.tenants.count(), 0)

    def test_update_with_tenants_sets_them(self):
        response = self.client.patch(
            '/api/admin/products/p3/', {'tenants': [self.shop_b.pk]}, format='json',
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(list(self.p3.tenants.all()), [self.shop_b])

    def test_create_product_is_global(self):
        response = self.client.post(
            '/api/admin/products/', {'name': 'Cap', 'permalink': 'cap', 'count_on_hand': 3}, format='json',
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['tenants'], [])
        self.assertEqual(Product.objects.get(permalink='cap').tenants.count(), 0)

    def test_failed_update_keeps_tenants(self):
        with patch.object(AdminProductSerializer, 'save', side_effect=DatabaseError('write failed')):
            with self.assertRaises(DatabaseError):
                self.client.patch('/api/admin/products/p1/', {'name': 'Red shirt XL'}, format='json')
        self.assertEqual(list(self.p1.tenants.all()), [self.shop_a])

    def test_non_admin_is_forbidden(self):
        user = User.objects.create_user(username='buyer', password='x')
        self.client.force_authenticate(user)
        response = self.client.patch('/api/admin/products/p1/', {'name': 'Hack'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(self.p1.tenants.count(), 1)


@override_settings(ALLOWED_HOSTS=['*'])
class CatalogPageTests(StoreScenarioMixin, TestCase):

    def test_list_page_renders_in_layout(self):
        Taxonomy.objects.create(name='Меню магазина A', tenant=self.shop_a)
        response = self.client.get('/products/', HTTP_HOST='shop-a.test')
        self.assertEqual(response.status_code, 200)
        self.assertContains(response, '<html lang="ru">')
        self.assertContains(response, 'Red shirt')
        self.assertContains(response, 'Coffee mug')
        self.assertNotContains(response, 'Green shirt')
        self.assertContains(response, 'Меню магазина A')
        self.assertContains(response, 'Найдено: 3')

    def test_detail_page(self):
        response = self.client.get('/products/p4/', HTTP_HOST='shop-b.test')
        self.assertEqual(response.status_code, 200)
        self.assertContains(response, 'Green shirt')
        self.assertContains(response, '30.00')

    def test_detail_page_of_other_store_is_404(self):
        response = self.client.get('/products/p4/', HTTP_HOST='shop-a.test')
        self.assertEqual(response.status_code, 404)
