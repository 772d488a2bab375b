"""
Тесты каталога: видимость товаров по магазинам, фильтры queryset,
группы товаров.

Запуск: python manage.py test catalog -v2
"""
from datetime import timedelta
from decimal import Decimal

from django.test import RequestFactory, TestCase
from django.utils import timezone

from catalog.context_processors import taxonomies
from catalog.hooks import add_to_all_tenants, reset_tenants_unless_supplied
from catalog.models import Product, ProductGroup, Taxon, Taxonomy, Variant
from catalog.visibility import ProductNotVisible, can_show, ensure_visible
from tenants.context import clear_current_tenant, set_current_tenant
from tenants.models import Tenant, TenantDomain


def make_tenant(code, hosts=(), is_default=False):
    tenant = Tenant.objects.create(name=code.title(), code=code, is_default=is_default)
    for host in hosts:
        TenantDomain.objects.create(tenant=tenant, host=host)
    return tenant


def make_product(permalink, tenants=(), price='10.00', count_on_hand=5,
                 taxons=(), name=None, description='', **kwargs):
    product = Product.objects.create(
        name=name or permalink.replace('-', ' ').title(),
        permalink=permalink,
        description=description,
        count_on_hand=count_on_hand,
        **kwargs,
    )
    Variant.objects.create(
        product=product, sku=permalink.upper(),
        price=Decimal(price), is_master=True, count_on_hand=count_on_hand,
    )
    product.tenants.set(tenants)
    product.taxons.set(taxons)
    return product


def ids(queryset):
    return {p.permalink for p in queryset}


class CanShowTests(TestCase):
    """Видимость: пустой набор магазинов — виден везде."""

    @classmethod
    def setUpTestData(cls):
        cls.shop_a = make_tenant('shop_a')
        cls.shop_b = make_tenant('shop_b')
        cls.shop_c = make_tenant('shop_c')

    def test_global_product_visible_everywhere(self):
        product = make_product('global')
        self.assertTrue(can_show(product, self.shop_a))
        self.assertTrue(can_show(product, self.shop_b))
        self.assertTrue(can_show(product, None))

    def test_single_tenant_match(self):
        product = make_product('only-a', tenants=[self.shop_a])
        self.assertTrue(can_show(product, self.shop_a))

    def test_single_tenant_non_match(self):
        product = make_product('only-a', tenants=[self.shop_a])
        self.assertFalse(can_show(product, self.shop_b))

    def test_multi_tenant_with_and_without_member(self):
        product = make_product('a-and-b', tenants=[self.shop_a, self.shop_b])
        self.assertTrue(can_show(product, self.shop_a))
        self.assertTrue(can_show(product, self.shop_b))
        self.assertFalse(can_show(product, self.shop_c))

    def test_restricted_product_hidden_without_tenant(self):
        product = make_product('only-a', tenants=[self.shop_a])
        self.assertFalse(can_show(product, None))

    def test_ensure_visible_raises_not_found(self):
        product = make_product('only-a', tenants=[self.shop_a])
        self.assertIs(ensure_visible(product, self.shop_a), product)
        with self.assertRaises(ProductNotVisible) as ctx:
            ensure_visible(product, self.shop_b)
        self.assertEqual(ctx.exception.status_code, 404)


class ProductQuerySetTests(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.shop_a = make_tenant('shop_a')
        cls.shop_b = make_tenant('shop_b')

        taxonomy = Taxonomy.objects.create(name='Категории', tenant=cls.shop_a)
        cls.clothing = Taxon.objects.create(taxonomy=taxonomy, name='Одежда', permalink='clothing')
        cls.shirts = Taxon.objects.create(taxonomy=taxonomy, parent=cls.clothing, name='Рубашки', permalink='shirts')
        cls.polo = Taxon.objects.create(taxonomy=taxonomy, parent=cls.shirts, name='Поло', permalink='polo')
        cls.mugs = Taxon.objects.create(taxonomy=taxonomy, name='Кружки', permalink='mugs')

        cls.p1 = make_product('red-shirt', tenants=[cls.shop_a], taxons=[cls.shirts], price='20.00')
        cls.p2 = make_product('polo-shirt', tenants=[cls.shop_a, cls.shop_b], taxons=[cls.polo, cls.shirts], price='30.00')
        cls.p3 = make_product('mug', taxons=[cls.mugs], price='5.00', description='Coffee mug')
        cls.p4 = make_product('sold-out', tenants=[cls.shop_b], count_on_hand=0, price='15.00')

    def test_by_tenant_excludes_global_items(self):
        self.assertEqual(ids(Product.objects.by_tenant(self.shop_a)), {'red-shirt', 'polo-shirt'})
        self.assertEqual(ids(Product.objects.by_tenant(self.shop_b.pk)), {'polo-shirt', 'sold-out'})

    def test_visible_to_adds_global_items(self):
        self.assertEqual(ids(Product.objects.visible_to(self.shop_a)), {'red-shirt', 'polo-shirt', 'mug'})
        self.assertEqual(ids(Product.objects.visible_to(self.shop_b)), {'polo-shirt', 'sold-out', 'mug'})
        self.assertEqual(ids(Product.objects.visible_to(None)), {'mug'})

    def test_visible_to_has_no_duplicates(self):
        self.assertEqual(Product.objects.visible_to(self.shop_a).count(), 3)

    def test_visible_to_matches_can_show(self):
        for tenant in (self.shop_a, self.shop_b, None):
            expected = {p.permalink for p in Product.objects.all() if can_show(p, tenant)}
            self.assertEqual(ids(Product.objects.visible_to(tenant)), expected)

    def test_active_excludes_deleted_and_future(self):
        make_product('deleted', deleted_at=timezone.now())
        make_product('future', available_on=timezone.now() + timedelta(days=3))
        active = ids(Product.objects.active())
        self.assertNotIn('deleted', active)
        self.assertNotIn('future', active)
        self.assertIn('mug', active)

    def test_in_taxon_includes_descendants_without_duplicates(self):
        self.assertEqual(ids(Product.objects.in_taxon(self.clothing)), {'red-shirt', 'polo-shirt'})
        self.assertEqual(Product.objects.in_taxon(self.clothing).count(), 2)
        self.assertEqual(ids(Product.objects.in_taxon(self.polo)), {'polo-shirt'})

    def test_keywords_match_any_word_in_name_or_description(self):
        self.assertEqual(ids(Product.objects.keywords('coffee')), {'mug'})
        self.assertEqual(ids(Product.objects.keywords('polo coffee')), {'polo-shirt', 'mug'})
        self.assertEqual(Product.objects.keywords('   ').count(), 4)

    def test_on_hand(self):
        self.assertNotIn('sold-out', ids(Product.objects.on_hand()))

    def test_master_price_scopes(self):
        self.assertEqual(ids(Product.objects.price_between('10', '25')), {'red-shirt', 'sold-out'})
        self.assertEqual(ids(Product.objects.master_price_gte('30')), {'polo-shirt'})

    def test_taxon_self_and_descendants(self):
        self.assertEqual(
            set(self.clothing.self_and_descendant_ids()),
            {self.clothing.pk, self.shirts.pk, self.polo.pk},
        )

    def test_taxon_visibility_follows_taxonomy_owner(self):
        self.assertTrue(self.shirts.is_visible_to(self.shop_a))
        self.assertFalse(self.shirts.is_visible_to(self.shop_b))
        self.assertFalse(self.shirts.is_visible_to(None))

        shared = Taxonomy.objects.create(name='Бренды')
        brand = Taxon.objects.create(taxonomy=shared, name='Acme', permalink='acme')
        self.assertTrue(brand.is_visible_to(self.shop_b))

    def test_display_data_prefetches_master_and_images(self):
        products = list(Product.objects.with_display_data().filter(permalink='mug'))
        with self.assertNumQueries(0):
            self.assertEqual(products[0].price, Decimal('5.00'))
            self.assertEqual(list(products[0].images.all()), [])


class ProductGroupTests(TestCase):

    @classmethod
    def setUpTestData(cls):
        make_product('apple', price='3.00', description='fruit')
        make_product('banana', price='1.00', description='fruit')
        make_product('carrot', price='2.00', description='vegetable')

    def test_from_route_pairs_and_trailing_order(self):
        group = ProductGroup().from_route(['description_contains', 'fruit', 'descend_by_name'])
        self.assertEqual(group.order_scope, 'descend_by_name')
        self.assertEqual(group.product_scopes, [{'name': 'description_contains', 'arguments': ['fruit']}])
        self.assertEqual(
            [p.permalink for p in group.apply_on(Product.objects.all())],
            ['banana', 'apple'],
        )

    def test_from_route_splits_comma_arguments(self):
        group = ProductGroup().from_route(['price_between', '1.50,3.50'])
        self.assertEqual(group.product_scopes, [{'name': 'price_between', 'arguments': ['1.50', '3.50']}])
        self.assertEqual(ids(group.apply_on(Product.objects.all())), {'apple', 'carrot'})

    def test_order_only_route(self):
        group = ProductGroup().from_route(['ascend_by_master_price'])
        self.assertEqual(
            [p.permalink for p in group.apply_on(Product.objects.all())],
            ['banana', 'carrot', 'apple'],
        )

    def test_unknown_scopes_are_ignored(self):
        group = ProductGroup().from_route(['drop_table', 'x', 'sort_by_magic'])
        self.assertEqual(group.product_scopes, [])
        self.assertEqual(group.apply_on(Product.objects.all()).count(), 3)

    def test_invalid_scope_arguments_are_skipped(self):
        group = ProductGroup().from_route(['master_price_gte', 'cheap'])
        self.assertEqual(group.apply_on(Product.objects.all()).count(), 3)

    def test_from_search_dict_and_text(self):
        group = ProductGroup().from_search({'name_contains': 'an', 'order': 'ascend_by_name'})
        self.assertEqual([p.permalink for p in group.apply_on(Product.objects.all())], ['banana'])

        group = ProductGroup().from_search('carr')
        self.assertEqual(ids(group.apply_on(Product.objects.all())), {'carrot'})

    def test_from_search_refines_route_group(self):
        group = ProductGroup().from_route(['description_contains', 'fruit']).from_search({'name_contains': 'app'})
        self.assertEqual(ids(group.apply_on(Product.objects.all())), {'apple'})

    def test_saved_group_products(self):
        group = ProductGroup.objects.create(
            name='Фрукты', permalink='fruits',
            product_scopes=[{'name': 'description_contains', 'arguments': ['fruit']}],
            order_scope='ascend_by_name',
        )
        self.assertEqual([p.permalink for p in group.products()], ['apple', 'banana'])

    def test_blank_group_is_identity(self):
        self.assertEqual(ProductGroup().apply_on(Product.objects.all()).count(), 3)


class AdminHooksTests(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.shop_a = make_tenant('shop_a')
        cls.shop_b = make_tenant('shop_b')

    def test_missing_tenants_field_resets_to_global(self):
        product = make_product('tee', tenants=[self.shop_a, self.shop_b])
        self.assertTrue(reset_tenants_unless_supplied(product, {'name': 'Tee'}))
        self.assertEqual(product.tenants.count(), 0)
        self.assertTrue(can_show(product, self.shop_b))

    def test_supplied_tenants_field_is_left_alone(self):
        product = make_product('tee', tenants=[self.shop_a])
        self.assertFalse(reset_tenants_unless_supplied(product, {'tenants': [self.shop_b.pk]}))
        self.assertEqual(list(product.tenants.all()), [self.shop_a])

    def test_add_to_all_tenants_keeps_product_global(self):
        product = make_product('new')
        add_to_all_tenants(product)
        self.assertEqual(product.tenants.count(), 0)


class TaxonomiesContextProcessorTests(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.shop_a = make_tenant('shop_a')
        cls.shop_b = make_tenant('shop_b')
        cls.menu_a = Taxonomy.objects.create(name='Меню A', tenant=cls.shop_a)
        cls.menu_b = Taxonomy.objects.create(name='Меню B', tenant=cls.shop_b)

    def test_uses_request_tenant(self):
        request = RequestFactory().get('/')
        request.tenant = self.shop_b
        self.assertEqual(taxonomies(request)['taxonomies'](), [self.menu_b])

    def test_request_without_store_lists_all(self):
        request = RequestFactory().get('/')
        request.tenant = None
        self.assertEqual(set(taxonomies(request)['taxonomies']()), {self.menu_a, self.menu_b})

    def test_falls_back_to_context_tenant(self):
        request = RequestFactory().get('/')
        token = set_current_tenant(self.shop_a)
        try:
            self.assertEqual(taxonomies(request)['taxonomies'](), [self.menu_a])
        finally:
            clear_current_tenant(token)

    def test_for_current_tenant_without_context_is_unfiltered(self):
        self.assertEqual(Taxonomy.objects.for_current_tenant().count(), 2)
