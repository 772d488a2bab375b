"""
Catalog models — товары, таксономии и группы товаров.

Видимость товара по магазинам:
    product.tenants пусто      → товар глобальный, виден во всех магазинах
    product.tenants не пусто   → виден только в перечисленных магазинах

Таксономия, в отличие от товара, принадлежит ровно одному магазину.
"""
import logging
from decimal import InvalidOperation

from django.db import models
from django.utils import timezone

from tenants.querysets import TenantScopedQuerySet

from .querysets import ORDER_SCOPES, PRODUCT_SCOPES, ProductQuerySet

logger = logging.getLogger(__name__)


class Taxonomy(models.Model):
    """Дерево категорий магазина (например «Категории», «Бренды»)."""

    name = models.CharField('Название', max_length=255)
    tenant = models.ForeignKey(
        'tenants.Tenant',
        on_delete=models.CASCADE,
        related_name='taxonomies',
        verbose_name='Магазин',
        null=True, blank=True,
    )
    position = models.PositiveIntegerField('Порядок', default=0)

    objects = TenantScopedQuerySet.as_manager()

    class Meta:
        verbose_name = 'Таксономия'
        verbose_name_plural = 'Таксономии'
        ordering = ['position', 'name']

    def __str__(self):
        return self.name

    @property
    def root(self):
        return self.taxons.filter(parent__isnull=True).order_by('position').first()


class Taxon(models.Model):
    """Узел таксономии."""

    taxonomy = models.ForeignKey(
        Taxonomy, on_delete=models.CASCADE,
        related_name='taxons',
        verbose_name='Таксономия',
    )
    parent = models.ForeignKey(
        'self', on_delete=models.CASCADE,
        related_name='children',
        null=True, blank=True,
        verbose_name='Родитель',
    )
    name = models.CharField('Название', max_length=255)
    permalink = models.SlugField('Permalink', max_length=255, unique=True)
    position = models.PositiveIntegerField('Порядок', default=0)

    class Meta:
        verbose_name = 'Таксон'
        verbose_name_plural = 'Таксоны'
        ordering = ['position', 'name']

    def __str__(self):
        return self.name

    def self_and_descendant_ids(self):
        """id этого таксона и всех потомков (обход в ширину)."""
        ids = [self.pk]
        frontier = [self.pk]
        while frontier:
            frontier = list(
                Taxon.objects.filter(parent_id__in=frontier).values_list('pk', flat=True)
            )
            ids.extend(frontier)
        return ids

    def is_visible_to(self, tenant):
        """Таксон чужого магазина для покупателя не существует."""
        owner_id = self.taxonomy.tenant_id
        return owner_id is None or (tenant is not None and owner_id == tenant.pk)


class Product(models.Model):
    """Товар витрины."""

    name = models.CharField('Название', max_length=255)
    permalink = models.SlugField('Permalink', max_length=255, unique=True)
    description = models.TextField('Описание', blank=True)
    available_on = models.DateTimeField('Доступен с', default=timezone.now)
    deleted_at = models.DateTimeField('Удалён', null=True, blank=True)
    count_on_hand = models.IntegerField('Остаток', default=0)

    tenants = models.ManyToManyField(
        'tenants.Tenant',
        related_name='products',
        blank=True,
        verbose_name='Магазины',
        help_text='Пусто — товар виден во всех магазинах',
    )
    taxons = models.ManyToManyField(
        Taxon, related_name='products', blank=True, verbose_name='Таксоны',
    )

    created_at = models.DateTimeField('Создан', auto_now_add=True)
    updated_at = models.DateTimeField('Обновлен', auto_now=True)

    objects = ProductQuerySet.as_manager()

    class Meta:
        verbose_name = 'Товар'
        verbose_name_plural = 'Товары'
        ordering = ['name', 'pk']

    def __str__(self):
        return self.name

    @property
    def master(self):
        """Основной вариант (цена, SKU). Использует prefetch из with_display_data()."""
        prefetched = getattr(self, 'master_variants', None)
        if prefetched is not None:
            return prefetched[0] if prefetched else None
        return self.variants.filter(is_master=True).first()

    @property
    def price(self):
        master = self.master
        return master.price if master else None

    @property
    def in_stock(self):
        return self.count_on_hand > 0


class Variant(models.Model):
    product = models.ForeignKey(
        Product, on_delete=models.CASCADE,
        related_name='variants',
        verbose_name='Товар',
    )
    sku = models.CharField('SKU', max_length=100, blank=True)
    price = models.DecimalField('Цена', max_digits=10, decimal_places=2)
    is_master = models.BooleanField('Основной', default=False)
    count_on_hand = models.IntegerField('Остаток', default=0)

    class Meta:
        verbose_name = 'Вариант'
        verbose_name_plural = 'Варианты'
        constraints = [
            models.UniqueConstraint(
                fields=['product'],
                condition=models.Q(is_master=True),
                name='catalog_variant_one_master_per_product',
            ),
        ]

    def __str__(self):
        return f'{self.product.name} ({self.sku or self.pk})'


class ProductImage(models.Model):
    product = models.ForeignKey(
        Product, on_delete=models.CASCADE,
        related_name='images',
        verbose_name='Товар',
    )
    url = models.URLField('URL')
    alt = models.CharField('Alt', max_length=255, blank=True)
    position = models.PositiveIntegerField('Порядок', default=0)

    class Meta:
        verbose_name = 'Изображение'
        verbose_name_plural = 'Изображения'
        ordering = ['position']

    def __str__(self):
        return self.url


class ProductGroup(models.Model):
    """
    Группа товаров — сохраняемый набор фильтров (scopes) + сортировка.

    product_scopes: [{"name": "name_contains", "arguments": ["shirt"]}, ...]
    Имена scopes — только из catalog.querysets.PRODUCT_SCOPES, неизвестные
    игнорируются.

    Три способа построить группу:
        ProductGroup.objects.filter(permalink=...).first()  — сохранённая
        ProductGroup().from_route(['name_contains', 'shirt', 'ascend_by_name'])
        ProductGroup().from_search({'name_contains': 'shirt'})
    """

    name = models.CharField('Название', max_length=255)
    permalink = models.SlugField('Permalink', max_length=255, unique=True)
    order_scope = models.CharField('Сортировка', max_length=100, blank=True)
    product_scopes = models.JSONField('Фильтры', default=list, blank=True)

    class Meta:
        verbose_name = 'Группа товаров'
        verbose_name_plural = 'Группы товаров'
        ordering = ['name']

    def __str__(self):
        return self.name

    def add_scope(self, name, arguments=None):
        if name not in PRODUCT_SCOPES:
            logger.debug('Ignoring unknown product scope %r', name)
            return self
        if arguments is None:
            arguments = []
        elif isinstance(arguments, str):
            arguments = arguments.split(',')
        elif not isinstance(arguments, (list, tuple)):
            arguments = [arguments]
        self.product_scopes = list(self.product_scopes or []) + [
            {'name': name, 'arguments': [str(a) for a in arguments]}
        ]
        return self

    def from_route(self, tokens):
        """
        Построить из списка route-токенов: пары [scope, "арг1,арг2"],
        при нечётной длине последний токен — сортировка.
        """
        tokens = list(tokens)
        if len(tokens) % 2 == 1:
            self.order_scope = tokens.pop()
        for name, value in zip(tokens[::2], tokens[1::2]):
            self.add_scope(name, value)
        return self

    def from_search(self, search):
        """
        Уточнить группу параметрами поиска.
        dict — {scope: аргументы, 'order': сортировка}; строка — поиск по названию.
        """
        if not search:
            return self
        if isinstance(search, str):
            return self.add_scope('name_contains', [search])
        for name, value in search.items():
            if name == 'order':
                self.order_scope = value
            else:
                self.add_scope(name, value)
        return self

    def apply_on(self, queryset, use_order=True):
        """Наложить фильтры и сортировку группы на queryset."""
        for scope in self.product_scopes or []:
            apply = PRODUCT_SCOPES.get(scope.get('name'))
            if apply is None:
                continue
            try:
                queryset = apply(queryset, *scope.get('arguments', []))
            except (TypeError, ValueError, InvalidOperation) as e:
                logger.debug('Skipping product scope %r: %s', scope, e)
        if use_order and self.order_scope:
            order = ORDER_SCOPES.get(self.order_scope)
            if order is not None:
                queryset = order(queryset)
            else:
                logger.debug('Ignoring unknown order scope %r', self.order_scope)
        return queryset

    def products(self):
        """Товары сохранённой группы (без учёта магазина и активности)."""
        return self.apply_on(Product.objects.all())
