"""
ProductQuerySet — цепочка фильтров каталога.

Каждый метод только сужает выборку, поэтому порядок вызовов не влияет на
результат, а комбинация фильтров всегда подмножество любой её части.
"""
from decimal import Decimal

from django.db import models
from django.db.models import OuterRef, Prefetch, Q, Subquery
from django.utils import timezone


def _to_decimal(value):
    return Decimal(str(value).strip())


class ProductQuerySet(models.QuerySet):

    def active(self):
        """Не удалённые и уже доступные к продаже."""
        return self.filter(deleted_at__isnull=True, available_on__lte=timezone.now())

    def by_tenant(self, tenant):
        """
        Только товары, привязанные к магазину (Tenant или его id).
        Глобальные товары (без магазинов) сюда НЕ попадают.
        """
        return self.filter(tenants=tenant)

    def visible_to(self, tenant):
        """
        Глобальные товары + товары магазина (та же логика, что у can_show).
        Без магазина — только глобальные.
        """
        through = self.model.tenants.through
        bound = through.objects.values('product_id')
        if tenant is None:
            return self.exclude(pk__in=bound)
        members = through.objects.filter(tenant=tenant).values('product_id')
        return self.filter(Q(pk__in=members) | ~Q(pk__in=bound))

    def in_taxon(self, taxon):
        """Товары таксона и всех его потомков."""
        return self.filter(taxons__in=taxon.self_and_descendant_ids()).distinct()

    def keywords(self, keywords):
        """Любое из слов в названии или описании."""
        words = str(keywords).split()
        if not words:
            return self
        condition = Q()
        for word in words:
            condition |= Q(name__icontains=word) | Q(description__icontains=word)
        return self.filter(condition)

    def on_hand(self):
        return self.filter(count_on_hand__gt=0)

    def with_master_price(self):
        from .models import Variant

        if 'master_price' in self.query.annotations:
            return self
        master_price = Variant.objects.filter(
            product=OuterRef('pk'), is_master=True,
        ).values('price')[:1]
        return self.annotate(master_price=Subquery(master_price))

    def with_display_data(self):
        """Картинки и основной вариант одним запросом на связь."""
        from .models import Variant

        return self.prefetch_related(
            'images',
            Prefetch(
                'variants',
                queryset=Variant.objects.filter(is_master=True),
                to_attr='master_variants',
            ),
        )

    # === Scopes для ProductGroup ===

    def name_contains(self, value):
        return self.filter(name__icontains=value)

    def description_contains(self, value):
        return self.filter(description__icontains=value)

    def master_price_gte(self, value):
        return self.with_master_price().filter(master_price__gte=_to_decimal(value))

    def master_price_lte(self, value):
        return self.with_master_price().filter(master_price__lte=_to_decimal(value))

    def price_between(self, low, high):
        return self.master_price_gte(low).master_price_lte(high)

    def in_taxon_permalink(self, permalink):
        from .models import Taxon

        taxon = Taxon.objects.filter(permalink=permalink).first()
        if taxon is None:
            return self.none()
        return self.in_taxon(taxon)


# Разрешённые фильтры групп товаров: имя → (queryset, *args) → queryset
PRODUCT_SCOPES = {
    'name_contains': ProductQuerySet.name_contains,
    'description_contains': ProductQuerySet.description_contains,
    'master_price_gte': ProductQuerySet.master_price_gte,
    'master_price_lte': ProductQuerySet.master_price_lte,
    'price_between': ProductQuerySet.price_between,
    'in_taxon': ProductQuerySet.in_taxon_permalink,
}

ORDER_SCOPES = {
    'ascend_by_name': lambda qs: qs.order_by('name', 'pk'),
    'descend_by_name': lambda qs: qs.order_by('-name', '-pk'),
    'ascend_by_updated_at': lambda qs: qs.order_by('updated_at', 'pk'),
    'descend_by_updated_at': lambda qs: qs.order_by('-updated_at', '-pk'),
    'ascend_by_master_price': lambda qs: qs.with_master_price().order_by('master_price', 'pk'),
    'descend_by_master_price': lambda qs: qs.with_master_price().order_by('-master_price', '-pk'),
}
