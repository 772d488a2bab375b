from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('tenants', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Taxonomy',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=255, verbose_name='Название')),
                ('position', models.PositiveIntegerField(default=0, verbose_name='Порядок')),
                ('tenant', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='taxonomies', to='tenants.tenant', verbose_name='Магазин')),
            ],
            options={
                'verbose_name': 'Таксономия',
                'verbose_name_plural': 'Таксономии',
                'ordering': ['position', 'name'],
            },
        ),
        migrations.CreateModel(
            name='Taxon',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=255, verbose_name='Название')),
                ('permalink', models.SlugField(max_length=255, unique=True, verbose_name='Permalink')),
                ('position', models.PositiveIntegerField(default=0, verbose_name='Порядок')),
                ('parent', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='children', to='catalog.taxon', verbose_name='Родитель')),
                ('taxonomy', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='taxons', to='catalog.taxonomy', verbose_name='Таксономия')),
            ],
            options={
                'verbose_name': 'Таксон',
                'verbose_name_plural': 'Таксоны',
                'ordering': ['position', 'name'],
            },
        ),
        migrations.CreateModel(
            name='ProductGroup',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=255, verbose_name='Название')),
                ('permalink', models.SlugField(max_length=255, unique=True, verbose_name='Permalink')),
                ('order_scope', models.CharField(blank=True, max_length=100, verbose_name='Сортировка')),
                ('product_scopes', models.JSONField(blank=True, default=list, verbose_name='Фильтры')),
            ],
            options={
                'verbose_name': 'Группа товаров',
                'verbose_name_plural': 'Группы товаров',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Product',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=255, verbose_name='Название')),
                ('permalink', models.SlugField(max_length=255, unique=True, verbose_name='Permalink')),
                ('description', models.TextField(blank=True, verbose_name='Описание')),
                ('available_on', models.DateTimeField(default=django.utils.timezone.now, verbose_name='Доступен с')),
                ('deleted_at', models.DateTimeField(blank=True, null=True, verbose_name='Удалён')),
                ('count_on_hand', models.IntegerField(default=0, verbose_name='Остаток')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='Создан')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='Обновлен')),
                ('taxons', models.ManyToManyField(blank=True, related_name='products', to='catalog.taxon', verbose_name='Таксоны')),
                ('tenants', models.ManyToManyField(blank=True, help_text='Пусто — товар виден во всех магазинах', related_name='products', to='tenants.tenant', verbose_name='Магазины')),
            ],
            options={
                'verbose_name': 'Товар',
                'verbose_name_plural': 'Товары',
                'ordering': ['name', 'pk'],
            },
        ),
        migrations.CreateModel(
            name='ProductImage',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('url', models.URLField(verbose_name='URL')),
                ('alt', models.CharField(blank=True, max_length=255, verbose_name='Alt')),
                ('position', models.PositiveIntegerField(default=0, verbose_name='Порядок')),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='images', to='catalog.product', verbose_name='Товар')),
            ],
            options={
                'verbose_name': 'Изображение',
                'verbose_name_plural': 'Изображения',
                'ordering': ['position'],
            },
        ),
        migrations.CreateModel(
            name='Variant',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('sku', models.CharField(blank=True, max_length=100, verbose_name='SKU')),
                ('price', models.DecimalField(decimal_places=2, max_digits=10, verbose_name='Цена')),
                ('is_master', models.BooleanField(default=False, verbose_name='Основной')),
                ('count_on_hand', models.IntegerField(default=0, verbose_name='Остаток')),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='variants', to='catalog.product', verbose_name='Товар')),
            ],
            options={
                'verbose_name': 'Вариант',
                'verbose_name_plural': 'Варианты',
                'constraints': [models.UniqueConstraint(condition=models.Q(('is_master', True)), fields=('product',), name='catalog_variant_one_master_per_product')],
            },
        ),
    ]
