from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Tenant',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(help_text='Название магазина', max_length=200)),
                ('code', models.SlugField(help_text='Короткий код, используется для каталога шаблонов layouts/<code>/', unique=True)),
                ('is_default', models.BooleanField(default=False, help_text='Магазин по умолчанию — для запросов с неизвестного домена')),
                ('is_active', models.BooleanField(default=True, help_text='Активен')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Магазин',
                'verbose_name_plural': 'Магазины',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='TenantDomain',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('host', models.CharField(help_text='Домен без порта, например shop.example.com', max_length=255, unique=True)),
                ('is_active', models.BooleanField(default=True)),
                ('tenant', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='domains', to='tenants.tenant', verbose_name='Магазин')),
            ],
            options={
                'verbose_name': 'Домен магазина',
                'verbose_name_plural': 'Домены магазинов',
                'indexes': [models.Index(fields=['tenant', 'is_active'], name='domain_tenant_active_idx')],
            },
        ),
    ]
