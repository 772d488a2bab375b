from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('tenants', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Tracker',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('analytics_id', models.CharField(max_length=100, verbose_name='ID счётчика')),
                ('environment', models.CharField(choices=[('production', 'Production'), ('staging', 'Staging'), ('development', 'Development')], default='production', max_length=20, verbose_name='Окружение')),
                ('is_active', models.BooleanField(default=True, verbose_name='Активен')),
                ('tenant', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='trackers', to='tenants.tenant', verbose_name='Магазин')),
            ],
            options={
                'verbose_name': 'Трекер аналитики',
                'verbose_name_plural': 'Трекеры аналитики',
                'ordering': ['pk'],
            },
        ),
    ]
