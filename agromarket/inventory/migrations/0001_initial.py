# Generated manually

import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='InventoryItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('item_name', models.CharField(db_index=True, max_length=200)),
                ('quantity', models.PositiveIntegerField(default=0)),
                ('warehouse_location', models.CharField(db_index=True, max_length=200)),
                ('stored_date', models.DateTimeField(default=django.utils.timezone.now)),
                ('expiration_date', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'inventory_items',
                'ordering': ['-stored_date', '-created_at'],
                'indexes': [
                    models.Index(fields=['quantity'], name='inventory_quantity_idx'),
                    models.Index(fields=['expiration_date'], name='inventory_expiry_idx'),
                ],
            },
        ),
    ]
