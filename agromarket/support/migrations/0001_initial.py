# Generated manually

import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='SupportTicket',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('subject', models.CharField(max_length=255)),
                ('category', models.CharField(choices=[('Order Issue', 'Order Issue'), ('Payment Issue', 'Payment Issue'), ('Product Inquiry', 'Product Inquiry')], max_length=30)),
                ('description', models.TextField(blank=True, default='')),
                ('priority', models.CharField(choices=[('Low', 'Low'), ('Medium', 'Medium'), ('High', 'High')], db_index=True, default='Medium', max_length=10)),
                ('farmer_id', models.CharField(db_index=True, help_text='Id of the submitting user', max_length=100)),
                ('attachment', models.FileField(blank=True, null=True, upload_to='support/')),
                ('reply', models.TextField(blank=True, default='')),
                ('replied_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                'db_table': 'support_tickets',
                'ordering': ['-created_at'],
                'abstract': False,
            },
        ),
        migrations.CreateModel(
            name='FarmerSupportTicket',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('subject', models.CharField(max_length=255)),
                ('category', models.CharField(choices=[('Order Issue', 'Order Issue'), ('Payment Issue', 'Payment Issue'), ('Product Inquiry', 'Product Inquiry')], max_length=30)),
                ('description', models.TextField(blank=True, default='')),
                ('priority', models.CharField(choices=[('Low', 'Low'), ('Medium', 'Medium'), ('High', 'High')], db_index=True, default='Medium', max_length=10)),
                ('farmer_id', models.CharField(db_index=True, help_text='Id of the submitting user', max_length=100)),
                ('attachment', models.FileField(blank=True, null=True, upload_to='support/')),
                ('reply', models.TextField(blank=True, default='')),
                ('replied_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                'db_table': 'farmer_support_tickets',
                'ordering': ['-created_at'],
                'abstract': False,
            },
        ),
    ]
