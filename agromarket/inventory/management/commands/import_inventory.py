"""
Management command to import warehouse inventory from a CSV file
"""
import csv
import os
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction
from agromarket.inventory.models import InventoryItem
from agromarket.inventory.serializers import InventoryItemSerializer


class Command(BaseCommand):
    help = "Imports inventory items from a CSV file (item_name, quantity, warehouse_location, stored_date, expiration_date)"

    def add_arguments(self, parser):
        parser.add_argument('csv_file', type=str, help='Path to the CSV file')
        parser.add_argument(
            '--clear',
            action='store_true',
            help='Delete all existing inventory items before importing',
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Validate the file without saving anything',
        )

    def row_to_data(self, row):
        """Map a CSV row onto serializer input, dropping blank optional columns"""
        data = {
            'item_name': (row.get('item_name') or '').strip(),
            'quantity': (row.get('quantity') or '').strip(),
            'warehouse_location': (row.get('warehouse_location') or '').strip(),
        }
        for column in ('stored_date', 'expiration_date'):
            value = (row.get(column) or '').strip()
            if len(value) == 10:
                # Plain YYYY-MM-DD means start of day
                value = f"{value}T00:00:00"
            if value:
                data[column] = value
        return data

    def handle(self, *args, **options):
        csv_file = options['csv_file']
        dry_run = options['dry_run']

        if not os.path.exists(csv_file):
            raise CommandError(f"CSV file not found at {csv_file}")

        self.stdout.write(self.style.SUCCESS("=" * 60))
        self.stdout.write(self.style.SUCCESS("IMPORTING INVENTORY FROM CSV"))
        self.stdout.write(self.style.SUCCESS("=" * 60))
        self.stdout.write(f"CSV File: {csv_file}")
        if dry_run:
            self.stdout.write(self.style.WARNING("Dry run: nothing will be saved"))

        valid_rows = []
        error_count = 0
        empty_count = 0

        with open(csv_file, 'r', encoding='utf-8', newline='') as f:
            reader = csv.DictReader(f)
            # Header is line 1
            for line_number, row in enumerate(reader, start=2):
                data = self.row_to_data(row)
                if not any(data.values()):
                    empty_count += 1
                    continue

                serializer = InventoryItemSerializer(data=data)
                if serializer.is_valid():
                    valid_rows.append(serializer)
                else:
                    error_count += 1
                    self.stdout.write(self.style.ERROR(f"  ✗ Line {line_number}: {dict(serializer.errors)}"))

        created_count = 0
        if not dry_run:
            with transaction.atomic():
                if options['clear']:
                    self.stdout.write(self.style.WARNING("Clearing all existing inventory items..."))
                    InventoryItem.objects.all().delete()
                for serializer in valid_rows:
                    item = serializer.save()
                    created_count += 1
                    self.stdout.write(self.style.SUCCESS(f"  ✓ Created: {item.item_name} ({item.quantity})"))

        self.stdout.write(self.style.SUCCESS("=" * 60))
        self.stdout.write(self.style.SUCCESS("SUMMARY"))
        self.stdout.write(self.style.SUCCESS("=" * 60))
        self.stdout.write(f"Valid Rows: {len(valid_rows)}")
        self.stdout.write(f"Items Created: {created_count}")
        self.stdout.write(f"Empty Rows Skipped: {empty_count}")
        if error_count > 0:
            self.stdout.write(self.style.ERROR(f"Rows with Errors: {error_count}"))
        self.stdout.write(f"Total Items in Database: {InventoryItem.objects.count()}")
