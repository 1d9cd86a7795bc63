"""
Management command to load demo users, clients, suppliers and services
Usage: python manage.py seed_data [--password secret123]
"""
from decimal import Decimal
from django.core.management.base import BaseCommand
from django.db import transaction
from backend.core.models import User
from backend.parties.models import Client, Supplier
from backend.catalog.models import ServiceItem


USERS = [
    {'name': 'John Administrator', 'email': 'admin@aal.com', 'role': 'ADMIN', 'department': 'IT', 'phone': '+1-555-0101'},
    {'name': 'Sarah Finance', 'email': 'finance@aal.com', 'role': 'FINANCE', 'department': 'Finance', 'phone': '+1-555-0102'},
    {'name': 'Mike Operations', 'email': 'operations@aal.com', 'role': 'OPERATIONS', 'department': 'Operations', 'phone': '+1-555-0103'},
]

CLIENTS = [
    {'name': 'Acme Corp', 'address': '1 Main St', 'phone': '+123456', 'tin': 'TIN123456789'},
    {'name': 'Beta LLC', 'address': '9 Market St', 'phone': '+987654', 'tin': 'TIN987654321'},
    {'name': 'TechStart Inc', 'address': '456 Innovation Ave', 'phone': '+555123', 'tin': 'TIN555123456'},
    {'name': 'Global Solutions', 'address': '789 Business Blvd', 'phone': '+555456', 'tin': 'TIN789456123'},
    {'name': 'Creative Agency', 'address': '321 Design St', 'phone': '+555789', 'tin': 'TIN321789654'},
]

SUPPLIERS = [
    {'name': 'Supplier One', 'contact': 'sup1@example.com'},
    {'name': 'Parts & Equipment', 'contact': 'parts@example.com'},
    {'name': 'Office Supplies Co', 'contact': 'office@example.com'},
]

SERVICES = [
    ('Customs Warehouse Rent', '53100.00', 'RWF', False),
    ('Agency Fees', '100000.00', 'RWF', True),
    ('Delivery Charges', '50000.00', 'RWF', False),
    ('Consolidation Fee', '30000.00', 'RWF', False),
    ('Air Freight Import', '2500.00', 'USD', True),
    ('Sea Freight Import', '1800.00', 'USD', True),
    ('Road Freight', '800.00', 'USD', False),
    ('Documentation Fee', '150.00', 'USD', False),
    ('Storage Fee', '25000.00', 'RWF', False),
    ('Handling Fee', '15000.00', 'RWF', True),
]


class Command(BaseCommand):
    help = "Loads demo users, clients, suppliers and the service catalog (existing rows are left alone)"

    def add_arguments(self, parser):
        parser.add_argument(
            '--password',
            default=None,
            help='Password for the demo users (left unusable when omitted)',
        )

    def handle(self, *args, **options):
        password = options['password']
        created = {'users': 0, 'clients': 0, 'suppliers': 0, 'services': 0}

        with transaction.atomic():
            for data in USERS:
                user, was_created = User.objects.get_or_create(
                    email=data['email'],
                    defaults={**data, 'username': data['email']},
                )
                if was_created:
                    if password:
                        user.set_password(password)
                    else:
                        user.set_unusable_password()
                    user.save()
                    created['users'] += 1
                    self.stdout.write(self.style.SUCCESS(f'✓ Created user: {user.email} ({user.role})'))

            for data in CLIENTS:
                _, was_created = Client.objects.get_or_create(name=data['name'], defaults=data)
                created['clients'] += was_created

            for data in SUPPLIERS:
                _, was_created = Supplier.objects.get_or_create(name=data['name'], defaults=data)
                created['suppliers'] += was_created

            for name, price, currency, vat in SERVICES:
                _, was_created = ServiceItem.objects.get_or_create(
                    name=name,
                    currency=currency,
                    defaults={'price': Decimal(price), 'vat': vat},
                )
                created['services'] += was_created

        self.stdout.write('')
        self.stdout.write(self.style.SUCCESS('Seeding complete:'))
        for label, count in created.items():
            self.stdout.write(f'  - {label.capitalize()} created: {count}')
