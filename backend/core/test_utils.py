"""
Test utilities and factories for creating test data
"""
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from backend.parties.models import Client, Supplier
from backend.catalog.models import ServiceItem
from backend.jobs.models import LogisticsJob
from backend.jobs.numbering import generate_job_number
from backend.invoicing.models import Invoice, InvoiceLineItem
from backend.invoicing.numbering import generate_invoice_number
from backend.expenses.models import Expense
from decimal import Decimal
from django.utils import timezone
import random
import string

User = get_user_model()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_user(email=None, password='testpass123', role='OPERATIONS', name=None, is_staff=False, is_active=True):
        """Create a test user"""
        if not email:
            email = f'testuser_{TestDataFactory.random_string(6).lower()}@test.com'
        user = User.objects.create_user(
            username=email,
            email=email,
            password=password,
            name=name or 'Test User',
            role=role,
            is_staff=is_staff,
            is_active=is_active
        )
        return user

    @staticmethod
    def create_admin(email=None, password='testpass123'):
        """Create a test user with the ADMIN role"""
        return TestDataFactory.create_user(email=email, password=password, role='ADMIN', name='Admin User')

    @staticmethod
    def create_client(name=None, email=None, phone=None, tin=None):
        """Create a test client"""
        if not name:
            name = f'Client_{TestDataFactory.random_string(6)}'
        if not phone:
            phone = f'07{random.randint(10000000, 99999999)}'
        return Client.objects.create(
            name=name,
            email=email or f'{name.lower()}@test.com',
            phone=phone,
            address=f'Test Address {name}',
            tin=tin
        )

    @staticmethod
    def create_supplier(name=None, contact=None):
        """Create a test supplier"""
        if not name:
            name = f'Supplier_{TestDataFactory.random_string(6)}'
        return Supplier.objects.create(
            name=name,
            contact=contact or f'{name.lower()}@test.com'
        )

    @staticmethod
    def create_service(name=None, price=None, currency='USD', vat=False):
        """Create a test service item"""
        if not name:
            name = f'Service_{TestDataFactory.random_string(6)}'
        if price is None:
            price = Decimal('100.00')
        return ServiceItem.objects.create(
            name=name,
            price=price,
            currency=currency,
            vat=vat
        )

    @staticmethod
    def create_job(client=None, user=None, job_type='AIR_FREIGHT_IMPORT', title=None, status='OPEN', **fields):
        """Create a test logistics job with the next free job number"""
        if not client:
            client = TestDataFactory.create_client()
        if not title:
            title = f'Job {TestDataFactory.random_string(6)}'
        return LogisticsJob.objects.create(
            job_number=generate_job_number(job_type),
            title=title,
            client=client,
            user=user,
            job_type=job_type,
            status=status,
            **fields
        )

    @staticmethod
    def create_invoice(client=None, user=None, job=None, total=None, status='UNPAID', currency='USD',
                       invoice_date=None):
        """Create a test invoice with a single line item"""
        if not client:
            client = job.client if job else TestDataFactory.create_client()
        if total is None:
            total = Decimal('100.00')
        invoice = Invoice.objects.create(
            number=generate_invoice_number(),
            client=client,
            job=job,
            job_number=job.job_number if job else None,
            invoice_date=invoice_date or timezone.localdate(),
            status=status,
            currency=currency,
            sub_total=total,
            total=total,
            user=user
        )
        InvoiceLineItem.objects.create(
            invoice=invoice,
            description='Handling Charges',
            based_on='Shipment',
            rate=total,
            currency=currency,
            amount=total,
            tax_amount=Decimal('0.00'),
            billing_amount=total
        )
        return invoice

    @staticmethod
    def create_expense(title=None, amount=None, currency='USD', job=None, supplier=None):
        """Create a test expense"""
        if amount is None:
            amount = Decimal('50.00')
        return Expense.objects.create(
            title=title or f'Expense {TestDataFactory.random_string(6)}',
            amount=amount,
            currency=currency,
            job=job,
            job_number=job.job_number if job else None,
            supplier=supplier,
            supplier_name=supplier.name if supplier else None
        )


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        refresh = RefreshToken.for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()
