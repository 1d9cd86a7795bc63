"""
Test suite for the reports module
Tests: dashboard metrics, recent activity and chart series
"""
from django.test import TestCase
from rest_framework import status
from decimal import Decimal
from django.utils import timezone
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.reports.views import month_start, expenses_by_category
from backend.expenses.models import Expense
import datetime


class DashboardTests(TestCase):
    """Test the dashboard endpoint"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_empty_dashboard(self):
        """Test the dashboard works without data"""
        response = self.client.get('/api/dashboard/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['success'])
        self.assertEqual(response.data['metrics']['total_revenue'], Decimal('0.00'))
        self.assertEqual(len(response.data['charts']['sales_last_7_days']), 7)
        self.assertEqual(len(response.data['charts']['sales_last_6_months']), 6)
        self.assertEqual(response.data['charts']['expenses_by_category'], [])
        self.assertIn('generated_at', response.data)

    def test_metrics(self):
        """Test headline metrics"""
        client = TestDataFactory.create_client()
        TestDataFactory.create_job(client=client, status='OPEN')
        TestDataFactory.create_job(client=client, status='DELIVERED')
        TestDataFactory.create_invoice(client=client, status='PAID', total=Decimal('500.00'))
        TestDataFactory.create_invoice(client=client, status='UNPAID', total=Decimal('200.00'))
        TestDataFactory.create_expense(amount=Decimal('120.00'))

        response = self.client.get('/api/dashboard/')
        metrics = response.data['metrics']
        self.assertEqual(metrics['total_clients'], 1)
        self.assertEqual(metrics['total_invoices'], 2)
        self.assertEqual(metrics['open_invoices'], 1)
        self.assertEqual(metrics['total_jobs'], 2)
        self.assertEqual(metrics['active_jobs'], 1)
        self.assertEqual(metrics['total_revenue'], Decimal('500.00'))
        self.assertEqual(metrics['total_expenses'], Decimal('120.00'))
        self.assertEqual(metrics['net_revenue'], Decimal('380.00'))
        self.assertEqual(len(response.data['recent_jobs']), 2)
        self.assertEqual(response.data['recent_invoices'][0]['client_name'], client.name)

    def test_sales_last_7_days(self):
        """Test paid invoices land on their day and unpaid ones are ignored"""
        today = timezone.localdate()
        TestDataFactory.create_invoice(status='PAID', total=Decimal('100.00'), invoice_date=today)
        TestDataFactory.create_invoice(status='PAID', total=Decimal('50.00'), invoice_date=today)
        TestDataFactory.create_invoice(status='UNPAID', total=Decimal('999.00'), invoice_date=today)
        response = self.client.get('/api/dashboard/')
        days = response.data['charts']['sales_last_7_days']
        self.assertEqual(days[-1]['date'], f"{today:%b} {today.day}")
        self.assertEqual(days[-1]['value'], Decimal('150.00'))
        self.assertEqual(days[0]['value'], Decimal('0.00'))
        months = response.data['charts']['sales_last_6_months']
        self.assertEqual(months[-1]['month'], f"{today:%b}")
        self.assertEqual(months[-1]['value'], Decimal('150.00'))

    def test_recent_lists_are_capped(self):
        """Test recent jobs are limited to four"""
        for _ in range(6):
            TestDataFactory.create_job()
        response = self.client.get('/api/dashboard/')
        self.assertEqual(len(response.data['recent_jobs']), 4)

    def test_requires_authentication(self):
        """Test anonymous users are rejected"""
        self.client.logout()
        response = self.client.get('/api/dashboard/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class DashboardHelperTests(TestCase):
    """Test chart helpers"""

    def test_month_start_wraps_year(self):
        self.assertEqual(month_start(datetime.date(2025, 2, 15), 0), datetime.date(2025, 2, 1))
        self.assertEqual(month_start(datetime.date(2025, 2, 15), 3), datetime.date(2024, 11, 1))

    def test_expenses_by_category(self):
        """Test expenses are grouped by upper-cased title and sorted by amount"""
        expenses = [
            Expense(title='Fuel', amount=Decimal('25.00')),
            Expense(title='fuel', amount=Decimal('25.00')),
            Expense(title='Port Charges', amount=Decimal('150.00')),
        ]
        chart = expenses_by_category(expenses)
        self.assertEqual([c['category'] for c in chart], ['PORT CHARGES', 'FUEL'])
        self.assertEqual(chart[0]['value'], 75)
        self.assertEqual(chart[1]['amount'], Decimal('50.00'))
        self.assertTrue(chart[0]['color'].startswith('#'))

    def test_expenses_by_category_top_eight(self):
        """Test only the eight largest categories are kept"""
        expenses = [Expense(title=f'Cat {i}', amount=Decimal(i + 1)) for i in range(10)]
        chart = expenses_by_category(expenses)
        self.assertEqual(len(chart), 8)
        self.assertEqual(chart[0]['category'], 'CAT 9')
