"""
Test suite for the expenses module
Tests: expense CRUD, job expense totals and denormalised references
"""
from django.test import TestCase
from rest_framework import status
from decimal import Decimal
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.core.models import AuditLog
from backend.expenses.models import Expense


class ExpenseAPITests(TestCase):
    """Test expense endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user(role='FINANCE')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.job = TestDataFactory.create_job()
        self.supplier = TestDataFactory.create_supplier(name='Bollore')

    def test_create_expense_with_job_and_supplier(self):
        """Test job number and supplier name are copied onto the expense"""
        data = {'title': 'Port Charges', 'amount': '320.00', 'currency': 'usd',
                'job': self.job.id, 'supplier': self.supplier.id}
        response = self.client.post('/api/expenses/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        expense = response.data['expense']
        self.assertEqual(expense['job_number'], self.job.job_number)
        self.assertEqual(expense['supplier_name'], 'Bollore')
        self.assertEqual(expense['currency'], 'USD')
        self.assertTrue(AuditLog.objects.filter(action='expense_create', object_reference=self.job.job_number).exists())

    def test_create_expense_free_text_supplier(self):
        """Test an expense may name a supplier without linking one"""
        response = self.client.post('/api/expenses/', {'title': 'Fuel', 'amount': 40, 'supplier_name': 'Total'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIsNone(response.data['expense']['supplier'])
        self.assertEqual(response.data['expense']['supplier_name'], 'Total')

    def test_create_expense_missing_amount(self):
        """Test title and amount are required"""
        response = self.client.post('/api/expenses/', {'title': 'No amount'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('amount', response.data['error'])
        self.assertEqual(Expense.objects.count(), 0)

    def test_list_expenses_by_job(self):
        """Test filtering expenses by job"""
        TestDataFactory.create_expense(job=self.job)
        TestDataFactory.create_expense()
        response = self.client.get(f'/api/expenses/?job_id={self.job.id}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total'], 1)

    def test_update_expense_blank_supplier_name(self):
        """Test an empty supplier name clears it"""
        expense = TestDataFactory.create_expense(supplier=self.supplier)
        response = self.client.patch(f'/api/expenses/{expense.id}/', {'supplier_name': ''}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNone(response.data['expense']['supplier_name'])

    def test_delete_expense(self):
        """Test deleting an expense returns it"""
        expense = TestDataFactory.create_expense()
        response = self.client.delete(f'/api/expenses/?id={expense.id}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['expense']['id'], expense.id)
        self.assertFalse(Expense.objects.filter(id=expense.id).exists())


class JobExpenseAPITests(TestCase):
    """Test expenses booked against a job"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.job = TestDataFactory.create_job()

    def test_job_expenses_total(self):
        """Test the job expense list carries the running total"""
        TestDataFactory.create_expense(job=self.job, amount=Decimal('10.00'))
        TestDataFactory.create_expense(job=self.job, amount=Decimal('15.50'))
        response = self.client.get(f'/api/jobs/{self.job.id}/expenses/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['job']['job_number'], self.job.job_number)
        self.assertEqual(response.data['total_expenses'], Decimal('25.50'))
        self.assertEqual(response.data['count'], 2)

    def test_add_job_expense(self):
        """Test adding an expense through the job updates its totals"""
        TestDataFactory.create_expense(job=self.job, amount=Decimal('10.00'))
        response = self.client.post(f'/api/jobs/{self.job.id}/expenses/', {'title': 'Trucking', 'amount': '90.00'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['expense']['job'], self.job.id)
        self.assertEqual(response.data['expense']['job_number'], self.job.job_number)
        self.assertEqual(response.data['total_expenses'], Decimal('100.00'))
        self.assertEqual(response.data['expense_count'], 2)

    def test_job_expenses_unknown_job(self):
        """Test an unknown job gives 404"""
        response = self.client.get('/api/jobs/99999/expenses/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'Job not found')
