"""
Test suite for the invoicing module
Tests: VAT aggregation, amounts in words, invoice numbering, invoice CRUD,
preview and invoices raised from jobs
"""
from django.db import DataError
from django.test import TestCase
from rest_framework import status
from decimal import Decimal
from unittest import mock
from django.utils import timezone
from backend.core.models import AuditLog
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.invoicing.aggregation import (
    summarize_services, build_line_items, line_vat, number_to_words, integer_to_words,
)
from backend.invoicing.models import Invoice, InvoiceLineItem
from backend.invoicing.numbering import generate_invoice_number
import datetime


class AggregationTests(TestCase):
    """Test per-currency totals and VAT"""

    def test_line_vat(self):
        """Test VAT is only charged when enabled"""
        self.assertEqual(line_vat(Decimal('100.00'), True), Decimal('18.00'))
        self.assertEqual(line_vat(Decimal('100.00'), False), Decimal('0.00'))
        self.assertEqual(line_vat('33.33', True, 10), Decimal('3.33'))

    def test_summarize_by_currency(self):
        """Test lines are grouped by currency in first-seen order"""
        items = [
            {'amount': 100, 'currency': 'USD', 'vat_enabled': True},
            {'amount': '50', 'currency': 'rwf'},
            {'amount': 20, 'currency': 'USD', 'vat_enabled': True, 'vat_percent': 10},
        ]
        summary = summarize_services(items)
        self.assertEqual(list(summary), ['USD', 'RWF'])
        self.assertEqual(summary['USD'], {
            'sub_total': Decimal('120.00'),
            'vat_total': Decimal('20.00'),
            'total': Decimal('140.00'),
        })
        self.assertEqual(summary['RWF']['vat_total'], Decimal('0.00'))
        self.assertEqual(summary['RWF']['total'], Decimal('50.00'))

    def test_summarize_empty(self):
        """Test no lines means no currencies"""
        self.assertEqual(summarize_services([]), {})

    def test_build_line_items_for_currency(self):
        """Test line items are filtered by currency and carry VAT"""
        items = [
            {'description': 'Customs', 'amount': 200, 'currency': 'USD', 'vat_enabled': True},
            {'description': 'Storage', 'amount': 10, 'currency': 'RWF'},
        ]
        lines = build_line_items(items, 'USD')
        self.assertEqual(len(lines), 1)
        self.assertEqual(lines[0]['tax_percent'], Decimal('18'))
        self.assertEqual(lines[0]['tax_amount'], Decimal('36.00'))
        self.assertEqual(lines[0]['billing_amount'], Decimal('236.00'))
        self.assertIsNone(build_line_items(items, 'RWF')[0]['tax_percent'])


class AmountInWordsTests(TestCase):
    """Test amounts in words as printed on invoices"""

    def test_dollars_and_cents(self):
        self.assertEqual(number_to_words(2500.50, 'USD'), 'Two Thousand Five Hundred Dollars And Fifty Cents')

    def test_hyphenated_tens(self):
        self.assertEqual(number_to_words(51), 'Fifty-One Dollars')
        self.assertEqual(integer_to_words(99), 'Ninety-Nine')

    def test_large_amount(self):
        self.assertEqual(
            number_to_words(Decimal('1234567.89')),
            'One Million Two Hundred Thirty-Four Thousand Five Hundred Sixty-Seven Dollars And Eighty-Nine Cents',
        )

    def test_zero(self):
        self.assertEqual(number_to_words(0), 'Zero USD')
        self.assertEqual(number_to_words(100, 'USD'), 'One Hundred Dollars')
        self.assertEqual(number_to_words(0, 'RWF'), 'Zero RWF')

    def test_cents_only(self):
        self.assertEqual(number_to_words('0.75'), 'Zero Dollars And Seventy-Five Cents')

    def test_francs(self):
        self.assertEqual(number_to_words(1000000, 'rwf'), 'One Million Francs')

    def test_unknown_currency_uses_code(self):
        self.assertEqual(number_to_words(12, 'EUR'), 'Twelve EUR')

    def test_negative_amount(self):
        with self.assertRaises(ValueError):
            number_to_words(-1)


class InvoiceNumberingTests(TestCase):
    """Test invoice number allocation"""

    def test_first_and_next_number(self):
        """Test invoice numbers are padded to four digits per year"""
        today = datetime.date(2025, 2, 1)
        self.assertEqual(generate_invoice_number(today=today), 'AAL-AR-25-0001')
        client = TestDataFactory.create_client()
        Invoice.objects.create(number='AAL-AR-25-0041', client=client, invoice_date=today)
        Invoice.objects.create(number='AAL-AR-25-DRAFT', client=client, invoice_date=today)
        self.assertEqual(generate_invoice_number(today=today), 'AAL-AR-25-0042')
        self.assertEqual(generate_invoice_number(today=datetime.date(2026, 1, 1)), 'AAL-AR-26-0001')


class InvoiceAPITests(TestCase):
    """Test invoice endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user(role='FINANCE')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.client_obj = TestDataFactory.create_client()

    def _payload(self, **overrides):
        data = {
            'client': self.client_obj.id,
            'invoice_date': timezone.localdate().isoformat(),
            'currency': 'usd',
            'sub_total': '200.00',
            'total': '236.00',
            'line_items': [
                {'description': 'Customs Clearance', 'rate': '200.00', 'amount': '200.00',
                 'tax_percent': '18', 'tax_amount': '36.00'},
            ],
        }
        data.update(overrides)
        return data

    def test_create_invoice(self):
        """Test creating an invoice with line items"""
        response = self.client.post('/api/invoices/', self._payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        invoice = response.data['invoice']
        self.assertTrue(invoice['number'].startswith('AAL-AR-'))
        self.assertEqual(invoice['currency'], 'USD')
        self.assertEqual(invoice['status'], 'UNPAID')
        self.assertEqual(invoice['amount_in_words'], 'Two Hundred Thirty-Six Dollars')
        self.assertEqual(invoice['line_item_count'], 1)
        self.assertEqual(invoice['line_items'][0]['billing_amount'], Decimal('236.00'))
        self.assertEqual(invoice['line_items'][0]['currency'], 'USD')
        self.assertEqual(invoice['user'], self.user.id)

    def test_create_invoice_for_job(self):
        """Test an invoice linked to a job copies the job number"""
        job = TestDataFactory.create_job(client=self.client_obj)
        response = self.client.post('/api/invoices/', self._payload(job=job.id), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['invoice']['job_number'], job.job_number)

    def test_create_invoice_missing_total(self):
        """Test a missing total fails and nothing is saved"""
        data = self._payload()
        del data['total']
        response = self.client.post('/api/invoices/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('total', response.data['error'])
        self.assertEqual(Invoice.objects.count(), 0)
        self.assertEqual(InvoiceLineItem.objects.count(), 0)

    def test_create_invoice_bad_line_item(self):
        """Test a line item without an amount fails the whole invoice"""
        data = self._payload(line_items=[{'description': 'No amount'}])
        response = self.client.post('/api/invoices/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(Invoice.objects.count(), 0)

    def test_list_invoices_by_status(self):
        """Test filtering invoices by status"""
        TestDataFactory.create_invoice(client=self.client_obj, status='PAID')
        TestDataFactory.create_invoice(client=self.client_obj, status='UNPAID')
        response = self.client.get('/api/invoices/?status=PAID')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total'], 1)
        self.assertEqual(response.data['invoices'][0]['status'], 'PAID')

    def test_update_replaces_line_items(self):
        """Test sending line_items replaces the existing ones"""
        invoice = TestDataFactory.create_invoice(client=self.client_obj)
        data = {
            'status': 'PAID',
            'line_items': [
                {'description': 'A', 'amount': '10.00'},
                {'description': 'B', 'amount': '15.00'},
            ],
        }
        response = self.client.patch(f'/api/invoices/{invoice.id}/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['invoice']['status'], 'PAID')
        self.assertEqual(invoice.line_items.count(), 2)

    def test_update_total_refreshes_words(self):
        """Test changing the total updates the amount in words"""
        invoice = TestDataFactory.create_invoice(client=self.client_obj)
        response = self.client.patch(f'/api/invoices/?id={invoice.id}', {'total': '51.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['invoice']['amount_in_words'], 'Fifty-One Dollars')

    def test_update_currency_refreshes_words(self):
        """Test changing only the currency reprints the amount in words"""
        invoice = TestDataFactory.create_invoice(client=self.client_obj, total=Decimal('1000.00'))
        response = self.client.patch(f'/api/invoices/{invoice.id}/', {'currency': 'rwf'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['invoice']['currency'], 'RWF')
        self.assertEqual(response.data['invoice']['amount_in_words'], 'One Thousand Francs')

    def test_create_invoice_survives_audit_failure(self):
        """Test a failed audit insert does not roll back the invoice"""
        with mock.patch.object(AuditLog, '_do_insert', side_effect=DataError('invalid input syntax for type inet')):
            response = self.client.post('/api/invoices/', self._payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(Invoice.objects.filter(pk=response.data['invoice']['id']).exists())
        self.assertEqual(AuditLog.objects.count(), 0)

    def test_create_invoice_with_bad_forwarded_ip(self):
        """Test an invalid forwarded address is audited without an IP"""
        response = self.client.post('/api/invoices/', self._payload(), format='json', HTTP_X_FORWARDED_FOR='unknown')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        entry = AuditLog.objects.get(action='invoice_create')
        self.assertIsNone(entry.ip_address)

    def test_delete_invoice(self):
        """Test deleting an invoice removes its line items"""
        invoice = TestDataFactory.create_invoice(client=self.client_obj)
        response = self.client.delete(f'/api/invoices/{invoice.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['invoice']['number'], invoice.number)
        self.assertFalse(InvoiceLineItem.objects.filter(invoice_id=invoice.id).exists())

    def test_unknown_invoice(self):
        """Test an unknown id gives 404"""
        response = self.client.get('/api/invoices/99999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'Invoice not found')


class InvoicePreviewTests(TestCase):
    """Test pricing service lines without saving"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_preview_groups_currencies(self):
        """Test catalog and ad hoc lines are priced per currency"""
        service = TestDataFactory.create_service(name='Customs Clearance', price=Decimal('100.00'), vat=True)
        data = {'services': [
            {'service': service.id},
            {'description': 'Warehouse Storage', 'amount': '30.00', 'currency': 'rwf'},
        ]}
        response = self.client.post('/api/invoices/preview/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        summaries = response.data['summaries']
        self.assertEqual([s['currency'] for s in summaries], ['USD', 'RWF'])
        self.assertEqual(summaries[0]['total'], Decimal('118.00'))
        self.assertEqual(summaries[0]['amount_in_words'], 'One Hundred Eighteen Dollars')
        self.assertEqual(summaries[0]['line_items'][0]['description'], 'Customs Clearance')
        self.assertEqual(summaries[1]['vat_total'], Decimal('0.00'))
        self.assertEqual(Invoice.objects.count(), 0)

    def test_preview_requires_services(self):
        """Test an empty preview is rejected"""
        response = self.client.post('/api/invoices/preview/', {'services': []}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_preview_line_without_amount(self):
        """Test a line with neither a service nor an amount is rejected"""
        response = self.client.post('/api/invoices/preview/', {'services': [{'description': 'x'}]}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class JobInvoiceTests(TestCase):
    """Test raising an invoice from a job"""

    def setUp(self):
        self.user = TestDataFactory.create_user(role='FINANCE')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_invoice_from_air_job(self):
        """Test an air job is invoiced from its charge template"""
        job = TestDataFactory.create_job(chargeable_weight=Decimal('100.00'), master_air_waybill='176-1')
        response = self.client.post(f'/api/jobs/{job.id}/invoice/', format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        invoice = response.data['invoice']
        self.assertEqual(invoice['status'], 'UNPAID')
        self.assertEqual(invoice['job'], job.id)
        self.assertEqual(invoice['job_number'], job.job_number)
        self.assertEqual(invoice['booking_number'], '176-1')
        self.assertEqual(invoice['total'], Decimal('1400.00'))
        self.assertEqual(invoice['amount_in_words'], 'One Thousand Four Hundred Dollars')
        self.assertEqual(len(invoice['line_items']), 2)
        self.assertEqual(invoice['line_items'][0]['based_on'], 'Qty & UOM')

    def test_invoice_from_sea_job(self):
        """Test a sea job uses the master B/L as booking number"""
        job = TestDataFactory.create_job(job_type='SEA_FREIGHT_IMPORT', master_bl='MSKU1')
        response = self.client.post(f'/api/jobs/{job.id}/invoice/', format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['invoice']['booking_number'], 'MSKU1')
        self.assertEqual(response.data['invoice']['total'], Decimal('10500.00'))

    def test_invoice_from_unknown_job(self):
        """Test an unknown job gives 404"""
        response = self.client.post('/api/jobs/99999/invoice/', format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(Invoice.objects.count(), 0)
