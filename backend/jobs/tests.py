"""
Test suite for the jobs module
Tests: job numbering, freight mode blocks, filters, charges and deletes
"""
from django.db import IntegrityError
from django.test import TestCase
from rest_framework import status
from decimal import Decimal
from backend.core.models import AuditLog
from backend.core.numbering import create_with_unique_number
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.jobs.charges import calculate_freight_charges, charge_line_items, booking_number_for
from backend.jobs.models import LogisticsJob
from backend.jobs.numbering import generate_job_number, job_number_prefix
import datetime

TODAY = datetime.date(2025, 6, 1)


class JobNumberingTests(TestCase):
    """Test job number allocation"""

    def setUp(self):
        self.client_obj = TestDataFactory.create_client()

    def _job(self, number, job_type='AIR_FREIGHT_IMPORT'):
        return LogisticsJob.objects.create(job_number=number, title='t', client=self.client_obj, job_type=job_type)

    def test_first_number_per_type(self):
        """Test the first job of a type and year is 001"""
        self.assertEqual(generate_job_number('AIR_FREIGHT_IMPORT', today=TODAY), 'AAL-AI-25-001')
        self.assertEqual(generate_job_number('SEA_FREIGHT_EXPORT', today=TODAY), 'AAL-SE-25-001')
        self.assertEqual(generate_job_number('ROAD_FREIGHT_IMPORT', today=TODAY), 'AAL-RI-25-001')

    def test_sequence_is_per_type(self):
        """Test each job type keeps its own sequence"""
        self._job('AAL-AI-25-004')
        self.assertEqual(generate_job_number('AIR_FREIGHT_IMPORT', today=TODAY), 'AAL-AI-25-005')
        self.assertEqual(generate_job_number('AIR_FREIGHT_EXPORT', today=TODAY), 'AAL-AE-25-001')

    def test_non_numeric_suffix_is_ignored(self):
        """Test malformed numbers do not break the sequence"""
        self._job('AAL-AI-25-002')
        self._job('AAL-AI-25-00A')
        self.assertEqual(generate_job_number('AIR_FREIGHT_IMPORT', today=TODAY), 'AAL-AI-25-003')

    def test_sequence_grows_past_width(self):
        """Test numbers keep growing past the padded width"""
        self._job('AAL-AI-25-999')
        self.assertEqual(generate_job_number('AIR_FREIGHT_IMPORT', today=TODAY), 'AAL-AI-25-1000')

    def test_offset_skips_ahead(self):
        """Test the retry offset skips ahead"""
        self.assertEqual(generate_job_number('AIR_FREIGHT_IMPORT', offset=2, today=TODAY), 'AAL-AI-25-003')

    def test_invalid_job_type(self):
        """Test unknown job types raise ValueError"""
        with self.assertRaises(ValueError):
            job_number_prefix('RAIL_FREIGHT_IMPORT')

    def test_retry_on_collision(self):
        """Test a taken number is retried with the next offset"""
        self._job('AAL-AI-25-001')
        candidates = iter(['AAL-AI-25-001', 'AAL-AI-25-002'])
        job = create_with_unique_number(
            lambda number: self._job(number),
            lambda attempt: next(candidates),
        )
        self.assertEqual(job.job_number, 'AAL-AI-25-002')

    def test_retry_gives_up(self):
        """Test the last collision propagates"""
        self._job('AAL-AI-25-001')
        with self.assertRaises(IntegrityError):
            create_with_unique_number(
                lambda number: self._job(number),
                lambda attempt: 'AAL-AI-25-001',
                attempts=3,
            )


class JobAPITests(TestCase):
    """Test job endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.client_obj = TestDataFactory.create_client(name='Acme Imports')

    def _payload(self, **overrides):
        data = {
            'title': 'Laptops from Dubai',
            'client': self.client_obj.id,
            'job_type': 'AIR_FREIGHT_IMPORT',
            'port_of_loading': 'Dubai - DXB',
            'port_of_discharge': 'Kigali - KGL',
            'chargeable_weight': '120.00',
        }
        data.update(overrides)
        return data

    def test_create_air_job(self):
        """Test creating an air job returns the awb block only"""
        data = self._payload(awb={'master_air_waybill': '176-12345675'})
        response = self.client.post('/api/jobs/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        job = response.data['job']
        self.assertTrue(job['job_number'].startswith('AAL-AI-'))
        self.assertTrue(job['job_number'].endswith('-001'))
        self.assertEqual(job['freight_mode'], 'air')
        self.assertEqual(job['awb']['master_air_waybill'], '176-12345675')
        self.assertNotIn('bill_of_lading', job)
        self.assertNotIn('road', job)
        self.assertEqual(job['status'], 'OPEN')
        self.assertEqual(job['user'], self.user.id)

    def test_flat_fields_are_folded_into_block(self):
        """Test flat type-specific fields are accepted"""
        data = self._payload(job_type='SEA_FREIGHT_IMPORT', master_bl='MSKU123', house_bl='HB1')
        response = self.client.post('/api/jobs/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['job']['bill_of_lading'], {'master_bl': 'MSKU123', 'house_bl': 'HB1'})

    def test_other_mode_fields_are_cleared(self):
        """Test fields of other freight modes are not stored"""
        data = self._payload(master_air_waybill='176-1', plate_number='RAB 123A')
        response = self.client.post('/api/jobs/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        job = LogisticsJob.objects.get(id=response.data['job']['id'])
        self.assertEqual(job.master_air_waybill, '176-1')
        self.assertIsNone(job.plate_number)

    def test_change_type_clears_old_block(self):
        """Test switching a job to road clears its air references"""
        job = TestDataFactory.create_job(client=self.client_obj, master_air_waybill='176-1')
        response = self.client.patch(
            f'/api/jobs/{job.id}/',
            {'job_type': 'ROAD_FREIGHT_IMPORT', 'road': {'plate_number': 'RAB 123A'}},
            format='json',
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['job']['road']['plate_number'], 'RAB 123A')
        job.refresh_from_db()
        self.assertIsNone(job.master_air_waybill)

    def test_sequential_numbers(self):
        """Test consecutive jobs of a type get consecutive numbers"""
        first = self.client.post('/api/jobs/', self._payload(), format='json')
        second = self.client.post('/api/jobs/', self._payload(), format='json')
        self.assertEqual(first.data['job']['job_number'][-3:], '001')
        self.assertEqual(second.data['job']['job_number'][-3:], '002')

    def test_blank_weight_is_accepted(self):
        """Test an empty weight is stored as null"""
        response = self.client.post('/api/jobs/', self._payload(chargeable_weight=''), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIsNone(response.data['job']['chargeable_weight'])

    def test_create_job_missing_fields(self):
        """Test title, client and job_type are required"""
        response = self.client.post('/api/jobs/', {'title': 'No client'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('client', response.data['error'])
        self.assertEqual(LogisticsJob.objects.count(), 0)

    def test_create_job_invalid_type(self):
        """Test unknown job types are rejected"""
        response = self.client.post('/api/jobs/', self._payload(job_type='RAIL'), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(LogisticsJob.objects.count(), 0)

    def test_create_job_logs_audit(self):
        """Test job creation is audited with the job number"""
        response = self.client.post('/api/jobs/', self._payload(), format='json')
        log = AuditLog.objects.get(action='job_create')
        self.assertEqual(log.object_reference, response.data['job']['job_number'])

    def test_list_filters(self):
        """Test filtering jobs by type, status and client"""
        TestDataFactory.create_job(client=self.client_obj, job_type='AIR_FREIGHT_IMPORT')
        TestDataFactory.create_job(client=self.client_obj, job_type='SEA_FREIGHT_IMPORT', status='DELIVERED')
        TestDataFactory.create_job(job_type='SEA_FREIGHT_IMPORT')

        response = self.client.get('/api/jobs/?type=SEA_FREIGHT_IMPORT')
        self.assertEqual(response.data['total'], 2)
        response = self.client.get('/api/jobs/?status=DELIVERED')
        self.assertEqual(response.data['total'], 1)
        response = self.client.get(f'/api/jobs/?client_id={self.client_obj.id}')
        self.assertEqual(response.data['total'], 2)
        self.assertEqual(response.data['filters']['client_id'], str(self.client_obj.id))

    def test_list_invalid_filter(self):
        """Test an invalid status filter is reported"""
        response = self.client.get('/api/jobs/?status=LOST')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_detail_includes_expenses_and_invoices(self):
        """Test job detail carries expenses, invoices and totals"""
        job = TestDataFactory.create_job(client=self.client_obj)
        TestDataFactory.create_expense(job=job, amount=Decimal('40.00'))
        TestDataFactory.create_expense(job=job, amount=Decimal('60.00'))
        TestDataFactory.create_invoice(job=job)
        response = self.client.get(f'/api/jobs/?id={job.id}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['job']['total_expenses'], Decimal('100.00'))
        self.assertEqual(response.data['job']['expense_count'], 2)
        self.assertEqual(len(response.data['job']['invoices']), 1)

    def test_delete_job_keeps_expenses(self):
        """Test deleting a job unlinks its expenses but keeps the job number"""
        job = TestDataFactory.create_job(client=self.client_obj)
        expense = TestDataFactory.create_expense(job=job)
        response = self.client.delete(f'/api/jobs/{job.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['job']['job_number'], job.job_number)
        expense.refresh_from_db()
        self.assertIsNone(expense.job_id)
        self.assertEqual(expense.job_number, job.job_number)

    def test_unknown_job(self):
        """Test an unknown id gives 404"""
        response = self.client.get('/api/jobs/99999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'Job not found')


class FreightChargeTests(TestCase):
    """Test freight charge templates"""

    def setUp(self):
        self.client_obj = TestDataFactory.create_client()

    def test_air_charges(self):
        """Test air is billed per chargeable kg plus handling"""
        job = TestDataFactory.create_job(client=self.client_obj, chargeable_weight=Decimal('100.00'),
                                         master_air_waybill='176-1')
        charges = calculate_freight_charges(job)
        self.assertEqual([c['description'] for c in charges], ['Air Freight Charges', 'Air Handling Charges'])
        self.assertEqual(charges[0]['amount'], Decimal('1250.00'))
        self.assertEqual(charges[1]['amount'], Decimal('150.00'))
        self.assertEqual(booking_number_for(job), '176-1')

    def test_sea_charges_40ft(self):
        """Test 40ft containers use the higher sea rate and the port codes"""
        job = TestDataFactory.create_job(client=self.client_obj, job_type='SEA_FREIGHT_IMPORT',
                                         package="1 x 40ft container", port_of_loading='Mombasa - MSA',
                                         port_of_discharge='Kigali - KGL')
        charges = calculate_freight_charges(job)
        self.assertEqual(charges[0]['amount'], Decimal('8500.00'))
        self.assertEqual(charges[1]['description'], 'Transport Charges MSA-KGL')

    def test_sea_charges_default(self):
        """Test other packages use the 20ft rate"""
        job = TestDataFactory.create_job(client=self.client_obj, job_type='SEA_FREIGHT_EXPORT')
        charges = calculate_freight_charges(job)
        self.assertEqual(charges[0]['amount'], Decimal('6500.00'))
        self.assertEqual(charges[1]['description'], 'Transport Charges')

    def test_road_charges(self):
        """Test road is billed per gross kg plus loading"""
        job = TestDataFactory.create_job(client=self.client_obj, job_type='ROAD_FREIGHT_EXPORT',
                                         gross_weight=Decimal('1000.00'), plate_number='RAB 123A')
        items = charge_line_items(job)
        self.assertEqual(items[0]['amount'], Decimal('2500.00'))
        self.assertEqual(items[1]['description'], 'Loading/Unloading Charges')
        self.assertEqual(items[0]['based_on'], 'Shipment')
        self.assertEqual(booking_number_for(job), 'RAB 123A')

    def test_charges_endpoint(self):
        """Test the charges endpoint totals the template"""
        user = TestDataFactory.create_user()
        api = AuthenticatedAPIClient().authenticate_user(user)
        job = TestDataFactory.create_job(client=self.client_obj, chargeable_weight=Decimal('10.00'))
        response = api.get(f'/api/jobs/{job.id}/charges/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['freight_mode'], 'air')
        self.assertEqual(response.data['total'], Decimal('275.00'))

    def test_charges_endpoint_unknown_mode(self):
        """Test a job without a freight mode has no charges"""
        user = TestDataFactory.create_user()
        api = AuthenticatedAPIClient().authenticate_user(user)
        job = TestDataFactory.create_job(client=self.client_obj)
        LogisticsJob.objects.filter(pk=job.pk).update(job_type='COURIER')
        response = api.get(f'/api/jobs/{job.id}/charges/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNone(response.data['freight_mode'])
        self.assertEqual(response.data['charges'], [])
        self.assertEqual(response.data['total'], Decimal('0.00'))
