"""
Test suite for the core module
Tests: login, token refresh, users, profile, audit logs and shared helpers
"""
from decimal import Decimal
from io import StringIO
from unittest import mock
from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.core.models import User, AuditLog
from backend.core.numbering import parse_sequence, get_max_sequence, format_number, year_suffix
from backend.core.utils import changes_from, blank_to_none, is_admin_user
from backend.jobs.models import LogisticsJob
from backend.parties.models import Client, Supplier
from backend.catalog.models import ServiceItem
import datetime


class LoginTests(TestCase):
    """Test the email/password login endpoint"""

    def setUp(self):
        self.client = APIClient()
        self.user = TestDataFactory.create_user(email='ops@aal.test', password='secret123', name='Ops User')

    def test_login_success(self):
        """Test login returns the user and a token pair"""
        response = self.client.post('/api/auth/', {'email': 'ops@aal.test', 'password': 'secret123'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Login successful')
        self.assertEqual(response.data['user']['email'], 'ops@aal.test')
        self.assertIn('token', response.data)
        self.assertIn('refresh', response.data)
        self.assertNotIn('password', response.data['user'])

    def test_login_email_is_case_insensitive(self):
        """Test login matches the email regardless of case"""
        response = self.client.post('/api/auth/', {'email': 'OPS@AAL.TEST', 'password': 'secret123'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_login_records_last_login_and_audit(self):
        """Test login stamps last_login and writes a login audit entry"""
        self.client.post('/api/auth/', {'email': 'ops@aal.test', 'password': 'secret123'}, format='json')
        self.user.refresh_from_db()
        self.assertIsNotNone(self.user.last_login)
        self.assertTrue(AuditLog.objects.filter(action='login', user=self.user).exists())

    def test_login_missing_fields(self):
        """Test login without a password fails with 400"""
        response = self.client.post('/api/auth/', {'email': 'ops@aal.test'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Email and password are required')

    def test_login_wrong_password(self):
        """Test a wrong password is rejected with 401"""
        response = self.client.post('/api/auth/', {'email': 'ops@aal.test', 'password': 'nope123'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data['error'], 'Invalid email or password')

    def test_login_unknown_email(self):
        """Test an unknown email gets the same error as a wrong password"""
        response = self.client.post('/api/auth/', {'email': 'ghost@aal.test', 'password': 'secret123'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data['error'], 'Invalid email or password')

    def test_login_inactive_account(self):
        """Test a deactivated account cannot log in"""
        TestDataFactory.create_user(email='gone@aal.test', password='secret123', is_active=False)
        response = self.client.post('/api/auth/', {'email': 'gone@aal.test', 'password': 'secret123'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data['error'], 'Account is deactivated')

    def test_token_refresh(self):
        """Test the refresh token yields a new access token"""
        login = self.client.post('/api/auth/', {'email': 'ops@aal.test', 'password': 'secret123'}, format='json')
        response = self.client.post('/api/auth/refresh/', {'refresh': login.data['refresh']}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)

    def test_protected_endpoint_requires_token(self):
        """Test endpoints other than login reject anonymous requests"""
        response = self.client.get('/api/clients/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertIn('error', response.data)


class UserAPITests(TestCase):
    """Test user management endpoints"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin(email='admin@aal.test')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_list_users(self):
        """Test listing users with the list envelope"""
        TestDataFactory.create_user(role='FINANCE')
        response = self.client.get('/api/users/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['success'])
        self.assertEqual(response.data['total'], 2)

    def test_list_users_filter_by_role(self):
        """Test the role filter is case-insensitive"""
        TestDataFactory.create_user(role='FINANCE')
        response = self.client.get('/api/users/?role=finance')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total'], 1)
        self.assertEqual(response.data['users'][0]['role'], 'FINANCE')

    def test_create_user(self):
        """Test an admin can create a user; role is upper-cased"""
        data = {'name': 'New Finance', 'email': 'Finance@AAL.test', 'role': 'finance', 'password': 'secret123'}
        response = self.client.post('/api/users/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['user']['role'], 'FINANCE')
        self.assertEqual(response.data['user']['email'], 'finance@aal.test')
        user = User.objects.get(email='finance@aal.test')
        self.assertTrue(user.check_password('secret123'))

    def test_create_user_duplicate_email(self):
        """Test duplicate emails are rejected"""
        TestDataFactory.create_user(email='dup@aal.test')
        response = self.client.post('/api/users/', {'name': 'Dup', 'email': 'DUP@aal.test'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Validation failed')
        self.assertIn('email', response.data['details'])

    def test_create_user_invalid_role(self):
        """Test an unknown role is rejected"""
        response = self.client.post('/api/users/', {'name': 'X', 'email': 'x@aal.test', 'role': 'boss'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('role', response.data['details'])

    def test_create_user_missing_fields(self):
        """Test creating a user without an email fails"""
        response = self.client.post('/api/users/', {'name': 'No Email'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('email', response.data['error'])

    def test_non_admin_cannot_create_user(self):
        """Test non-admin users get 403 on user mutations"""
        ops = TestDataFactory.create_user(role='OPERATIONS')
        client = AuthenticatedAPIClient().authenticate_user(ops)
        response = client.post('/api/users/', {'name': 'X', 'email': 'x@aal.test'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_update_user_by_query_id(self):
        """Test updating a user through ?id="""
        user = TestDataFactory.create_user(role='SALES')
        response = self.client.put(f'/api/users/?id={user.id}', {'role': 'FINANCE'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        user.refresh_from_db()
        self.assertEqual(user.role, 'FINANCE')

    def test_old_email_is_reusable_after_rename(self):
        """Test a renamed user's old email can be given to a new user"""
        create = self.client.post('/api/users/', {'name': 'Old', 'email': 'old@aal.test'}, format='json')
        user_id = create.data['user']['id']
        response = self.client.put(f'/api/users/{user_id}/', {'email': 'new@aal.test'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(User.objects.get(id=user_id).username, 'new@aal.test')
        response = self.client.post('/api/users/', {'name': 'Reuse', 'email': 'old@aal.test'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(User.objects.get(email='old@aal.test').username, 'old@aal.test')

    def test_update_without_id(self):
        """Test PUT without an id fails with 400"""
        response = self.client.put('/api/users/', {'role': 'FINANCE'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'User ID is required')

    def test_get_unknown_user(self):
        """Test an unknown id gives 404"""
        response = self.client.get('/api/users/99999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'User not found')

    def test_delete_user(self):
        """Test deleting a user without jobs or invoices"""
        user = TestDataFactory.create_user()
        response = self.client.delete(f'/api/users/{user.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['user']['id'], user.id)
        self.assertFalse(User.objects.filter(id=user.id).exists())

    def test_delete_user_with_jobs_is_blocked(self):
        """Test users that own jobs cannot be deleted"""
        user = TestDataFactory.create_user()
        TestDataFactory.create_job(user=user)
        response = self.client.delete(f'/api/users/{user.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['details']['jobs_count'], 1)
        self.assertTrue(User.objects.filter(id=user.id).exists())


class ProfileAPITests(TestCase):
    """Test profile endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user(email='me@aal.test', password='secret123')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_get_own_profile(self):
        """Test reading the caller's profile"""
        response = self.client.get('/api/profile/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['user']['email'], 'me@aal.test')

    def test_update_profile(self):
        """Test updating name and phone"""
        response = self.client.put('/api/profile/', {'name': 'Renamed', 'phone': '0788000000'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['user']['name'], 'Renamed')

    def test_change_password_requires_current(self):
        """Test a new password needs the correct current password"""
        response = self.client.put('/api/profile/', {'current_password': 'wrong123', 'new_password': 'newsecret1'},
                                   format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.put('/api/profile/', {'current_password': 'secret123', 'new_password': 'newsecret1'},
                                   format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password('newsecret1'))

    def test_upload_profile_picture(self):
        """Test uploading a data URL profile picture"""
        image = 'data:image/png;base64,iVBORw0KGgo='
        response = self.client.post('/api/profile/', {'image_data': image}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['user']['profile_picture'], image)

    def test_upload_profile_picture_invalid_format(self):
        """Test non-image data is rejected"""
        response = self.client.post('/api/profile/', {'image_data': 'hello'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Invalid image format')

    def test_other_profile_forbidden_for_non_admin(self):
        """Test non-admins cannot read other users' profiles"""
        other = TestDataFactory.create_user()
        response = self.client.get(f'/api/profile/?user_id={other.id}')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class AuditLogAPITests(TestCase):
    """Test the audit log endpoint"""

    def test_admin_sees_audit_logs(self):
        """Test mutations are visible in the audit log"""
        admin = TestDataFactory.create_admin()
        client = AuthenticatedAPIClient().authenticate_user(admin)
        client.post('/api/clients/', {'name': 'Audit Client'}, format='json')
        response = client.get('/api/audit-logs/?model_name=Client')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total'], 1)
        self.assertEqual(response.data['audit_logs'][0]['object_reference'], 'Audit Client')

    def test_non_admin_forbidden(self):
        """Test non-admins cannot read the audit log"""
        client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_user())
        response = client.get('/api/audit-logs/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class HelperTests(TestCase):
    """Test shared helpers"""

    def test_parse_sequence(self):
        """Test only all-digit suffixes parse as sequences"""
        self.assertEqual(parse_sequence('AAL-AI-25-007', 'AAL-AI-25-'), 7)
        self.assertIsNone(parse_sequence('AAL-AI-25-00X', 'AAL-AI-25-'))
        self.assertIsNone(parse_sequence('AAL-SI-25-001', 'AAL-AI-25-'))
        self.assertIsNone(parse_sequence(None, 'AAL-AI-25-'))

    def test_get_max_sequence_skips_malformed(self):
        """Test malformed numbers are ignored when finding the highest sequence"""
        client = TestDataFactory.create_client()
        for number in ('AAL-AI-25-002', 'AAL-AI-25-010', 'AAL-AI-25-ABC'):
            LogisticsJob.objects.create(job_number=number, title='t', client=client, job_type='AIR_FREIGHT_IMPORT')
        self.assertEqual(get_max_sequence(LogisticsJob.objects.all(), 'job_number', 'AAL-AI-25-'), 10)

    def test_format_number_and_year(self):
        """Test zero padding and the two-digit year"""
        self.assertEqual(format_number('AAL-AR-25-', 7, 4), 'AAL-AR-25-0007')
        self.assertEqual(format_number('AAL-AR-25-', 12345, 4), 'AAL-AR-25-12345')
        self.assertEqual(year_suffix(datetime.date(2025, 3, 1)), '25')
        self.assertEqual(year_suffix(datetime.date(2009, 3, 1)), '09')

    def test_changes_from(self):
        """Test related objects are recorded by primary key"""
        client = TestDataFactory.create_client()
        changes = changes_from({'client': client, 'total': Decimal('5.00'), 'line_items': [{}]})
        self.assertEqual(changes, {'client': client.pk, 'total': Decimal('5.00')})

    def test_blank_to_none(self):
        """Test empty strings become None"""
        self.assertEqual(blank_to_none({'a': '', 'b': 'x'}, ['a', 'b', 'c']), {'a': None, 'b': 'x'})

    def test_is_admin_user(self):
        """Test admin detection by role or staff flag"""
        self.assertTrue(is_admin_user(TestDataFactory.create_admin()))
        self.assertTrue(is_admin_user(TestDataFactory.create_user(is_staff=True)))
        self.assertFalse(is_admin_user(TestDataFactory.create_user(role='FINANCE')))


class ManagementCommandTests(TestCase):
    """Test seed_data and hash_passwords"""

    def test_seed_data_is_idempotent(self):
        """Test seeding twice creates each row once"""
        out = StringIO()
        call_command('seed_data', password='secret123', stdout=out)
        call_command('seed_data', stdout=out)
        self.assertEqual(User.objects.filter(role='ADMIN').count(), 1)
        self.assertEqual(Client.objects.count(), 5)
        self.assertEqual(Supplier.objects.count(), 3)
        self.assertEqual(ServiceItem.objects.count(), 10)
        self.assertTrue(User.objects.get(email='admin@aal.com').check_password('secret123'))

    def test_hash_passwords_only_touches_unusable(self):
        """Test only users without a usable password are updated"""
        keep = TestDataFactory.create_user(email='keep@aal.test', password='original1')
        blank = TestDataFactory.create_user(email='blank@aal.test')
        blank.set_unusable_password()
        blank.save()
        call_command('hash_passwords', password='default1', stdout=StringIO())
        keep.refresh_from_db()
        blank.refresh_from_db()
        self.assertTrue(keep.check_password('original1'))
        self.assertTrue(blank.check_password('default1'))

    def test_hash_passwords_rejects_short_password(self):
        with self.assertRaises(CommandError):
            call_command('hash_passwords', password='abc', stdout=StringIO())


class ErrorEnvelopeTests(TestCase):
    """Test the error bodies shared by every endpoint"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_method_not_allowed(self):
        """Test unsupported methods get 405 with the method name"""
        response = self.client.delete('/api/invoices/preview/')
        self.assertEqual(response.status_code, status.HTTP_405_METHOD_NOT_ALLOWED)
        self.assertEqual(response.data, {'error': 'Method DELETE not allowed'})

    @mock.patch('backend.invoicing.views.invoice_queryset', side_effect=RuntimeError('database unavailable'))
    def test_unhandled_error(self, mocked):
        """Test unexpected exceptions become a 500 with message and timestamp"""
        response = self.client.get('/api/invoices/')
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data['error'], 'Internal server error')
        self.assertEqual(response.data['message'], 'database unavailable')
        self.assertIn('timestamp', response.data)

    def test_not_found_uses_error_key(self):
        """Test DRF errors are flattened to a single error string"""
        response = self.client.get('/api/clients/99999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data, {'error': 'Client not found'})

    def test_cors_preflight(self):
        """Test browser preflight requests are answered for any origin"""
        response = APIClient().options(
            '/api/clients/',
            HTTP_ORIGIN='http://localhost:3000',
            HTTP_ACCESS_CONTROL_REQUEST_METHOD='POST',
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response['Access-Control-Allow-Origin'], '*')
