"""
Comprehensive test suite for Core module
Tests: Authentication, users, company settings, preferences, notifications,
audit logs, document numbering, Moroccan rules, status mapping and daily jobs
"""
from datetime import date, timedelta
from decimal import Decimal
from io import StringIO

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase, override_settings
from django.utils import timezone
from rest_framework import status

from backend.core import jobs
from backend.core.models import AuditLog, CompanySettings, Notification, User, UserPreference
from backend.core.moroccan import (
    calculate_corporate_tax, calculate_invoice_totals, format_mad, format_mad_full,
    validate_cnss, validate_ice, validate_if, validate_tp
)
from backend.core.numbering import (
    format_document_number, generate_document_number, get_document_type_from_number,
    is_valid_document_number, parse_document_number
)
from backend.core.status_mapper import resolve_status, to_db_status, to_ui_status
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.core.utils import create_audit_log, create_notification


class AuthenticationTests(TestCase):
    """Login, refresh and current-user endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user(email='gerant@evotech.ma', password='secret123')
        self.client = AuthenticatedAPIClient()

    def test_login_returns_tokens_and_user(self):
        response = self.client.post('/api/v1/auth/login/', {'email': 'gerant@evotech.ma', 'password': 'secret123'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)
        self.assertIn('refresh', response.data)
        self.assertEqual(response.data['user']['email'], 'gerant@evotech.ma')

    def test_login_is_case_insensitive_on_email(self):
        response = self.client.post('/api/v1/auth/login/', {'email': '  Gerant@EvoTech.ma ', 'password': 'secret123'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_login_wrong_password(self):
        response = self.client.post('/api/v1/auth/login/', {'email': 'gerant@evotech.ma', 'password': 'wrong'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_inactive_user_cannot_login(self):
        self.user.status = 'inactive'
        self.user.save()
        self.assertFalse(self.user.is_active)
        response = self.client.post('/api/v1/auth/login/', {'email': 'gerant@evotech.ma', 'password': 'secret123'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_refresh_token(self):
        login = self.client.post('/api/v1/auth/login/', {'email': 'gerant@evotech.ma', 'password': 'secret123'}, format='json')
        response = self.client.post('/api/v1/auth/refresh/', {'refresh': login.data['refresh']}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)

    def test_refresh_with_garbage_token(self):
        response = self.client.post('/api/v1/auth/refresh/', {'refresh': 'not-a-token'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me_requires_authentication(self):
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me_flags_for_manager(self):
        self.client.authenticate_user(self.user)
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['is_admin'])
        self.assertFalse(response.data['can_manage_users'])
        self.assertTrue(response.data['can_access_reports'])
        self.assertTrue(response.data['can_edit_documents'])

    def test_me_flags_for_viewer(self):
        viewer = TestDataFactory.create_user(role='viewer')
        self.client.authenticate_user(viewer)
        response = self.client.get('/api/v1/auth/me/')
        self.assertFalse(response.data['can_access_treasury'])
        self.assertFalse(response.data['can_edit_documents'])

    def test_logout(self):
        response = self.client.post('/api/v1/auth/logout/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_health_is_public(self):
        response = self.client.get('/api/health/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'ok')


class UserManagementTests(TestCase):
    """User administration is restricted to the admin role"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.manager = TestDataFactory.create_user(role='manager')
        self.client = AuthenticatedAPIClient()

    def test_admin_creates_user(self):
        self.client.authenticate_user(self.admin)
        data = {'email': 'Compta@EvoTech.ma', 'name': 'Comptable', 'password': 'compta123', 'role': 'accountant'}
        response = self.client.post('/api/v1/settings/users/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['email'], 'compta@evotech.ma')
        self.assertNotIn('password', response.data)
        self.assertTrue(User.objects.get(email='compta@evotech.ma').check_password('compta123'))
        self.assertTrue(AuditLog.objects.filter(model_name='User', action='create').exists())

    def test_duplicate_email_rejected(self):
        self.client.authenticate_user(self.admin)
        data = {'email': self.manager.email.upper(), 'password': 'compta123'}
        response = self.client.post('/api/v1/settings/users/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_manager_can_list_but_not_create(self):
        self.client.authenticate_user(self.manager)
        self.assertEqual(self.client.get('/api/v1/settings/users/').status_code, status.HTTP_200_OK)
        response = self.client.post('/api/v1/settings/users/', {'email': 'x@evotech.ma', 'password': 'abcdef1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_viewer_cannot_list_users(self):
        viewer = TestDataFactory.create_user(role='viewer')
        self.client.authenticate_user(viewer)
        response = self.client.get('/api/v1/settings/users/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_updates_password(self):
        self.client.authenticate_user(self.admin)
        response = self.client.patch(f'/api/v1/settings/users/{self.manager.id}/', {'password': 'nouveau123', 'name': 'Gérant'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.manager.refresh_from_db()
        self.assertEqual(self.manager.name, 'Gérant')
        self.assertTrue(self.manager.check_password('nouveau123'))

    def test_admin_cannot_delete_self(self):
        self.client.authenticate_user(self.admin)
        response = self.client.delete(f'/api/v1/settings/users/{self.admin.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_admin_deletes_user(self):
        self.client.authenticate_user(self.admin)
        response = self.client.delete(f'/api/v1/settings/users/{self.manager.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(User.objects.filter(pk=self.manager.pk).exists())

    def test_profile_password_change_needs_current_password(self):
        self.client.authenticate_user(self.manager)
        response = self.client.put('/api/v1/settings/profile/', {'password': 'another123'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.put('/api/v1/settings/profile/',
                                   {'password': 'another123', 'current_password': 'testpass123'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.manager.refresh_from_db()
        self.assertTrue(self.manager.check_password('another123'))


class CompanySettingsTests(TestCase):
    """Single-row company settings"""

    def setUp(self):
        self.user = TestDataFactory.create_user(role='manager')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_get_before_setup_returns_null(self):
        response = self.client.get('/api/v1/settings/company/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNone(response.data)

    def test_first_put_creates_then_updates(self):
        response = self.client.put('/api/v1/settings/company/', {'name': 'EvoTech SARL', 'ice': '001234567000089'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        response = self.client.put('/api/v1/settings/company/', {'phone': '0522000000'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(CompanySettings.objects.count(), 1)
        company = CompanySettings.get_solo()
        self.assertEqual(company.name, 'EvoTech SARL')
        self.assertEqual(company.phone, '0522000000')

    def test_invalid_ice_rejected(self):
        response = self.client.put('/api/v1/settings/company/', {'name': 'EvoTech', 'ice': '12345'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('ice', response.data)

    def test_viewer_cannot_change_settings(self):
        viewer = TestDataFactory.create_user(role='viewer')
        self.client.authenticate_user(viewer)
        response = self.client.put('/api/v1/settings/company/', {'name': 'EvoTech'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class UserPreferenceTests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_defaults_without_saving(self):
        response = self.client.get('/api/v1/settings/preferences/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['language'], 'en')
        self.assertFalse(UserPreference.objects.filter(user=self.user).exists())

    def test_put_upserts(self):
        response = self.client.put('/api/v1/settings/preferences/', {'language': 'fr'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        response = self.client.put('/api/v1/settings/preferences/', {'theme_color': 'dark'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['language'], 'fr')
        self.assertEqual(response.data['theme_color'], 'dark')


class NotificationTests(TestCase):
    """User and broadcast notifications"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.other = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.mine = create_notification('Mine', 'For me', user=self.user)
        self.broadcast = create_notification('All', 'For everyone')
        self.theirs = create_notification('Theirs', 'Not for me', user=self.other)

    def test_list_shows_own_and_broadcast(self):
        response = self.client.get('/api/v1/notifications/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        titles = {n['title'] for n in response.data}
        self.assertEqual(titles, {'Mine', 'All'})

    def test_unread_count_and_mark_read(self):
        response = self.client.get('/api/v1/notifications/unread/count/')
        self.assertEqual(response.data['count'], 2)
        response = self.client.patch(f'/api/v1/notifications/{self.mine.id}/read/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['read'])
        self.assertIsNotNone(response.data['read_at'])
        response = self.client.get('/api/v1/notifications/unread/count/')
        self.assertEqual(response.data['count'], 1)

    def test_mark_all_read(self):
        response = self.client.patch('/api/v1/notifications/read-all/')
        self.assertEqual(response.data['updated'], 2)
        self.theirs.refresh_from_db()
        self.assertFalse(self.theirs.read)

    def test_cannot_touch_other_users_notification(self):
        response = self.client.delete(f'/api/v1/notifications/{self.theirs.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_unread_filter_and_limit(self):
        self.mine.read = True
        self.mine.save()
        response = self.client.get('/api/v1/notifications/?unread=true')
        self.assertEqual([n['title'] for n in response.data], ['All'])
        response = self.client.get('/api/v1/notifications/?limit=1')
        self.assertEqual(len(response.data), 1)


class AuditLogTests(TestCase):

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        create_audit_log(user=self.admin, action='create', model_name='Invoice', object_id=1, object_reference='FC-01/26/0001')
        create_audit_log(user=self.user, action='delete', model_name='Product', object_id=2)

    def test_missing_fields_are_skipped(self):
        self.assertIsNone(create_audit_log(user=self.user, action='create', model_name='Product'))

    def test_admin_sees_all(self):
        self.client.authenticate_user(self.admin)
        response = self.client.get('/api/v1/audit-logs/')
        self.assertEqual(len(response.data), 2)

    def test_non_admin_sees_own(self):
        self.client.authenticate_user(self.user)
        response = self.client.get('/api/v1/audit-logs/')
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['model_name'], 'Product')

    def test_filters(self):
        self.client.authenticate_user(self.admin)
        response = self.client.get('/api/v1/audit-logs/?reference=FC-01/26/0001')
        self.assertEqual(len(response.data), 1)
        response = self.client.get('/api/v1/audit-logs/?action=delete&model=Product')
        self.assertEqual(len(response.data), 1)


class DocumentNumberingTests(TestCase):
    """PREFIX-MM/YY/NNNN numbering"""

    def setUp(self):
        self.client_contact = TestDataFactory.create_client()

    def test_format_and_parse(self):
        number = format_document_number('invoice', date(2026, 1, 15), 7)
        self.assertEqual(number, 'FC-01/26/0007')
        self.assertEqual(parse_document_number(number), {'prefix': 'FC', 'month': '01', 'year': '26', 'serial': '0007'})
        self.assertTrue(is_valid_document_number('BL-12/25/0100'))
        self.assertFalse(is_valid_document_number('FC-1/26/7'))
        self.assertIsNone(parse_document_number(''))

    def test_type_from_prefix(self):
        self.assertEqual(get_document_type_from_number('DIV-03/26/0001'), 'divers')
        self.assertEqual(get_document_type_from_number('FA-03/26/0001'), 'purchase_invoice')
        self.assertIsNone(get_document_type_from_number('XX-03/26/0001'))

    def test_unknown_type_raises(self):
        with self.assertRaises(ValueError):
            format_document_number('receipt', date(2026, 1, 1), 1)

    def test_serial_increments_within_month(self):
        invoice_date = date(2026, 3, 10)
        self.assertEqual(generate_document_number('invoice', invoice_date), 'FC-03/26/0001')
        TestDataFactory.create_invoice(self.client_contact, invoice_date=invoice_date)
        TestDataFactory.create_invoice(self.client_contact, invoice_date=invoice_date)
        self.assertEqual(generate_document_number('invoice', invoice_date), 'FC-03/26/0003')

    def test_serial_restarts_each_month(self):
        TestDataFactory.create_invoice(self.client_contact, invoice_date=date(2026, 3, 10))
        self.assertEqual(generate_document_number('invoice', date(2026, 4, 1)), 'FC-04/26/0001')

    def test_serial_follows_highest_existing(self):
        invoice = TestDataFactory.create_invoice(self.client_contact, invoice_date=date(2026, 5, 2))
        invoice.document_id = 'FC-05/26/0042'
        invoice.save()
        self.assertEqual(generate_document_number('invoice', date(2026, 5, 20)), 'FC-05/26/0043')


class MoroccanRulesTests(TestCase):
    """VAT, IS, identifiers and MAD formatting"""

    def test_invoice_totals(self):
        items = [{'quantity': Decimal('2'), 'unit_price': Decimal('150.00')},
                 {'quantity': Decimal('1'), 'unit_price': Decimal('99.99')}]
        subtotal, vat, total = calculate_invoice_totals(items, Decimal('20'))
        self.assertEqual(subtotal, Decimal('399.99'))
        self.assertEqual(vat, Decimal('80.00'))
        self.assertEqual(total, Decimal('479.99'))

    def test_totals_without_vat(self):
        subtotal, vat, total = calculate_invoice_totals([{'quantity': 3, 'unit_price': '10.50'}], 0)
        self.assertEqual((subtotal, vat, total), (Decimal('31.50'), Decimal('0.00'), Decimal('31.50')))

    def test_corporate_tax_brackets(self):
        self.assertEqual(calculate_corporate_tax(-5000), Decimal('0.00'))
        self.assertEqual(calculate_corporate_tax(200000), Decimal('20000.00'))
        self.assertEqual(calculate_corporate_tax(500000), Decimal('70000.00'))
        self.assertEqual(calculate_corporate_tax(2000000), Decimal('480000.00'))

    def test_identifier_validation(self):
        self.assertTrue(validate_ice('001234567000089'))
        self.assertFalse(validate_ice('00123456700008'))
        self.assertTrue(validate_if('12345678'))
        self.assertFalse(validate_if('1234567a'))
        self.assertTrue(validate_tp('4455'))
        self.assertTrue(validate_cnss('1234567'))
        self.assertFalse(validate_cnss('123456'))

    def test_mad_formatting(self):
        self.assertEqual(format_mad_full(Decimal('1234567.8')), '1.234.567,80\xa0DH')
        self.assertEqual(format_mad_full(-50), '-50,00\xa0DH')
        self.assertEqual(format_mad(Decimal('1250000')), '1.25M DH')
        self.assertEqual(format_mad(4500), '4.50k DH')
        self.assertEqual(format_mad(999), '999,00\xa0DH')


class StatusMapperTests(TestCase):

    def test_ui_to_db(self):
        self.assertEqual(to_db_status('invoice', 'pending'), 'sent')
        self.assertEqual(to_db_status('credit_note', 'approved'), 'applied')
        self.assertEqual(to_db_status('purchase_order', 'shipped'), 'confirmed')
        self.assertEqual(to_db_status('invoice', 'bogus'), 'draft')

    def test_db_to_ui(self):
        self.assertEqual(to_ui_status('invoice', 'sent'), 'pending')
        self.assertEqual(to_ui_status('divers', 'draft'), 'pending')
        self.assertEqual(to_ui_status('invoice', 'paid'), 'paid')

    def test_resolve_status(self):
        choices = {'draft', 'sent', 'paid'}
        self.assertEqual(resolve_status('invoice', 'PAID', choices), 'paid')
        self.assertEqual(resolve_status('invoice', 'pending', choices), 'sent')
        self.assertIsNone(resolve_status('invoice', 'bogus', choices))

    def test_unknown_document_type(self):
        with self.assertRaises(ValueError):
            to_db_status('receipt', 'draft')


class DailyJobsTests(TestCase):
    """Overdue, due-date, low stock and cleanup jobs"""

    def setUp(self):
        self.today = date(2026, 6, 15)
        self.client_contact = TestDataFactory.create_client(name='Atlas')

    def _invoice(self, due_date, status='sent'):
        invoice = TestDataFactory.create_invoice(self.client_contact, status=status, invoice_date=date(2026, 5, 1))
        invoice.due_date = due_date
        invoice.save()
        return invoice

    def test_overdue_invoice_notified_once(self):
        self._invoice(self.today - timedelta(days=5))
        self._invoice(self.today - timedelta(days=5), status='paid')
        self.assertEqual(jobs.check_overdue_invoices(self.today), 1)
        notification = Notification.objects.get(title=jobs.OVERDUE_TITLE)
        self.assertIn('overdue by 5 days', notification.message)
        self.assertEqual(jobs.check_overdue_invoices(self.today), 0)

    def test_overdue_notified_again_after_read(self):
        self._invoice(self.today - timedelta(days=1))
        jobs.check_overdue_invoices(self.today)
        Notification.objects.update(read=True)
        self.assertEqual(jobs.check_overdue_invoices(self.today), 1)

    def test_upcoming_due_date(self):
        self._invoice(self.today + timedelta(days=3))
        self._invoice(self.today + timedelta(days=4))
        self.assertEqual(jobs.check_upcoming_due_dates(self.today), 1)

    def test_low_stock_job(self):
        TestDataFactory.create_product(stock=Decimal('2'), min_stock=Decimal('5'))
        TestDataFactory.create_product(stock=Decimal('20'), min_stock=Decimal('5'))
        self.assertEqual(jobs.check_low_stock(), 1)
        self.assertEqual(jobs.check_low_stock(), 0)

    def test_cleanup_old_notifications(self):
        old = create_notification('Old', 'old')
        Notification.objects.filter(pk=old.pk).update(created_at=timezone.now() - timedelta(days=45))
        create_notification('Fresh', 'fresh')
        self.assertEqual(jobs.cleanup_old_notifications(), 1)
        self.assertEqual(Notification.objects.count(), 1)

    @override_settings(UPCOMING_DUE_DAYS=7, NOTIFICATION_RETENTION_DAYS=60)
    def test_job_windows_follow_settings(self):
        self._invoice(self.today + timedelta(days=3))
        self._invoice(self.today + timedelta(days=7))
        self.assertEqual(jobs.check_upcoming_due_dates(self.today), 1)
        self.assertIn('due in 7 days', Notification.objects.get(title=jobs.UPCOMING_TITLE).message)
        old = create_notification('Old', 'old')
        Notification.objects.filter(pk=old.pk).update(created_at=timezone.now() - timedelta(days=45))
        self.assertEqual(jobs.cleanup_old_notifications(), 0)

    def test_failing_job_does_not_stop_others(self):
        original = jobs.DAILY_JOBS['overdue']

        def broken(*args, **kwargs):
            raise RuntimeError('boom')

        jobs.DAILY_JOBS['overdue'] = broken
        try:
            with self.assertLogs('backend.jobs', level='ERROR'):
                results = jobs.run_daily_jobs()
        finally:
            jobs.DAILY_JOBS['overdue'] = original
        self.assertIsNone(results['overdue'])
        self.assertEqual(results['cleanup'], 0)

    def test_run_daily_jobs_command(self):
        out = StringIO()
        call_command('run_daily_jobs', '--only', 'cleanup', stdout=out)
        self.assertIn('cleanup: 0', out.getvalue())
        self.assertNotIn('overdue', out.getvalue())


class ResetAdminPasswordCommandTests(TestCase):

    def test_create_admin(self):
        call_command('reset_admin_password', '--password', 'admin123', '--create', stdout=StringIO())
        admin = User.objects.get(email='admin@evotech.ma')
        self.assertEqual(admin.role, 'admin')
        self.assertTrue(admin.check_password('admin123'))

    def test_reset_existing_and_reactivate(self):
        user = TestDataFactory.create_user(email='boss@evotech.ma')
        user.status = 'inactive'
        user.save()
        call_command('reset_admin_password', '--email', 'BOSS@evotech.ma', '--password', 'fresh123', stdout=StringIO())
        user.refresh_from_db()
        self.assertTrue(user.check_password('fresh123'))
        self.assertTrue(user.is_active)

    def test_missing_user_without_create(self):
        with self.assertRaises(CommandError):
            call_command('reset_admin_password', '--email', 'nobody@evotech.ma', '--password', 'fresh123', stdout=StringIO())

    def test_short_password(self):
        with self.assertRaises(CommandError):
            call_command('reset_admin_password', '--password', '123', '--create', stdout=StringIO())
