"""
Tests for customer and farmer support tickets
"""
import shutil
import tempfile
from unittest import mock
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase, override_settings
from rest_framework import status
from agromarket.core.models import AuditLog
from agromarket.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from agromarket.support.models import SupportTicket, FarmerSupportTicket

MEDIA_ROOT = tempfile.mkdtemp()


class TicketModelTests(TestCase):

    def test_updated_at_refreshed_on_save(self):
        ticket = TestDataFactory.create_ticket(farmer_id=1)
        first = ticket.updated_at
        ticket.subject = 'Changed'
        ticket.save()
        self.assertGreater(ticket.updated_at, first)

    def test_updated_at_refreshed_with_update_fields(self):
        ticket = TestDataFactory.create_ticket(farmer_id=1)
        first = ticket.updated_at
        ticket.reply = 'On its way'
        ticket.save(update_fields=['reply'])
        ticket.refresh_from_db()
        self.assertGreater(ticket.updated_at, first)


@override_settings(MEDIA_ROOT=MEDIA_ROOT)
class SupportTicketAPITests(TestCase):
    base_url = '/api/v1/support/'
    model = SupportTicket

    @classmethod
    def tearDownClass(cls):
        shutil.rmtree(MEDIA_ROOT, ignore_errors=True)
        super().tearDownClass()

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.other_user = TestDataFactory.create_user()
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def create_ticket(self, owner=None, **kwargs):
        owner = owner or self.user
        return TestDataFactory.create_ticket(
            farmer_id=owner.id, farmer=self.model is FarmerSupportTicket, **kwargs
        )

    def test_create_defaults_priority_and_submitter(self):
        response = self.client.post(self.base_url, {
            'subject': 'Payment failed',
            'category': 'Payment Issue',
            'priority': '',
        }, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['priority'], 'Medium')
        self.assertEqual(response.data['farmer_id'], str(self.user.id))
        self.assertEqual(response.data['reply'], '')
        self.assertIn('id', response.data)

    def test_create_with_attachment(self):
        response = self.client.post(self.base_url, {
            'subject': 'Damaged crate',
            'category': 'Order Issue',
            'description': 'Photo attached',
            'priority': 'High',
            'attachment': SimpleUploadedFile('crate.txt', b'evidence', content_type='text/plain'),
        }, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        ticket = self.model.objects.get(pk=response.data['id'])
        self.assertTrue(ticket.attachment.name.startswith('support/'))
        self.assertTrue(response.data['attachment_url'].startswith('/media/support/'))

    def test_create_requires_subject_and_valid_category(self):
        response = self.client.post(self.base_url, {'category': 'Complaint'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('subject', response.data)
        self.assertIn('category', response.data)

    def test_list_newest_first_and_scoped_to_submitter(self):
        older = self.create_ticket(subject='First')
        newer = self.create_ticket(subject='Second')
        self.create_ticket(owner=self.other_user, subject='Not mine')
        response = self.client.get(self.base_url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([t['id'] for t in response.data], [newer.id, older.id])

    def test_admin_lists_with_filters(self):
        self.create_ticket(priority='High')
        self.create_ticket(owner=self.other_user, priority='Low')
        self.client.authenticate_user(self.admin)
        response = self.client.get(self.base_url, {'priority': 'Low'})
        self.assertEqual([t['farmer_id'] for t in response.data], [str(self.other_user.id)])

    def test_update_keeps_attachment_and_defaults_priority(self):
        created = self.client.post(self.base_url, {
            'subject': 'Wrong item',
            'category': 'Order Issue',
            'priority': 'High',
            'attachment': SimpleUploadedFile('note.txt', b'details', content_type='text/plain'),
        }, format='multipart')
        attachment = self.model.objects.get(pk=created.data['id']).attachment.name

        response = self.client.put(f"{self.base_url}{created.data['id']}/", {
            'subject': 'Wrong item delivered',
            'category': 'Product Inquiry',
        }, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        ticket = self.model.objects.get(pk=created.data['id'])
        self.assertEqual(ticket.subject, 'Wrong item delivered')
        self.assertEqual(ticket.priority, 'Medium')
        self.assertEqual(ticket.attachment.name, attachment)

    def test_missing_ticket(self):
        response = self.client.put(f'{self.base_url}9999/', {'subject': 'x', 'category': 'Order Issue'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertIn('not found', response.data['error'])

    def test_cannot_touch_other_users_ticket(self):
        ticket = self.create_ticket(owner=self.other_user)
        response = self.client.delete(f'{self.base_url}{ticket.id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_delete(self):
        ticket = self.create_ticket()
        response = self.client.delete(f'{self.base_url}{ticket.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('deleted successfully', response.data['message'])
        self.assertFalse(self.model.objects.filter(pk=ticket.id).exists())

    def test_admin_reply(self):
        ticket = self.create_ticket()
        self.client.authenticate_user(self.admin)
        response = self.client.patch(f'{self.base_url}reply/{ticket.id}/', {'reply': 'Refund issued'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['id'], ticket.id)
        self.assertEqual(response.data['reply'], 'Refund issued')
        ticket.refresh_from_db()
        self.assertEqual(ticket.reply, 'Refund issued')
        self.assertIsNotNone(ticket.replied_at)
        self.assertTrue(AuditLog.objects.filter(action='ticket_reply', object_id=str(ticket.id)).exists())

    def test_failed_reply_returns_error(self):
        ticket = self.create_ticket()
        self.client.authenticate_user(self.admin)
        with mock.patch.object(self.model, 'save', side_effect=RuntimeError('database gone')):
            response = self.client.patch(f'{self.base_url}reply/{ticket.id}/', {'reply': 'Hello'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertTrue(response.data['error'].startswith('Failed to reply to'))
        ticket.refresh_from_db()
        self.assertEqual(ticket.reply, '')

    def test_failed_delete_returns_error(self):
        ticket = self.create_ticket()
        with mock.patch.object(self.model, 'delete', side_effect=RuntimeError('database gone')):
            response = self.client.delete(f'{self.base_url}{ticket.id}/')
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertTrue(response.data['error'].startswith('Failed to delete'))
        self.assertTrue(self.model.objects.filter(pk=ticket.id).exists())

    def test_new_attachment_replaces_old_file(self):
        created = self.client.post(self.base_url, {
            'subject': 'Late pickup',
            'category': 'Order Issue',
            'attachment': SimpleUploadedFile('first.txt', b'one', content_type='text/plain'),
        }, format='multipart')
        ticket = self.model.objects.get(pk=created.data['id'])
        old_name = ticket.attachment.name

        response = self.client.put(f'{self.base_url}{ticket.id}/', {
            'subject': 'Late pickup',
            'category': 'Order Issue',
            'attachment': SimpleUploadedFile('second.txt', b'two', content_type='text/plain'),
        }, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        ticket.refresh_from_db()
        self.assertNotEqual(ticket.attachment.name, old_name)
        self.assertTrue(ticket.attachment.storage.exists(ticket.attachment.name))
        self.assertFalse(ticket.attachment.storage.exists(old_name))

    def test_empty_reply_rejected(self):
        ticket = self.create_ticket()
        self.client.authenticate_user(self.admin)
        response = self.client.patch(f'{self.base_url}reply/{ticket.id}/', {'reply': '   '}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Reply cannot be empty')

    def test_reply_to_missing_ticket(self):
        self.client.authenticate_user(self.admin)
        response = self.client.patch(f'{self.base_url}reply/9999/', {'reply': 'Hello'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_only_admin_replies(self):
        ticket = self.create_ticket()
        response = self.client.patch(f'{self.base_url}reply/{ticket.id}/', {'reply': 'Self answer'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class FarmerSupportTicketAPITests(SupportTicketAPITests):
    base_url = '/api/v1/farmer-support/'
    model = FarmerSupportTicket

    def setUp(self):
        super().setUp()
        self.user = TestDataFactory.create_farmer()
        self.client.authenticate_user(self.user)

    def test_tickets_are_kept_apart(self):
        self.create_ticket()
        self.assertEqual(FarmerSupportTicket.objects.count(), 1)
        self.assertEqual(SupportTicket.objects.count(), 0)
