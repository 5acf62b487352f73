"""
Lead Views Tests
================

Test Coverage:
1. List View - lead_list_view (admin) / my_leads_view (salesman)
2. Detail View - lead_detail_view, not-found state
3. Create / Edit Views
4. Update / Delete / Assign / Bulk Assign
5. Activity View
6. JSON endpoints

Run tests:
    python manage.py test apps.leads.tests.test_views
"""

import json

from django.contrib.auth import get_user_model
from django.contrib.messages import get_messages
from django.core.cache import cache
from django.test import TestCase, Client
from django.urls import reverse

from apps.accounts.models import UserRole
from apps.leads.models import Lead, LeadActivity

User = get_user_model()


def make_user(email, role=None):
    user = User.objects.create_user(email=email, password='testpass123')
    if role:
        UserRole.objects.create(user=user, role=role)
    return User.objects.get(pk=user.pk)


class LeadViewTestBase(TestCase):

    def setUp(self):
        cache.clear()
        self.client = Client()

        self.admin = make_user('admin@tvs.test', role='admin')
        self.manager = make_user('manager@tvs.test', role='manager')
        self.salesman = make_user('sales@tvs.test', role='salesman')
        self.other_salesman = make_user('sales2@tvs.test', role='salesman')

        self.own_lead = Lead.objects.create(full_name='Own Lead', bike_model='Ronin', assigned_to=self.salesman)
        self.other_lead = Lead.objects.create(full_name='Other Lead', assigned_to=self.other_salesman)
        self.free_lead = Lead.objects.create(full_name='Free Lead', bike_model='Jupiter')


class LeadListViewTest(LeadViewTestBase):

    def test_admin_sees_all_leads(self):
        self.client.force_login(self.admin)
        response = self.client.get(reverse('leads:lead_list'))

        self.assertEqual(response.status_code, 200)
        self.assertTemplateUsed(response, 'leads/lead_list.html')
        self.assertEqual(response.context['total_count'], 3)
        self.assertEqual([lead.id for lead in response.context['quick_assign_leads']], [self.free_lead.id])

    def test_search_and_status_filter(self):
        self.client.force_login(self.admin)
        response = self.client.get(reverse('leads:lead_list'), {'search': 'jupiter', 'status': 'all'})

        self.assertEqual(response.context['shown_count'], 1)
        self.assertEqual(response.context['leads'][0].full_name, 'Free Lead')

    def test_salesman_redirected_to_dashboard(self):
        self.client.force_login(self.salesman)
        response = self.client.get(reverse('leads:lead_list'))

        self.assertRedirects(response, reverse('core:dashboard'))

    def test_anonymous_redirected_to_sign_in(self):
        response = self.client.get(reverse('leads:lead_list'))

        self.assertRedirects(response, '/auth/?next=/dashboard/leads/')

    def test_my_leads_for_salesman(self):
        self.client.force_login(self.salesman)
        response = self.client.get(reverse('leads:my_leads'))

        self.assertEqual(response.status_code, 200)
        self.assertEqual([lead.id for lead in response.context['leads']], [self.own_lead.id])

    def test_my_leads_not_for_admin(self):
        self.client.force_login(self.admin)
        response = self.client.get(reverse('leads:my_leads'))

        self.assertRedirects(response, reverse('core:dashboard'))


class LeadDetailViewTest(LeadViewTestBase):

    def test_salesman_sees_own_lead(self):
        self.client.force_login(self.salesman)
        response = self.client.get(reverse('leads:lead_detail', args=[self.own_lead.pk]))

        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.context['can_edit'])
        self.assertFalse(response.context['can_delete'])

    def test_lead_outside_visible_set_is_not_found(self):
        self.client.force_login(self.salesman)
        response = self.client.get(reverse('leads:lead_detail', args=[self.other_lead.pk]))

        self.assertEqual(response.status_code, 404)
        self.assertTemplateUsed(response, 'leads/lead_not_found.html')

    def test_unknown_lead_is_not_found(self):
        self.client.force_login(self.admin)
        response = self.client.get(reverse('leads:lead_detail', args=[999999]))

        self.assertEqual(response.status_code, 404)
        self.assertTemplateUsed(response, 'leads/lead_not_found.html')

    def test_manager_views_but_cannot_edit(self):
        self.client.force_login(self.manager)
        response = self.client.get(reverse('leads:lead_detail', args=[self.free_lead.pk]))

        self.assertEqual(response.status_code, 200)
        self.assertFalse(response.context['can_edit'])

    def test_activity_tab(self):
        LeadActivity.objects.create(lead=self.own_lead, activity_type='note_added', activity_text='Called', created_by=self.salesman)
        self.client.force_login(self.salesman)
        response = self.client.get(reverse('leads:lead_detail', args=[self.own_lead.pk]) + '?tab=activity')

        self.assertEqual(len(response.context['activities']), 1)
        self.assertContains(response, 'Called')


class LeadCreateEditViewTest(LeadViewTestBase):

    def test_admin_creates_lead(self):
        self.client.force_login(self.admin)
        response = self.client.post(reverse('leads:lead_create'), {
            'full_name': 'Walk In',
            'phone_number': '9000000000',
            'bike_model': 'Raider',
            'status': 'new',
        })

        lead = Lead.objects.get(full_name='Walk In')
        self.assertRedirects(response, reverse('leads:lead_detail', args=[lead.pk]))

    def test_manager_may_open_create_form(self):
        self.client.force_login(self.manager)
        response = self.client.get(reverse('leads:lead_create'))
        self.assertEqual(response.status_code, 200)

    def test_salesman_cannot_create(self):
        self.client.force_login(self.salesman)
        response = self.client.post(reverse('leads:lead_create'), {'full_name': 'Nope', 'status': 'new'})

        self.assertRedirects(response, reverse('core:dashboard'))
        self.assertFalse(Lead.objects.filter(full_name='Nope').exists())

    def test_admin_edits_lead(self):
        self.client.force_login(self.admin)
        response = self.client.post(reverse('leads:lead_edit', args=[self.free_lead.pk]), {
            'full_name': 'Free Lead Renamed',
            'status': 'qualified',
        })

        self.assertRedirects(response, reverse('leads:lead_detail', args=[self.free_lead.pk]))
        self.free_lead.refresh_from_db()
        self.assertEqual(self.free_lead.full_name, 'Free Lead Renamed')
        self.assertEqual(self.free_lead.status, 'qualified')


class LeadMutationViewTest(LeadViewTestBase):

    def test_salesman_updates_follow_up(self):
        self.client.force_login(self.salesman)
        response = self.client.post(reverse('leads:lead_update', args=[self.own_lead.pk]), {
            'status': 'contacted',
            'next_followup_date': '2030-01-15',
            'followup_note': 'Test ride',
        })

        self.assertRedirects(response, reverse('leads:lead_detail', args=[self.own_lead.pk]))
        self.own_lead.refresh_from_db()
        self.assertEqual(self.own_lead.status, 'contacted')
        self.assertEqual(str(self.own_lead.next_followup_date), '2030-01-15')

    def test_salesman_cannot_update_other_lead(self):
        self.client.force_login(self.salesman)
        self.client.post(reverse('leads:lead_update', args=[self.other_lead.pk]), {'status': 'lost'})

        self.other_lead.refresh_from_db()
        self.assertEqual(self.other_lead.status, 'new')

    def test_admin_deletes_lead(self):
        self.client.force_login(self.admin)
        response = self.client.post(reverse('leads:lead_delete', args=[self.free_lead.pk]))

        self.assertRedirects(response, reverse('leads:lead_list'))
        self.assertFalse(Lead.objects.filter(pk=self.free_lead.pk).exists())

    def test_salesman_delete_is_denied_mutation(self):
        self.client.force_login(self.salesman)
        response = self.client.post(reverse('leads:lead_delete', args=[self.own_lead.pk]))

        self.assertRedirects(response, reverse('leads:lead_detail', args=[self.own_lead.pk]))
        self.assertTrue(Lead.objects.filter(pk=self.own_lead.pk).exists())
        messages = [str(m) for m in get_messages(response.wsgi_request)]
        self.assertTrue(any('Error deleting lead' in m for m in messages))

    def test_delete_requires_post(self):
        self.client.force_login(self.admin)
        response = self.client.get(reverse('leads:lead_delete', args=[self.free_lead.pk]))
        self.assertEqual(response.status_code, 405)

    def test_assign(self):
        self.client.force_login(self.admin)
        self.client.post(reverse('leads:lead_assign', args=[self.free_lead.pk]), {'assigned_to': str(self.salesman.pk)})

        self.free_lead.refresh_from_db()
        self.assertEqual(self.free_lead.assigned_to_id, self.salesman.pk)

    def test_bulk_assign(self):
        self.client.force_login(self.admin)
        response = self.client.post(reverse('leads:lead_bulk_assign'), {
            'lead_ids': f'{self.free_lead.pk},{self.other_lead.pk}',
            'assigned_to': str(self.salesman.pk),
        })

        self.assertRedirects(response, reverse('leads:lead_list'))
        self.assertEqual(Lead.objects.filter(assigned_to=self.salesman).count(), 3)
        messages = [str(m) for m in get_messages(response.wsgi_request)]
        self.assertIn('2 leads assigned successfully', messages)

    def test_add_activity(self):
        self.client.force_login(self.salesman)
        response = self.client.post(reverse('leads:lead_add_activity', args=[self.own_lead.pk]), {
            'activity_type': 'note_added',
            'activity_text': 'Customer asked for EMI options',
        })

        self.assertRedirects(response, reverse('leads:lead_detail', args=[self.own_lead.pk]) + '?tab=activity')
        activity = LeadActivity.objects.get(lead=self.own_lead)
        self.assertEqual(activity.created_by_id, self.salesman.pk)


class LeadJsonViewTest(LeadViewTestBase):

    def test_lead_list_json_scoped(self):
        self.client.force_login(self.salesman)
        response = self.client.get(reverse('leads:lead_list_json'))

        self.assertEqual(response.status_code, 200)
        self.assertEqual([l['id'] for l in response.json()['leads']], [self.own_lead.pk])

    def test_lead_json(self):
        self.client.force_login(self.admin)
        response = self.client.get(reverse('leads:lead_json', args=[self.own_lead.pk]))

        data = response.json()
        self.assertEqual(data['full_name'], 'Own Lead')
        self.assertEqual(data['assigned_to'], str(self.salesman.pk))
        self.assertEqual(data['status_display'], 'New')

    def test_lead_json_not_found(self):
        self.client.force_login(self.salesman)
        response = self.client.get(reverse('leads:lead_json', args=[self.other_lead.pk]))
        self.assertEqual(response.status_code, 404)

    def test_activities_json(self):
        LeadActivity.objects.create(lead=self.own_lead, activity_type='note_added', activity_text='Called')
        self.client.force_login(self.salesman)
        response = self.client.get(reverse('leads:lead_activities_json', args=[self.own_lead.pk]))

        activities = response.json()['activities']
        self.assertEqual(len(activities), 1)
        self.assertIsNone(activities[0]['created_by_profile'])

    def test_quick_update(self):
        self.client.force_login(self.salesman)
        response = self.client.post(
            reverse('leads:lead_quick_update', args=[self.own_lead.pk]),
            data=json.dumps({'id': 555, 'status': 'qualified'}),
            content_type='application/json',
        )

        data = response.json()
        self.assertTrue(data['success'])
        self.assertEqual(data['lead']['id'], self.own_lead.pk)
        self.assertEqual(data['lead']['status'], 'qualified')

    def test_quick_update_denied(self):
        self.client.force_login(self.salesman)
        response = self.client.post(
            reverse('leads:lead_quick_update', args=[self.other_lead.pk]),
            data=json.dumps({'status': 'lost'}),
            content_type='application/json',
        )

        self.assertEqual(response.status_code, 400)
        self.assertFalse(response.json()['success'])
        self.assertEqual(response.json()['notifications'][0]['title'], 'Error updating lead')

    def test_quick_update_bad_json(self):
        self.client.force_login(self.admin)
        response = self.client.post(
            reverse('leads:lead_quick_update', args=[self.free_lead.pk]),
            data='not json',
            content_type='application/json',
        )
        self.assertEqual(response.status_code, 400)

    def test_quick_update_non_string_date(self):
        self.client.force_login(self.salesman)
        response = self.client.post(
            reverse('leads:lead_quick_update', args=[self.own_lead.pk]),
            data=json.dumps({'next_followup_date': 5}),
            content_type='application/json',
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error'], 'Invalid follow-up date: 5')

    def test_quick_update_requires_json_body(self):
        self.client.force_login(self.admin)
        response = self.client.post(reverse('leads:lead_quick_update', args=[self.free_lead.pk]), {'status': 'lost'})

        self.assertEqual(response.status_code, 415)
        self.free_lead.refresh_from_db()
        self.assertEqual(self.free_lead.status, 'new')
