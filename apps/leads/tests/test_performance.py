"""
Team Performance Tests
======================

Run tests:
    python manage.py test apps.leads.tests.test_performance
"""

from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.test import TestCase, SimpleTestCase

from apps.accounts.models import UserProfile, UserRole
from apps.accounts.session import AccessContext
from apps.leads.models import Lead
from apps.leads.performance import (
    compute_team_performance,
    conversion_rate,
    get_team_performance,
    performance_badge,
    summarize_leads,
    team_summary,
)
from apps.leads.services import LeadService

User = get_user_model()


def make_user(email, role=None, full_name=''):
    user = User.objects.create_user(email=email, password='testpass123')
    if full_name:
        UserProfile.objects.filter(user=user).update(full_name=full_name)
    if role:
        UserRole.objects.create(user=user, role=role)
    return User.objects.get(pk=user.pk)


class ConversionRateTest(SimpleTestCase):

    def test_zero_total(self):
        self.assertEqual(conversion_rate(0, 0), 0.0)

    def test_percentage(self):
        self.assertEqual(conversion_rate(1, 4), 25.0)

    def test_badges(self):
        self.assertEqual(performance_badge(40), 'Excellent')
        self.assertEqual(performance_badge(39.9), 'Good')
        self.assertEqual(performance_badge(25), 'Good')
        self.assertEqual(performance_badge(10), 'Average')
        self.assertEqual(performance_badge(9.9), 'New')
        self.assertEqual(performance_badge(0), 'New')


class ComputeTeamPerformanceTest(TestCase):

    def setUp(self):
        cache.clear()

    def test_no_salesmen(self):
        make_user('admin@tvs.test', role='admin')
        Lead.objects.create(full_name='Orphan')

        with self.assertNumQueries(1):
            self.assertEqual(compute_team_performance(), [])

    def test_counts_per_salesman(self):
        admin = make_user('admin@tvs.test', role='admin')
        asha = make_user('asha@tvs.test', role='salesman', full_name='Asha Rao')
        ravi = make_user('ravi@tvs.test', role='salesman')
        idle = make_user('idle@tvs.test', role='salesman')

        for status in ('new', 'contacted', 'converted', 'lost'):
            Lead.objects.create(full_name=f'A {status}', status=status, assigned_to=asha)
        for status in ('converted', 'converted', 'qualified'):
            Lead.objects.create(full_name=f'R {status}', status=status, assigned_to=ravi)
        # Neither of these count towards any salesman
        Lead.objects.create(full_name='Unassigned', status='converted')
        Lead.objects.create(full_name='Admin held', status='converted', assigned_to=admin)

        stats = compute_team_performance()
        by_email = {s.email: s for s in stats}

        self.assertEqual([s.email for s in stats], ['asha@tvs.test', 'ravi@tvs.test', 'idle@tvs.test'])

        a = by_email['asha@tvs.test']
        self.assertEqual(a.full_name, 'Asha Rao')
        self.assertEqual((a.total_leads, a.new_leads, a.contacted_leads, a.qualified_leads, a.converted_leads, a.lost_leads), (4, 1, 1, 0, 1, 1))
        self.assertEqual(a.conversion_rate, 25.0)

        r = by_email['ravi@tvs.test']
        self.assertIsNone(r.full_name)
        self.assertEqual(r.display_name, 'ravi')
        self.assertEqual((r.total_leads, r.converted_leads, r.qualified_leads), (3, 2, 1))
        self.assertAlmostEqual(r.conversion_rate, 66.6667, places=3)

        i = by_email['idle@tvs.test']
        self.assertEqual((i.total_leads, i.conversion_rate), (0, 0.0))

    def test_cached_result_dropped_on_lead_change(self):
        admin = make_user('admin@tvs.test', role='admin')
        asha = make_user('asha@tvs.test', role='salesman')
        lead = Lead.objects.create(full_name='One', assigned_to=asha)

        self.assertEqual(get_team_performance()[0].converted_leads, 0)

        LeadService(AccessContext(user=admin)).update_lead(lead.pk, {'status': 'converted'})

        self.assertEqual(get_team_performance()[0].converted_leads, 1)

    def test_cached_result_dropped_on_role_change(self):
        make_user('asha@tvs.test', role='salesman')
        self.assertEqual(len(get_team_performance()), 1)

        make_user('ravi@tvs.test', role='salesman')
        self.assertEqual(len(get_team_performance()), 2)


class TeamSummaryTest(TestCase):

    def setUp(self):
        cache.clear()

    def test_summary(self):
        asha = make_user('asha@tvs.test', role='salesman', full_name='Asha')
        ravi = make_user('ravi@tvs.test', role='salesman', full_name='Ravi')
        Lead.objects.create(status='converted', assigned_to=asha)
        Lead.objects.create(status='new', assigned_to=asha)
        Lead.objects.create(status='new', assigned_to=ravi)
        Lead.objects.create(status='new', assigned_to=ravi)
        Lead.objects.create(status='new', assigned_to=ravi)

        summary = team_summary(compute_team_performance())

        self.assertEqual(summary['total_salesmen'], 2)
        self.assertEqual(summary['total_leads_assigned'], 5)
        self.assertEqual(summary['total_converted'], 1)
        self.assertEqual(summary['average_conversion_rate'], 20.0)
        self.assertEqual(summary['top_performer'].email, 'asha@tvs.test')

    def test_empty(self):
        summary = team_summary([])
        self.assertEqual(summary['total_salesmen'], 0)
        self.assertIsNone(summary['top_performer'])
        self.assertEqual(summary['average_conversion_rate'], 0.0)


class SummarizeLeadsTest(SimpleTestCase):

    def test_dashboard_figures(self):
        leads = [
            Lead(status='new', bike_model='Ronin'),
            Lead(status='new', bike_model='Ronin'),
            Lead(status='converted', bike_model='Jupiter'),
            Lead(status='lost', bike_model=None),
        ]

        summary = summarize_leads(leads)

        self.assertEqual(summary['total_leads'], 4)
        self.assertEqual(summary['new_leads'], 2)
        self.assertEqual(summary['converted_leads'], 1)
        self.assertEqual(summary['conversion_rate'], 25.0)
        self.assertEqual(
            [(d['status'], d['value']) for d in summary['status_distribution']],
            [('new', 2), ('converted', 1), ('lost', 1)],
        )
        self.assertEqual(summary['bike_models'][0], {'name': 'Ronin', 'value': 2})
        self.assertIn({'name': 'Unknown', 'value': 1}, summary['bike_models'])

    def test_empty(self):
        summary = summarize_leads([])
        self.assertEqual(summary['conversion_rate'], 0.0)
        self.assertEqual(summary['status_distribution'], [])
