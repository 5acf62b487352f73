"""
Team performance

Per-salesman lead counts by status and conversion rate, recomputed from the
role, profile and lead tables on every cache miss. Nothing is maintained
incrementally; lead and role mutations simply drop the cached result.
"""

import logging
from collections import Counter

from django.core.cache import cache

from apps.accounts.models import ROLE_SALESMAN, UserProfile, UserRole

logger = logging.getLogger(__name__)

TEAM_PERFORMANCE_KEY = 'team-performance'

# status → SalesmanStats attribute
STATUS_COUNTERS = {
    'new': 'new_leads',
    'contacted': 'contacted_leads',
    'qualified': 'qualified_leads',
    'converted': 'converted_leads',
    'lost': 'lost_leads',
}


def conversion_rate(converted, total):
    """converted / total as a percentage; 0 when there is nothing to convert."""
    if total == 0:
        return 0.0
    return (converted / total) * 100


class SalesmanStats:

    def __init__(self, user_id, email, full_name):
        self.user_id = user_id
        self.email = email
        self.full_name = full_name
        self.total_leads = 0
        self.new_leads = 0
        self.contacted_leads = 0
        self.qualified_leads = 0
        self.converted_leads = 0
        self.lost_leads = 0
        self.conversion_rate = 0.0

    def __repr__(self):
        return f"<SalesmanStats {self.email} total={self.total_leads} rate={self.conversion_rate:.1f}>"

    @property
    def display_name(self):
        return self.full_name or self.email.split('@')[0]

    @property
    def badge(self):
        return performance_badge(self.conversion_rate)

    def add_lead(self, status):
        self.total_leads += 1
        counter = STATUS_COUNTERS.get(status)
        if counter:
            setattr(self, counter, getattr(self, counter) + 1)


def compute_team_performance():
    """
    Build one SalesmanStats per salesman, busiest first

    Steps:
    1. Role rows with role = salesman (none → empty result, no more queries)
    2. Profiles of those salesmen
    3. Every lead (assignee and status only)
    4. Zeroed stats per salesman, then one count per lead assigned to a salesman
    5. Conversion rate per salesman
    6. Sort by total leads, descending

    Unassigned leads and leads held by other roles are left out of every total.
    """
    from apps.leads.models import Lead

    salesman_ids = list(
        UserRole.objects.filter(role=ROLE_SALESMAN).values_list('user_id', flat=True)
    )
    if not salesman_ids:
        return []

    profiles = UserProfile.objects.filter(user_id__in=salesman_ids).select_related('user')

    stats_map = {}
    for profile in profiles:
        stats_map[profile.user_id] = SalesmanStats(
            user_id=profile.user_id,
            email=profile.email or profile.user.email or 'Unknown',
            full_name=profile.full_name or None,
        )

    for assigned_to, status in Lead.objects.values_list('assigned_to_id', 'status'):
        if assigned_to is None:
            continue
        stats = stats_map.get(assigned_to)
        if stats is None:
            continue
        stats.add_lead(status)

    for stats in stats_map.values():
        stats.conversion_rate = conversion_rate(stats.converted_leads, stats.total_leads)

    return sorted(stats_map.values(), key=lambda s: s.total_leads, reverse=True)


def get_team_performance():
    stats = cache.get(TEAM_PERFORMANCE_KEY)
    if stats is None:
        stats = compute_team_performance()
        cache.set(TEAM_PERFORMANCE_KEY, stats)
        logger.debug(f"Team performance recomputed for {len(stats)} salesmen")
    return stats


def invalidate_team_performance():
    cache.delete(TEAM_PERFORMANCE_KEY)


def performance_badge(rate):
    if rate >= 40:
        return 'Excellent'
    if rate >= 25:
        return 'Good'
    if rate >= 10:
        return 'Average'
    return 'New'


def team_summary(stats):
    """Headline numbers for the team performance page."""
    total_leads = sum(s.total_leads for s in stats)
    total_converted = sum(s.converted_leads for s in stats)
    top_performer = None
    for s in stats:
        if top_performer is None or s.conversion_rate > top_performer.conversion_rate:
            top_performer = s

    return {
        'total_salesmen': len(stats),
        'total_leads_assigned': total_leads,
        'total_converted': total_converted,
        'average_conversion_rate': round(conversion_rate(total_converted, total_leads), 1),
        'top_performer': top_performer,
    }


def summarize_leads(leads):
    """
    Dashboard figures for a list of leads already scoped to the caller

    Returns totals, conversion rate (one decimal), the status distribution
    (statuses with at least one lead) and the five most requested bike models.
    """
    from apps.leads.models import Lead

    status_counts = Counter(lead.status for lead in leads)
    total = len(leads)
    converted = status_counts.get('converted', 0)

    status_distribution = [
        {'status': value, 'name': label, 'value': status_counts.get(value, 0)}
        for value, label in Lead.STATUS_CHOICES
        if status_counts.get(value, 0) > 0
    ]

    bike_counts = Counter(lead.bike_model or 'Unknown' for lead in leads)
    top_bikes = sorted(bike_counts.items(), key=lambda item: item[1], reverse=True)[:5]

    return {
        'total_leads': total,
        'new_leads': status_counts.get('new', 0),
        'converted_leads': converted,
        'conversion_rate': round(conversion_rate(converted, total), 1),
        'status_distribution': status_distribution,
        'bike_models': [{'name': name, 'value': value} for name, value in top_bikes],
    }
