from datetime import timedelta

from django.conf import settings
from django.shortcuts import render, redirect
from django.utils import timezone
from rest_framework.decorators import api_view
from rest_framework.response import Response

from apps.accounts.decorators import admin_required, signin_required
from apps.accounts.services import UserService, VALID_ROLES
from apps.accounts.session import AccessContext
from apps.leads.performance import get_team_performance, summarize_leads, team_summary
from apps.leads.serializers import SalesmanStatsSerializer
from apps.leads.services import LeadService


def index_view(request):
    """Landing page; signed-in callers go straight to their dashboard"""
    if request.user.is_authenticated:
        return redirect('core:dashboard')
    return render(request, 'core/index.html', {'page_title': 'Welcome'})


@signin_required
def dashboard_view(request):
    """
    Main dashboard view
    - Salesman: figures over the leads assigned to them
    - Every other role: figures over all leads
    """
    context = AccessContext.from_request(request)
    leads = LeadService(context).list_leads()

    today = timezone.localdate()

    # 1. Key metrics, distribution and bike models
    summary = summarize_leads(leads)

    # 2. Follow-ups due
    overdue_leads = [lead for lead in leads if lead.is_overdue()]
    due_today = [
        lead for lead in leads
        if lead.next_followup_date == today and not lead.is_closed()
    ]

    # 3. Daily trend (last 7 days)
    daily_map = {}
    for lead in leads:
        day = timezone.localtime(lead.created_at).date()
        daily_map[day] = daily_map.get(day, 0) + 1

    last_7_days = []
    for i in range(6, -1, -1):
        day = today - timedelta(days=i)
        last_7_days.append({
            'date': day.strftime('%Y-%m-%d'),
            'date_label': day.strftime('%d %b'),
            'count': daily_map.get(day, 0),
        })

    page_context = {
        **summary,
        'stats_label': 'My' if context.is_salesman() else 'All',
        'overdue_leads': overdue_leads[:10],
        'overdue_count': len(overdue_leads),
        'due_today': due_today[:10],
        'recent_leads': sorted(leads, key=lambda lead: lead.created_at, reverse=True)[:10],
        'last_7_days': last_7_days,
        'role': context.role,
        'active_page': 'dashboard',
        'page_title': 'Dashboard',
    }

    return render(request, 'core/dashboard.html', page_context)


@admin_required
def settings_view(request):
    """Read-only view of the running configuration and the role spread"""
    context = AccessContext.from_request(request)
    users = UserService(context).list_users()

    role_counts = {role: 0 for role in VALID_ROLES}
    for user in users:
        role_counts[user.role] = role_counts.get(user.role, 0) + 1

    page_context = {
        'role_counts': role_counts,
        'total_users': len(users),
        'provisioning_client': settings.USER_PROVISIONING_CLIENT.rsplit('.', 1)[-1],
        'provisioning_url': settings.USER_PROVISIONING_URL or None,
        'cache_timeout': settings.CACHE_TIMEOUT,
        'debug': settings.DEBUG,
        'active_page': 'settings',
        'page_title': 'Settings',
    }
    return render(request, 'core/settings.html', page_context)


@admin_required
def team_performance_view(request):
    stats = get_team_performance()

    page_context = {
        'stats': stats,
        'summary': team_summary(stats),
        'active_page': 'performance',
        'page_title': 'Team Performance',
    }
    return render(request, 'core/team_performance.html', page_context)


@admin_required
@api_view(['GET'])
def team_performance_json_view(request):
    stats = get_team_performance()
    summary = team_summary(stats)
    top = summary['top_performer']

    return Response({
        'salesmen': SalesmanStatsSerializer(stats, many=True).data,
        'summary': {
            'totalSalesmen': summary['total_salesmen'],
            'totalLeadsAssigned': summary['total_leads_assigned'],
            'totalConverted': summary['total_converted'],
            'averageConversionRate': summary['average_conversion_rate'],
            'topPerformer': SalesmanStatsSerializer(top).data if top else None,
        },
    })


def page_not_found_view(request, exception=None):
    return render(request, '404.html', {'page_title': 'Page Not Found', 'path': request.path}, status=404)
