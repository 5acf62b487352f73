import logging

from django.shortcuts import render, redirect
from django.core.paginator import Paginator
from django.utils.http import url_has_allowed_host_and_scheme
from django.views.decorators.http import require_POST
from rest_framework import status
from rest_framework.decorators import api_view, parser_classes
from rest_framework.exceptions import ParseError
from rest_framework.parsers import JSONParser
from rest_framework.response import Response

from apps.accounts.decorators import admin_required, salesman_required, signin_required, role_required
from apps.accounts.services import UserService
from apps.accounts.session import AccessContext, CollectingNotifier
from . import policies
from .forms import (
    ActivityForm,
    LeadAssignForm,
    LeadBulkAssignForm,
    LeadFilterForm,
    LeadFollowUpForm,
    LeadForm,
)
from .serializers import LeadActivitySerializer, LeadDetailSerializer, LeadSerializer
from .services import ActivityService, LeadService, filter_leads

logger = logging.getLogger(__name__)

LEADS_PER_PAGE = 50


def _home_for(context):
    if context.is_salesman():
        return 'leads:my_leads'
    if context.is_admin():
        return 'leads:lead_list'
    return 'core:dashboard'


def _redirect_back(request, default):
    next_url = request.POST.get('next') or request.GET.get('next')
    if next_url and url_has_allowed_host_and_scheme(next_url, allowed_hosts={request.get_host()}):
        return redirect(next_url)
    return redirect(default)


def _filtered_page(request, leads):
    filter_form = LeadFilterForm(request.GET)
    search, status = '', 'all'
    if filter_form.is_valid():
        search = filter_form.cleaned_data.get('search') or ''
        status = filter_form.cleaned_data.get('status') or 'all'

    filtered = filter_leads(leads, search=search, status=status)

    paginator = Paginator(filtered, LEADS_PER_PAGE)
    page_obj = paginator.get_page(request.GET.get('page', 1))

    return {
        'leads': page_obj,
        'page_obj': page_obj,
        'is_paginated': page_obj.has_other_pages(),
        'filter_form': filter_form,
        'search_query': search,
        'shown_count': len(filtered),
        'total_count': len(leads),
    }


@admin_required
def lead_list_view(request):
    """All leads, quick assignment of unassigned leads and bulk assignment"""
    context = AccessContext.from_request(request)
    service = LeadService(context)
    assignees = UserService(context).list_assignable_users()

    page_context = _filtered_page(request, service.list_leads())
    page_context.update({
        'page_title': 'All Leads',
        'create_form': LeadForm(),
        'assignees': assignees,
        'quick_assign_leads': service.unassigned_leads(limit=3),
        'bulk_assign_form': LeadBulkAssignForm(assignees=assignees),
        'can_delete': True,
    })
    return render(request, 'leads/lead_list.html', page_context)


@salesman_required
def my_leads_view(request):
    """Leads assigned to the signed-in salesman"""
    context = AccessContext.from_request(request)
    page_context = _filtered_page(request, LeadService(context).list_leads())
    page_context.update({
        'page_title': 'My Leads',
        'can_delete': False,
    })
    return render(request, 'leads/my_leads.html', page_context)


@signin_required
def lead_detail_view(request, pk):
    context = AccessContext.from_request(request)
    lead = LeadService(context).get_lead(pk)

    if lead is None:
        # Not part of the caller's visible set: explicit not-found state
        return render(request, 'leads/lead_not_found.html', {'page_title': 'Lead Not Found', 'back_url': _home_for(context)}, status=404)

    activities = ActivityService(context).list_activities(lead.pk)

    followup_form = LeadFollowUpForm(initial={
        'status': lead.status,
        'next_followup_date': lead.next_followup_date,
        'followup_note': lead.followup_note,
        'notes': lead.notes,
    })

    detail_context = {
        'page_title': lead.full_name or 'Lead Details',
        'lead': lead,
        'activities': activities,
        'followup_form': followup_form,
        'activity_form': ActivityForm(),
        'can_edit': policies.can_update(context, lead),
        'can_delete': policies.can_delete(context),
        'can_assign': policies.can_assign(context),
        'active_tab': request.GET.get('tab', 'overview'),
        'back_url': _home_for(context),
    }
    if detail_context['can_assign']:
        detail_context['assign_form'] = LeadAssignForm(
            assignees=UserService(context).list_assignable_users(),
            initial={'assigned_to': str(lead.assigned_to_id) if lead.assigned_to_id else ''},
        )

    return render(request, 'leads/lead_detail.html', detail_context)


@role_required('admin', 'manager')
def lead_create_view(request):
    context = AccessContext.from_request(request)

    if request.method == 'POST':
        form = LeadForm(request.POST)
        if form.is_valid():
            result = LeadService(context).create_lead(form.lead_fields())
            if result:
                return redirect('leads:lead_detail', pk=result.data.pk)
    else:
        form = LeadForm()

    return render(request, 'leads/lead_form.html', {
        'form': form,
        'form_title': 'Create New Lead',
        'submit_text': 'Create',
        'cancel_url': _home_for(context),
    })


@admin_required
def lead_edit_view(request, pk):
    context = AccessContext.from_request(request)
    service = LeadService(context)
    lead = service.get_lead(pk)

    if lead is None:
        return render(request, 'leads/lead_not_found.html', {'page_title': 'Lead Not Found', 'back_url': _home_for(context)}, status=404)

    if request.method == 'POST':
        form = LeadForm(request.POST, instance=lead)
        if form.is_valid():
            result = service.update_lead(lead.pk, form.cleaned_data)
            if result:
                return redirect('leads:lead_detail', pk=lead.pk)
    else:
        form = LeadForm(instance=lead)

    return render(request, 'leads/lead_form.html', {
        'form': form,
        'lead': lead,
        'form_title': 'Edit Lead',
        'submit_text': 'Save',
        'cancel_url': 'leads:lead_list',
    })


@signin_required
@require_POST
def lead_update_view(request, pk):
    """Status / follow-up / notes update from the detail page"""
    context = AccessContext.from_request(request)
    form = LeadFollowUpForm(request.POST)

    if form.is_valid():
        LeadService(context).update_lead(pk, form.cleaned_data)
    else:
        context.notify_error('Error updating lead', 'Please correct the errors in the form')

    return redirect('leads:lead_detail', pk=pk)


@signin_required
@require_POST
def lead_delete_view(request, pk):
    # Non-admin callers reach the service and get a denied mutation back
    context = AccessContext.from_request(request)
    result = LeadService(context).delete_lead(pk)
    if result:
        return _redirect_back(request, _home_for(context))
    return redirect('leads:lead_detail', pk=pk)


@admin_required
@require_POST
def lead_assign_view(request, pk):
    context = AccessContext.from_request(request)
    form = LeadAssignForm(request.POST, assignees=UserService(context).list_assignable_users())

    if form.is_valid():
        LeadService(context).update_lead(pk, {'assigned_to': form.cleaned_data['assigned_to']})
    else:
        context.notify_error('Error assigning lead', 'Please select a salesman')

    return _redirect_back(request, 'leads:lead_list')


@admin_required
@require_POST
def lead_bulk_assign_view(request):
    context = AccessContext.from_request(request)
    form = LeadBulkAssignForm(request.POST, assignees=UserService(context).list_assignable_users())

    if form.is_valid():
        LeadService(context).bulk_assign(form.cleaned_data['lead_ids'], form.cleaned_data['assigned_to'])
    else:
        errors = '; '.join(' '.join(e) for e in form.errors.values())
        context.notify_error('Error assigning leads', errors)

    return _redirect_back(request, 'leads:lead_list')


@signin_required
@require_POST
def lead_add_activity_view(request, pk):
    context = AccessContext.from_request(request)
    form = ActivityForm(request.POST)

    if form.is_valid():
        ActivityService(context).add_activity(
            pk,
            form.cleaned_data['activity_type'],
            form.cleaned_data['activity_text'],
        )
    else:
        context.notify_error('Error adding activity', 'Activity text is required')

    detail_url = redirect('leads:lead_detail', pk=pk).url
    return redirect(f'{detail_url}?tab=activity')


# JSON ENDPOINTS
def _json_context(request):
    notifier = CollectingNotifier()
    return AccessContext.from_request(request, notifier=notifier), notifier


@signin_required
@api_view(['GET'])
def lead_list_json_view(request):
    context, _ = _json_context(request)
    leads = LeadService(context).list_leads()
    return Response({'leads': LeadSerializer(leads, many=True).data})


@signin_required
@api_view(['GET'])
def lead_json_view(request, pk):
    context, _ = _json_context(request)
    lead = LeadService(context).get_lead(pk)
    if lead is None:
        return Response({'error': 'Lead not found'}, status=status.HTTP_404_NOT_FOUND)
    return Response(LeadDetailSerializer(lead).data)


@signin_required
@api_view(['GET'])
def lead_activities_json_view(request, pk):
    context, _ = _json_context(request)
    activities = ActivityService(context).list_activities(pk)
    return Response({'activities': LeadActivitySerializer(activities, many=True).data})


@signin_required
@api_view(['POST'])
@parser_classes([JSONParser])
def lead_quick_update_view(request, pk):
    """
    JSON patch of a lead

    Body: {"status": "contacted", "next_followup_date": "2026-11-02", ...}
    """
    context, notifier = _json_context(request)

    try:
        updates = request.data
    except ParseError:
        return Response({'success': False, 'error': 'Invalid JSON'}, status=status.HTTP_400_BAD_REQUEST)
    if not isinstance(updates, dict):
        return Response({'success': False, 'error': 'Expected a JSON object'}, status=status.HTTP_400_BAD_REQUEST)

    result = LeadService(context).update_lead(pk, updates)
    if not result:
        return Response(
            {'success': False, 'error': result.message, 'notifications': notifier.notifications},
            status=status.HTTP_400_BAD_REQUEST,
        )

    return Response({
        'success': True,
        'message': result.message,
        'lead': LeadSerializer(result.data).data,
        'notifications': notifier.notifications,
    })
