"""
Lead repository and lead activity accessors

LeadService and ActivityService are the only code paths that read or write
leads and activities. Both are built around an AccessContext:

    context = AccessContext.from_request(request)
    leads = LeadService(context).list_leads()

Reads are cached through Django's cache framework. A successful mutation
invalidates the affected cache entries only after the write has returned, so
the next read by the same client sees it. Failed mutations change nothing,
invalidate nothing and report an error notification.
"""

import logging
from datetime import date

from django.core.cache import cache
from django.core.exceptions import ValidationError
from django.db import DatabaseError
from django.db.models import F
from django.utils.dateparse import parse_date

from apps.accounts.models import User
from apps.accounts.session import MutationResult
from . import policies
from .models import Lead, LeadActivity, normalize_status
from .performance import invalidate_team_performance

logger = logging.getLogger(__name__)


LEADS_VERSION_KEY = 'leads:version'
ACTIVITIES_KEY = 'lead-activities:{lead_id}'

# Fields a caller may write; id and created_at are owned by the store
WRITABLE_FIELDS = [
    'full_name',
    'phone_number',
    'bike_model',
    'post_code',
    'purchase_timeline',
    'source',
    'lead_time',
    'status',
    'notes',
    'next_followup_date',
    'followup_note',
    'assigned_to',
]

READ_ONLY_FIELDS = ['id', 'created_at']


def lead_list_ordering():
    """Soonest follow-up first (leads without one last), then newest."""
    return [F('next_followup_date').asc(nulls_last=True), F('created_at').desc()]


def _leads_version():
    version = cache.get(LEADS_VERSION_KEY)
    if version is None:
        version = 1
        cache.set(LEADS_VERSION_KEY, version, None)
    return version


def invalidate_leads():
    try:
        cache.incr(LEADS_VERSION_KEY)
    except ValueError:
        cache.set(LEADS_VERSION_KEY, 2, None)
    invalidate_team_performance()


def invalidate_activities(lead_id):
    cache.delete(ACTIVITIES_KEY.format(lead_id=lead_id))


def filter_leads(leads, search='', status='all'):
    """
    Narrow an already-fetched lead list the way the leads table does

    Name and bike model match case-insensitively, phone by substring.
    """
    search = (search or '').strip()
    needle = search.lower()
    status = status or 'all'

    filtered = []
    for lead in leads:
        if search:
            matches_search = (
                needle in (lead.full_name or '').lower()
                or search in (lead.phone_number or '')
                or needle in (lead.bike_model or '').lower()
            )
            if not matches_search:
                continue
        if status != 'all' and lead.status != status:
            continue
        filtered.append(lead)
    return filtered


class LeadService:

    def __init__(self, context):
        self.context = context

    # READS
    def _cache_key(self):
        return f"leads:v{_leads_version()}:{self.context.role}:{self.context.user_id}"

    def _visible_queryset(self):
        queryset = Lead.objects.select_related('assigned_to', 'assigned_to__profile')
        if self.context.is_salesman():
            queryset = queryset.filter(assigned_to_id=self.context.user_id)
        return queryset

    def list_leads(self):
        """
        Leads visible to the caller

        Salesmen see the leads assigned to them; every other role sees all
        leads. Signed-out callers get nothing and no query is made.
        """
        if not self.context.is_authenticated:
            return []

        key = self._cache_key()
        leads = cache.get(key)
        if leads is None:
            leads = list(self._visible_queryset().order_by(*lead_list_ordering()))
            cache.set(key, leads)
        return leads

    def get_lead(self, lead_id):
        """The lead with this id from the caller's visible set, or None."""
        try:
            lead_id = int(lead_id)
        except (TypeError, ValueError):
            return None
        for lead in self.list_leads():
            if lead.id == lead_id:
                return lead
        return None

    def unassigned_leads(self, limit=None):
        leads = [lead for lead in self.list_leads() if lead.assigned_to_id is None]
        return leads[:limit] if limit else leads

    # WRITES
    def create_lead(self, fields):
        """Insert a lead; status falls back to the table default ('new')."""
        title = 'Error creating lead'
        try:
            policies.check(policies.can_create(self.context), 'You do not have permission to create leads')
            values = self._clean_fields(fields, allow_assign=policies.can_assign(self.context))
            lead = Lead(**values)
            lead.full_clean()
            lead.save()
        except (policies.LeadPolicyError, ValidationError, DatabaseError, ValueError, TypeError) as e:
            return self._fail(title, e)

        invalidate_leads()
        logger.info(f"Lead {lead.pk} created by {self.context.user_id}")
        self.context.notify_success('Lead created successfully')
        return MutationResult.success('Lead created successfully', data=lead)

    def update_lead(self, lead_id, updates):
        """
        Apply a partial patch

        An 'id' key in the patch is dropped; the id of a lead never changes.
        """
        title = 'Error updating lead'
        updates = dict(updates or {})
        updates.pop('id', None)

        try:
            lead = Lead.objects.filter(pk=lead_id).first()
            if lead is None:
                raise ValueError('Lead not found')
            policies.check(policies.can_update(self.context, lead), 'You do not have permission to update this lead')

            allow_assign = policies.can_assign(self.context)
            values = self._clean_fields(updates, allow_assign=allow_assign)
            if not values:
                raise ValueError('Nothing to update')

            old_status = lead.status
            old_followup = lead.next_followup_date
            for field, value in values.items():
                setattr(lead, field, value)
            lead.full_clean()
            lead.save(update_fields=list(values.keys()))
        except (policies.LeadPolicyError, ValidationError, DatabaseError, ValueError, TypeError) as e:
            return self._fail(title, e)

        self._log_changes(lead, old_status, old_followup)
        invalidate_leads()
        logger.info(f"Lead {lead.pk} updated by {self.context.user_id}: {', '.join(values)}")
        self.context.notify_success('Lead updated successfully')
        return MutationResult.success('Lead updated successfully', data=lead)

    def delete_lead(self, lead_id):
        """Permanently remove a lead (administrators only)."""
        title = 'Error deleting lead'
        try:
            policies.check(policies.can_delete(self.context), 'Only administrators can delete leads')
            deleted, _ = Lead.objects.filter(pk=lead_id).delete()
            if not deleted:
                raise ValueError('Lead not found')
        except (policies.LeadPolicyError, DatabaseError, ValueError) as e:
            return self._fail(title, e)

        invalidate_leads()
        invalidate_activities(lead_id)
        logger.info(f"Lead {lead_id} deleted by {self.context.user_id}")
        self.context.notify_success('Lead deleted successfully')
        return MutationResult.success('Lead deleted successfully')

    def bulk_assign(self, lead_ids, assignee_id):
        """Hand every given lead to one salesperson in a single update."""
        title = 'Error assigning leads'
        lead_ids = list(lead_ids or [])
        try:
            policies.check(policies.can_assign(self.context), 'Only administrators can assign leads')
            if not lead_ids:
                raise ValueError('No leads selected')
            assignee = self._resolve_assignee(assignee_id)
            if assignee is None:
                raise ValueError('Please select a salesman')
            updated = Lead.objects.filter(id__in=lead_ids).update(assigned_to=assignee)
            if not updated:
                raise ValueError('Lead not found')
        except (policies.LeadPolicyError, ValidationError, DatabaseError, ValueError) as e:
            return self._fail(title, e)

        invalidate_leads()
        message = f'{updated} leads assigned successfully'
        logger.info(f"{message} to {assignee.pk} by {self.context.user_id}")
        self.context.notify_success(message)
        return MutationResult.success(message)

    # HELPERS
    def _fail(self, title, error):
        if isinstance(error, ValidationError) and hasattr(error, 'error_dict'):
            message = '; '.join(
                f"{field}: {' '.join(errors)}" for field, errors in error.message_dict.items()
            )
        elif isinstance(error, ValidationError):
            message = ' '.join(error.messages)
        else:
            message = str(error)
        logger.error(f"{title} for {self.context.user_id}: {message}")
        self.context.notify_error(title, message)
        return MutationResult.failure(message)

    def _resolve_assignee(self, assignee_id):
        if assignee_id in (None, ''):
            return None
        if isinstance(assignee_id, User):
            return assignee_id
        try:
            return User.objects.get(pk=assignee_id)
        except (User.DoesNotExist, ValidationError, ValueError):
            raise ValueError('Assignee not found')

    def _clean_fields(self, fields, allow_assign):
        values = {}
        for field, value in fields.items():
            if field in READ_ONLY_FIELDS:
                continue
            if field not in WRITABLE_FIELDS:
                raise ValueError(f'Unknown lead field: {field}')

            if field == 'assigned_to':
                if not allow_assign:
                    raise policies.LeadPolicyError('Only administrators can assign leads')
                value = self._resolve_assignee(value)
            elif field == 'status':
                value = normalize_status(value)
            elif field == 'next_followup_date':
                if value in ('', None):
                    value = None
                elif isinstance(value, str):
                    parsed = parse_date(value)
                    if parsed is None:
                        raise ValueError(f'Invalid follow-up date: {value}')
                    value = parsed
                elif not isinstance(value, date):
                    raise ValueError(f'Invalid follow-up date: {value}')
            elif isinstance(value, str):
                value = value.strip()

            values[field] = value
        return values

    def _log_changes(self, lead, old_status, old_followup):
        """Record status and follow-up changes in the lead's activity log."""
        entries = []
        if lead.status != old_status:
            if lead.status == 'converted':
                entries.append((LeadActivity.ACTIVITY_CONVERTED, 'Lead converted'))
            elif lead.status == 'lost':
                entries.append((LeadActivity.ACTIVITY_LOST, 'Lead marked as lost'))
            else:
                entries.append((
                    LeadActivity.ACTIVITY_STATUS_CHANGE,
                    f'Status changed from "{old_status}" to "{lead.status}"',
                ))
        if lead.next_followup_date and lead.next_followup_date != old_followup:
            entries.append((
                LeadActivity.ACTIVITY_FOLLOWUP_SCHEDULED,
                f'Follow-up scheduled for {lead.next_followup_date:%B %d, %Y}',
            ))

        for activity_type, text in entries:
            try:
                LeadActivity.objects.create(
                    lead=lead,
                    activity_type=activity_type,
                    activity_text=text,
                    created_by=self.context.user,
                )
            except DatabaseError as e:
                logger.error(f"Could not log activity for lead {lead.pk}: {e}")
        if entries:
            invalidate_activities(lead.pk)


class ActivityService:

    def __init__(self, context):
        self.context = context

    def list_activities(self, lead_id):
        """
        Activity log of one lead, newest first, with the creator's profile

        No lead selected means no fetch and an empty list.
        """
        if not lead_id or not self.context.is_authenticated:
            return []

        lead = Lead.objects.filter(pk=lead_id).only('id', 'assigned_to').first()
        if lead is None or not policies.can_view(self.context, lead):
            return []

        key = ACTIVITIES_KEY.format(lead_id=lead.pk)
        activities = cache.get(key)
        if activities is None:
            activities = list(
                LeadActivity.objects.filter(lead_id=lead.pk)
                .select_related('created_by', 'created_by__profile')
                .order_by('-created_at')
            )
            cache.set(key, activities)
        return activities

    def add_activity(self, lead_id, activity_type, activity_text):
        title = 'Error adding activity'
        valid_types = [value for value, label in LeadActivity.ACTIVITY_TYPE_CHOICES]

        try:
            if not self.context.is_authenticated:
                raise policies.LeadPolicyError('You must be logged in to add activities')
            if activity_type not in valid_types:
                raise ValueError(f'Invalid activity type: {activity_type}')
            if not (activity_text or '').strip():
                raise ValueError('Activity text is required')

            lead = Lead.objects.filter(pk=lead_id).first()
            if lead is None:
                raise ValueError('Lead not found')
            policies.check(policies.can_view(self.context, lead), 'You do not have access to this lead')

            activity = LeadActivity.objects.create(
                lead=lead,
                activity_type=activity_type,
                activity_text=activity_text.strip(),
                created_by=self.context.user,
            )
        except (policies.LeadPolicyError, DatabaseError, ValueError) as e:
            logger.error(f"{title} for {self.context.user_id}: {e}")
            self.context.notify_error(title, str(e))
            return MutationResult.failure(str(e))

        invalidate_activities(lead.pk)
        self.context.notify_success('Activity added successfully')
        return MutationResult.success('Activity added successfully', data=activity)
