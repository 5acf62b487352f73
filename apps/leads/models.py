import uuid

from django.db import models
from django.urls import reverse
from django.utils import timezone
from apps.accounts.models import User


# Status lifecycle: new → contacted → qualified → converted / lost
STATUS_NEW = 'new'
STATUS_CONTACTED = 'contacted'
STATUS_QUALIFIED = 'qualified'
STATUS_CONVERTED = 'converted'
STATUS_LOST = 'lost'

# Values written by the cold/warm/hot revision of the lead table
LEGACY_STATUS_MAP = {
    'cold': STATUS_NEW,
    'warm': STATUS_CONTACTED,
    'hot': STATUS_QUALIFIED,
}


def normalize_status(value):
    """Map a legacy status onto the canonical lifecycle; other values pass through."""
    if value is None:
        return value
    value = str(value).strip().lower()
    return LEGACY_STATUS_MAP.get(value, value)


BIKE_MODELS = [
    'Apache RTR 160',
    'Apache RTR 180',
    'Apache RTR 200',
    'Apache RR 310',
    'Jupiter',
    'Ntorq',
    'iQube',
    'Raider',
    'Ronin',
]

PURCHASE_TIMELINES = [
    'Immediate',
    'Within 1 week',
    'Within 1 month',
    'Within 3 months',
    'Just exploring',
]


class Lead(models.Model):

    STATUS_CHOICES = [
        (STATUS_NEW, 'New'),
        (STATUS_CONTACTED, 'Contacted'),
        (STATUS_QUALIFIED, 'Qualified'),
        (STATUS_CONVERTED, 'Converted'),
        (STATUS_LOST, 'Lost'),
    ]

    CLOSED_STATUSES = [STATUS_CONVERTED, STATUS_LOST]

    # Contact Information
    full_name = models.CharField(max_length=200, blank=True, null=True, help_text="Lead's full name")
    phone_number = models.CharField(max_length=20, blank=True, null=True, db_index=True, help_text='Phone number (e.g. +91 9876543210)')
    post_code = models.CharField(max_length=12, blank=True, null=True, help_text='Post code of the customer')

    # Interest
    bike_model = models.CharField(max_length=100, blank=True, null=True, help_text='Bike model the lead is interested in')
    purchase_timeline = models.CharField(max_length=50, blank=True, null=True, help_text='When the lead plans to buy')
    source = models.CharField(max_length=100, blank=True, null=True, help_text='Where did this lead come from?')
    lead_time = models.CharField(max_length=100, blank=True, null=True, help_text='Time the enquiry was received, as reported by the source')

    # Lifecycle
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_NEW, db_index=True, help_text='Current lifecycle status')
    assigned_to = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='assigned_leads', db_index=True, help_text='Salesperson responsible for this lead')
    next_followup_date = models.DateField(null=True, blank=True, db_index=True, help_text='When is the next follow-up scheduled?')
    followup_note = models.TextField(blank=True, null=True, help_text='What needs to be done on follow-up')

    notes = models.TextField(blank=True, null=True, help_text='General notes about this lead')

    created_at = models.DateTimeField(default=timezone.now, db_index=True, help_text='When was this lead created')

    class Meta:
        verbose_name = 'Lead'
        verbose_name_plural = 'Leads'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['assigned_to', 'status'], name='leads_assignee_status_idx'),
        ]

    def __str__(self):
        return f"{self.full_name or 'Unknown'} ({self.phone_number or '-'}) - {self.get_status_display()}"

    def save(self, *args, **kwargs):
        self.status = normalize_status(self.status) or STATUS_NEW
        super().save(*args, **kwargs)

    def get_absolute_url(self):
        return reverse('leads:lead_detail', kwargs={'pk': self.pk})

    def get_initials(self):
        """Returns first letters for avatar: 'Asha Rao' → 'AR'"""
        parts = (self.full_name or '').split()
        if len(parts) >= 2:
            return f"{parts[0][0]}{parts[1][0]}".upper()
        elif len(parts) == 1:
            return parts[0][0].upper()
        return "?"

    def is_closed(self):
        return self.status in self.CLOSED_STATUSES

    def is_overdue(self):
        """Open lead whose follow-up date has already passed"""
        if self.is_closed() or not self.next_followup_date:
            return False
        return self.next_followup_date < timezone.localdate()

    def time_until_follow_up(self):
        if not self.next_followup_date or self.is_closed():
            return None

        days = (self.next_followup_date - timezone.localdate()).days

        if days < 0:
            return "Overdue"
        if days == 0:
            return "Today"
        if days == 1:
            return "Tomorrow"
        return f"In {days} days"


class ActivityImmutableError(Exception):
    """Activities are an append-only log."""
    pass


class LeadActivity(models.Model):

    ACTIVITY_STATUS_CHANGE = 'status_change'
    ACTIVITY_FOLLOWUP_SCHEDULED = 'followup_scheduled'
    ACTIVITY_NOTE_ADDED = 'note_added'
    ACTIVITY_CONVERTED = 'converted'
    ACTIVITY_LOST = 'lost'

    ACTIVITY_TYPE_CHOICES = [
        (ACTIVITY_STATUS_CHANGE, 'Status Change'),
        (ACTIVITY_FOLLOWUP_SCHEDULED, 'Follow-up Scheduled'),
        (ACTIVITY_NOTE_ADDED, 'Note Added'),
        (ACTIVITY_CONVERTED, 'Converted'),
        (ACTIVITY_LOST, 'Lost'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    lead = models.ForeignKey(Lead, on_delete=models.CASCADE, related_name='activities', help_text='Which lead this activity is for')
    activity_type = models.CharField(max_length=30, choices=ACTIVITY_TYPE_CHOICES, help_text='Type of activity')
    activity_text = models.TextField(help_text='Human-readable description of what happened')
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='lead_activities', help_text='Who performed this action')
    created_at = models.DateTimeField(default=timezone.now, db_index=True, help_text='When did this activity occur')

    class Meta:
        verbose_name = 'Lead Activity'
        verbose_name_plural = 'Lead Activities'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['lead', '-created_at'], name='leads_activity_lead_idx'),
        ]

    def __str__(self):
        return f"{self.creator_label}: {self.activity_text}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ActivityImmutableError('Lead activities cannot be modified')
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ActivityImmutableError('Lead activities cannot be deleted')

    @property
    def creator_label(self):
        """Full name, then email, then 'System' for entries without a creator"""
        if self.created_by_id is None:
            return 'System'
        profile = getattr(self.created_by, 'profile', None)
        if profile is not None:
            return profile.full_name or profile.email or self.created_by.email
        return self.created_by.email
