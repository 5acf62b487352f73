import re

from django import forms
from django.core.exceptions import ValidationError
from .models import Lead, LeadActivity, BIKE_MODELS, PURCHASE_TIMELINES


PHONE_RE = re.compile(r'^\+?[\d\s\-]{6,20}$')


def _choices(values, empty_label):
    return [('', empty_label)] + [(value, value) for value in values]


class LeadForm(forms.ModelForm):
    """Create/edit form; the service does the saving."""

    bike_model = forms.ChoiceField(choices=_choices(BIKE_MODELS, 'Select model'), required=False, widget=forms.Select(attrs={'class': 'form-select'}))
    purchase_timeline = forms.ChoiceField(choices=_choices(PURCHASE_TIMELINES, 'Select timeline'), required=False, widget=forms.Select(attrs={'class': 'form-select'}))

    class Meta:
        model = Lead
        fields = ['full_name', 'phone_number', 'bike_model', 'post_code', 'purchase_timeline', 'source', 'status', 'notes']

        widgets = {
            'full_name': forms.TextInput(attrs={'class': 'form-control', 'placeholder': 'John Doe', 'autofocus': True}),
            'phone_number': forms.TextInput(attrs={'class': 'form-control', 'placeholder': '+91 9876543210', 'dir': 'ltr'}),
            'post_code': forms.TextInput(attrs={'class': 'form-control', 'placeholder': '110001'}),
            'source': forms.TextInput(attrs={'class': 'form-control', 'placeholder': 'Walk-in, Website, ...'}),
            'status': forms.Select(attrs={'class': 'form-select'}),
            'notes': forms.Textarea(attrs={'class': 'form-control', 'rows': 3, 'placeholder': 'Additional notes...'}),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        if not self.instance.pk:
            self.fields['status'].initial = 'new'

    def clean_phone_number(self):
        phone = (self.cleaned_data.get('phone_number') or '').strip()
        if phone and not PHONE_RE.match(phone):
            raise ValidationError('Phone number may only contain digits, spaces, dashes and a leading +')
        return phone

    def lead_fields(self):
        """cleaned_data without the empty optional fields a create would not send"""
        return {
            field: value
            for field, value in self.cleaned_data.items()
            if value not in (None, '') or field == 'status'
        }


class LeadFollowUpForm(forms.Form):
    """Status and follow-up edit from the lead detail page"""

    status = forms.ChoiceField(choices=Lead.STATUS_CHOICES, label='Status', widget=forms.Select(attrs={'class': 'form-select'}))
    next_followup_date = forms.DateField(required=False, label='Next Follow-up Date', widget=forms.DateInput(attrs={'class': 'form-control', 'type': 'date'}))
    followup_note = forms.CharField(required=False, label='Follow-up Note', widget=forms.Textarea(attrs={'class': 'form-control', 'rows': 3, 'placeholder': 'What needs to be done on follow-up?'}))
    notes = forms.CharField(required=False, label='Notes', widget=forms.Textarea(attrs={'class': 'form-control', 'rows': 3, 'placeholder': 'Add notes about this lead...'}))

    def clean(self):
        cleaned_data = super().clean()
        # Converted leads carry no pending follow-up
        if cleaned_data.get('status') == 'converted':
            cleaned_data['next_followup_date'] = None
            cleaned_data['followup_note'] = ''
        return cleaned_data


def _assignee_choices(users):
    return [('', 'Select salesman')] + [(str(u.id), u.display_name) for u in users]


class LeadAssignForm(forms.Form):
    assigned_to = forms.ChoiceField(choices=[], label='Assign To', widget=forms.Select(attrs={'class': 'form-select'}))

    def __init__(self, *args, **kwargs):
        assignees = kwargs.pop('assignees', [])
        super().__init__(*args, **kwargs)
        self.fields['assigned_to'].choices = _assignee_choices(assignees)


class LeadBulkAssignForm(forms.Form):
    lead_ids = forms.CharField(widget=forms.HiddenInput(), required=True)
    assigned_to = forms.ChoiceField(choices=[], label='Assign To', widget=forms.Select(attrs={'class': 'form-select'}))

    def __init__(self, *args, **kwargs):
        assignees = kwargs.pop('assignees', [])
        super().__init__(*args, **kwargs)
        self.fields['assigned_to'].choices = _assignee_choices(assignees)

    def clean_lead_ids(self):
        lead_ids = self.cleaned_data.get('lead_ids', '')
        try:
            id_list = [int(lead_id.strip()) for lead_id in lead_ids.split(',') if lead_id.strip()]
        except ValueError:
            raise ValidationError('Invalid lead IDs')
        if not id_list:
            raise ValidationError('No leads selected')
        return id_list


class ActivityForm(forms.Form):
    activity_type = forms.ChoiceField(choices=LeadActivity.ACTIVITY_TYPE_CHOICES, label='Type', initial=LeadActivity.ACTIVITY_NOTE_ADDED, widget=forms.Select(attrs={'class': 'form-select'}))
    activity_text = forms.CharField(label='Details', widget=forms.Textarea(attrs={'class': 'form-control', 'rows': 3}), error_messages={'required': 'Activity text is required'})


class LeadFilterForm(forms.Form):
    search = forms.CharField(required=False, label='Search', widget=forms.TextInput(attrs={'class': 'form-control', 'placeholder': 'Search by name, phone, or bike model...'}))
    status = forms.ChoiceField(choices=[('all', 'All Statuses')] + Lead.STATUS_CHOICES, required=False, label='Status', widget=forms.Select(attrs={'class': 'form-select'}))
