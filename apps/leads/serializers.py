"""
JSON shapes served by the lead and performance endpoints

Serializers only render. Writes go through LeadService, which owns
validation, authorization and cache invalidation.
"""

from rest_framework import serializers

from .models import Lead, LeadActivity


class LeadSerializer(serializers.ModelSerializer):

    class Meta:
        model = Lead
        fields = [
            'id',
            'full_name',
            'phone_number',
            'bike_model',
            'lead_time',
            'post_code',
            'purchase_timeline',
            'source',
            'created_at',
            'assigned_to',
            'status',
            'notes',
            'next_followup_date',
            'followup_note',
        ]
        read_only_fields = fields


class LeadDetailSerializer(LeadSerializer):
    """A lead plus the display values the detail drawer shows"""

    status_display = serializers.CharField(source='get_status_display', read_only=True)
    assigned_to_name = serializers.SerializerMethodField()
    time_until_follow_up = serializers.CharField(read_only=True)
    is_overdue = serializers.BooleanField(read_only=True)

    class Meta(LeadSerializer.Meta):
        fields = LeadSerializer.Meta.fields + [
            'status_display',
            'assigned_to_name',
            'time_until_follow_up',
            'is_overdue',
        ]

    def get_assigned_to_name(self, lead):
        return lead.assigned_to.get_full_name() if lead.assigned_to else None


class LeadActivitySerializer(serializers.ModelSerializer):
    lead_id = serializers.IntegerField(read_only=True)
    created_by_profile = serializers.SerializerMethodField()

    class Meta:
        model = LeadActivity
        fields = [
            'id',
            'lead_id',
            'activity_type',
            'activity_text',
            'created_by',
            'created_by_profile',
            'created_at',
        ]

    def get_created_by_profile(self, activity):
        # Entries without a creator were written by the system
        if activity.created_by_id is None:
            return None
        profile = getattr(activity.created_by, 'profile', None)
        return {
            'full_name': (profile.full_name or None) if profile else None,
            'email': profile.email if profile and profile.email else activity.created_by.email,
        }


class SalesmanStatsSerializer(serializers.Serializer):
    """camelCase keys, as the performance page's charts read them"""

    userId = serializers.UUIDField(source='user_id', read_only=True)
    email = serializers.CharField(read_only=True)
    fullName = serializers.CharField(source='full_name', read_only=True, allow_null=True)
    totalLeads = serializers.IntegerField(source='total_leads', read_only=True)
    newLeads = serializers.IntegerField(source='new_leads', read_only=True)
    contactedLeads = serializers.IntegerField(source='contacted_leads', read_only=True)
    qualifiedLeads = serializers.IntegerField(source='qualified_leads', read_only=True)
    convertedLeads = serializers.IntegerField(source='converted_leads', read_only=True)
    lostLeads = serializers.IntegerField(source='lost_leads', read_only=True)
    conversionRate = serializers.FloatField(source='conversion_rate', read_only=True)
