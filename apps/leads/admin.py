from django.contrib import admin
from django.utils.html import format_html
from .models import Lead, LeadActivity


STATUS_COLORS = {
    'new': '#17a2b8',
    'contacted': '#ffc107',
    'qualified': '#007bff',
    'converted': '#28a745',
    'lost': '#dc3545',
}


class LeadActivityInline(admin.TabularInline):

    model = LeadActivity
    extra = 0  # Activities are appended by the app, never edited
    readonly_fields = ['created_at', 'created_by', 'activity_type', 'activity_text']
    fields = ['created_at', 'created_by', 'activity_type', 'activity_text']
    classes = ['collapse']
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False


@admin.register(Lead)
class LeadAdmin(admin.ModelAdmin):

    list_display = [
        'id',
        'full_name',
        'phone_number',
        'bike_model',
        'status_badge',
        'assigned_to',
        'next_followup_date',
        'created_at',
    ]

    list_filter = ['status', 'bike_model', 'purchase_timeline', 'created_at']
    search_fields = ['full_name', 'phone_number', 'bike_model', 'post_code']
    list_select_related = ['assigned_to']
    readonly_fields = ['created_at']
    list_per_page = 50

    fieldsets = (
        ('Contact', {
            'fields': ('full_name', 'phone_number', 'post_code'),
        }),
        ('Interest', {
            'fields': ('bike_model', 'purchase_timeline', 'source', 'lead_time'),
        }),
        ('Lifecycle', {
            'fields': ('status', 'assigned_to', 'next_followup_date', 'followup_note', 'notes'),
        }),
        ('Tracking', {
            'fields': ('created_at',),
            'classes': ('collapse',),
        }),
    )

    inlines = [LeadActivityInline]

    def status_badge(self, obj):
        return format_html(
            '<span style="background: {}; color: white; padding: 3px 10px; '
            'border-radius: 3px; font-size: 11px;">{}</span>',
            STATUS_COLORS.get(obj.status, '#6c757d'), obj.get_status_display()
        )

    status_badge.short_description = 'Status'
    status_badge.admin_order_field = 'status'


@admin.register(LeadActivity)
class LeadActivityAdmin(admin.ModelAdmin):
    list_display = ['created_at', 'lead', 'activity_type', 'creator_label']
    list_filter = ['activity_type', 'created_at']
    search_fields = ['activity_text', 'lead__full_name']
    list_select_related = ['lead', 'created_by']

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
