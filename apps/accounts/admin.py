from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.translation import gettext_lazy as _
from django.utils.html import format_html
from .models import User, UserProfile, UserRole, get_effective_role


ROLE_COLORS = {
    'admin': '#dc3545',
    'manager': '#6f42c1',
    'salesman': '#007bff',
    'user': '#6c757d',
}


# PROFILE / ROLE INLINES (edit inside the user form)
class UserProfileInline(admin.StackedInline):

    model = UserProfile

    # OneToOne: exactly one profile
    can_delete = False
    verbose_name = _('User Profile')
    verbose_name_plural = _('User Profile')

    fk_name = "user"
    extra = 0
    max_num = 1

    fields = ('full_name', 'email', 'avatar_url')


class UserRoleInline(admin.StackedInline):

    model = UserRole
    can_delete = True
    verbose_name = _('Role')
    verbose_name_plural = _('Role')

    fk_name = "user"
    extra = 0
    max_num = 1


# CUSTOM USER ADMIN
@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = (
        'email',
        'get_full_name_display',
        'role_badge',
        'is_active',
        'date_joined',
    )

    list_display_links = ('email', 'get_full_name_display')

    list_filter = (
        'role_assignment__role',
        'is_active',
        'is_staff',
        'date_joined',
    )
    search_fields = (
        'email',
        'profile__full_name',
    )

    ordering = ('-date_joined',)
    list_per_page = 25
    list_select_related = ('profile', 'role_assignment')

    fieldsets = (
        (_('Login Credentials'), {
            'fields': ('email', 'password'),
            'classes': ('wide',),
            'description': _('Email is used for sign-in. Password is stored hashed.')
        }),
        (_('Permissions'), {
            'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions'),
            'classes': ('collapse',),
        }),
        (_('Activity Tracking'), {
            'fields': ('date_joined', 'last_login'),
            'classes': ('collapse',),
        }),
    )

    # Fields shown when creating NEW user
    add_fieldsets = (
        (_('Login Credentials'), {
            'fields': ('email', 'password1', 'password2'),
            'classes': ('wide',),
        }),
    )

    readonly_fields = ('date_joined', 'last_login')

    inlines = [UserProfileInline, UserRoleInline]

    def get_full_name_display(self, obj):
        return obj.get_full_name()

    get_full_name_display.short_description = _('Full Name')
    get_full_name_display.admin_order_field = 'profile__full_name'

    def role_badge(self, obj):
        role = get_effective_role(obj)
        return format_html(
            '<span style="background: {}; color: white; padding: 3px 10px; '
            'border-radius: 3px; font-size: 11px;">{}</span>',
            ROLE_COLORS.get(role, '#6c757d'), role.title()
        )

    role_badge.short_description = _('Role')
    role_badge.admin_order_field = 'role_assignment__role'


@admin.register(UserRole)
class UserRoleAdmin(admin.ModelAdmin):
    list_display = ('user', 'role', 'updated_at')
    list_filter = ('role',)
    search_fields = ('user__email',)
    list_select_related = ('user',)
