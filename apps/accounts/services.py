"""
User/role accessor

All reads and writes of profiles and role rows go through UserService.
Every method takes its caller from the AccessContext it was built with.
"""

import logging

from django.core.cache import cache
from django.core.exceptions import ValidationError
from django.core.validators import validate_email
from django.db import DatabaseError

from .models import ROLE_ADMIN, ROLE_CHOICES, DEFAULT_ROLE, UserProfile, UserRole, User
from .provisioning import ProvisioningError, get_provisioning_client
from .session import MutationResult

logger = logging.getLogger(__name__)

USERS_CACHE_KEY = 'users:list'

VALID_ROLES = [value for value, label in ROLE_CHOICES]


class UserWithRole:
    """A profile joined with its role row."""

    def __init__(self, profile, role):
        self.id = profile.user_id
        self.email = profile.email or profile.user.email
        self.full_name = profile.full_name or None
        self.avatar_url = profile.avatar_url or None
        self.created_at = profile.created_at
        self.role = role

    def __repr__(self):
        return f"<UserWithRole {self.email} role={self.role}>"

    @property
    def display_name(self):
        return self.full_name or self.email


class UserService:

    def __init__(self, context):
        self.context = context

    # READS
    def list_users(self):
        """
        Every profile, newest first, left-joined with its role row

        Profiles without a role row report the 'user' role ('admin' for superusers).
        """
        users = cache.get(USERS_CACHE_KEY)
        if users is not None:
            return users

        profiles = list(UserProfile.objects.select_related('user').order_by('-created_at'))
        roles = {row.user_id: row.role for row in UserRole.objects.all()}

        users = [
            UserWithRole(profile, roles.get(profile.user_id, ROLE_ADMIN if profile.user.is_superuser else DEFAULT_ROLE))
            for profile in profiles
        ]
        cache.set(USERS_CACHE_KEY, users)
        return users

    def list_assignable_users(self):
        """Users a lead can be handed to: salesmen and administrators."""
        return [u for u in self.list_users() if u.role in ('salesman', 'admin')]

    def list_salesmen(self):
        return [u for u in self.list_users() if u.role == 'salesman']

    # WRITES
    def update_role(self, user_id, role):
        """
        Set the role of a user

        Writing the same role twice leaves the same state behind.
        """
        title = 'Error updating user role'

        if role not in VALID_ROLES:
            self.context.notify_error(title, f'Invalid role: {role}')
            return MutationResult.failure(f'Invalid role: {role}')

        if not self.context.is_admin():
            message = 'Only administrators can change roles'
            self.context.notify_error(title, message)
            return MutationResult.failure(message)

        try:
            if not User.objects.filter(pk=user_id).exists():
                raise ValueError('User not found')
            UserRole.objects.update_or_create(user_id=user_id, defaults={'role': role})
        except ValidationError:
            # Malformed primary key
            self.context.notify_error(title, 'User not found')
            return MutationResult.failure('User not found')
        except (DatabaseError, ValueError) as e:
            self.context.notify_error(title, str(e))
            return MutationResult.failure(str(e))

        self._invalidate()
        logger.info(f"Role of {user_id} set to {role} by {self.context.user_id}")
        self.context.notify_success('User role updated successfully')
        return MutationResult.success('User role updated successfully')

    def create_user(self, email, password, full_name, role):
        """
        Provision a new account through the trusted provisioning procedure

        Requires a signed-in administrator; any other caller, an unknown role
        or a malformed email fails here and no provisioning call is made.
        """
        title = 'Error creating user'

        if not self.context.is_authenticated:
            message = 'You must be logged in to create users'
            self.context.notify_error(title, message)
            return MutationResult.failure(message)

        if not self.context.is_admin():
            message = 'Only administrators can create users'
            self.context.notify_error(title, message)
            return MutationResult.failure(message)

        if role not in VALID_ROLES:
            self.context.notify_error(title, f'Invalid role: {role}')
            return MutationResult.failure(f'Invalid role: {role}')

        try:
            validate_email(email or '')
        except ValidationError:
            message = 'Enter a valid email address'
            self.context.notify_error(title, message)
            return MutationResult.failure(message)

        payload = {
            'email': email,
            'password': password,
            'full_name': full_name,
            'role': role,
        }

        try:
            data = get_provisioning_client().create_user(payload, self.context.session_token)
        except ProvisioningError as e:
            self.context.notify_error(title, str(e) or 'Failed to create user')
            return MutationResult.failure(str(e) or 'Failed to create user')

        self._invalidate()
        self.context.notify_success('User created successfully')
        return MutationResult.success('User created successfully', data=data)

    def _invalidate(self):
        invalidate_users()
        # Role changes move people in and out of the salesman set
        from apps.leads.performance import invalidate_team_performance
        invalidate_team_performance()


def invalidate_users():
    cache.delete(USERS_CACHE_KEY)
