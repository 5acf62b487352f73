# Models:
# 1. User - Custom user model (identity, email login)
# 2. UserProfile - Display information shown across the dashboard
# 3. UserRole - The single role row that governs routing and data visibility

import uuid

from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin, BaseUserManager
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


# ROLES
ROLE_ADMIN = 'admin'
ROLE_MANAGER = 'manager'
ROLE_SALESMAN = 'salesman'
ROLE_USER = 'user'

ROLE_CHOICES = [
    (ROLE_ADMIN, _('Administrator')),
    (ROLE_MANAGER, _('Manager')),
    (ROLE_SALESMAN, _('Salesman')),
    (ROLE_USER, _('User')),
]

# Effective role of a profile that has no role row
DEFAULT_ROLE = ROLE_USER


# USER MANAGER (handles user creation)
class UserManager(BaseUserManager):
    """
    Custom user manager for User model

    Provides methods to:
    - Create regular users
    - Create superusers (admins)
    - Handle email-based authentication
    """

    def create_user(self, email, password=None, **extra_fields):
        """
        Create and save a regular user

        Args:
            email (str): User's email address (required)
            password (str): User's password
            **extra_fields: Additional User fields

        Returns:
            User: The created user object

        Raises:
            ValueError: If email is not provided

        Example:
            user = User.objects.create_user(
                email='salesman@tvs.com',
                password='securepass123',
            )
        """
        if not email:
            raise ValueError(_('Users must have an email address'))

        email = self.normalize_email(email)

        extra_fields.setdefault('is_active', True)
        extra_fields.setdefault('is_staff', False)
        extra_fields.setdefault('is_superuser', False)

        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)

        return user

    def create_superuser(self, email, password=None, **extra_fields):
        """
        Create and save a superuser

        The superuser also receives an 'admin' role row so the dashboard
        treats it as an administrator.
        """
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('is_active', True)

        if extra_fields.get('is_staff') is not True:
            raise ValueError(_('Superuser must have is_staff=True'))
        if extra_fields.get('is_superuser') is not True:
            raise ValueError(_('Superuser must have is_superuser=True'))

        user = self.create_user(email, password, **extra_fields)
        UserRole.objects.update_or_create(user=user, defaults={'role': ROLE_ADMIN})
        return user


# USER MODEL
class User(AbstractBaseUser, PermissionsMixin):
    """
    Authentication identity

    The primary key is an opaque UUID; profiles, role rows, lead assignees
    and activity creators all refer to it.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email = models.EmailField(_('email address'), unique=True, max_length=255, db_index=True, help_text=_('Required. Used for login.'))
    is_active = models.BooleanField(_('active'), default=True, help_text=_('Designates whether this user should be treated as active.'))
    is_staff = models.BooleanField(_('staff status'), default=False, help_text=_('Designates whether the user can log into admin site.'))
    date_joined = models.DateTimeField(_('date joined'), default=timezone.now)

    objects = UserManager()

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = []

    class Meta:
        verbose_name = _('user')
        verbose_name_plural = _('users')
        ordering = ['-date_joined']

    def __str__(self):
        full_name = self.get_full_name()
        if full_name != self.email:
            return f"{full_name} ({self.email})"
        return self.email

    # HELPER METHODS
    def get_full_name(self):
        profile = getattr(self, 'profile', None)
        if profile and profile.full_name:
            return profile.full_name
        return self.email

    def get_short_name(self):
        return self.get_full_name().split(' ')[0]

    def get_initials(self):
        parts = self.get_full_name().split()
        if len(parts) >= 2:
            return f"{parts[0][0]}{parts[1][0]}".upper()
        return self.email[0].upper()

    # ROLE CHECKS
    @property
    def role(self):
        """Effective role: the role row value, or 'user' when there is none."""
        return get_effective_role(self)

    def is_admin(self):
        return self.role == ROLE_ADMIN

    def is_manager(self):
        return self.role == ROLE_MANAGER

    def is_salesman(self):
        return self.role == ROLE_SALESMAN


# USER PROFILE MODEL
class UserProfile(models.Model):
    """
    Display information for a user

    Automatically created when a User is created (via signals), so every
    identity has exactly one profile. The profile shares its identity with
    the user it belongs to.
    """

    user = models.OneToOneField(User, on_delete=models.CASCADE, primary_key=True, related_name='profile', verbose_name=_('user'))
    email = models.EmailField(_('email'), max_length=255, blank=True, help_text=_('Copied from the user at creation time'))
    full_name = models.CharField(_('full name'), max_length=150, blank=True, help_text=_('Display name (e.g., Asha Rao)'))
    avatar_url = models.URLField(_('avatar'), max_length=500, blank=True, help_text=_('Link to the profile picture'))
    created_at = models.DateTimeField(_('created at'), auto_now_add=True)
    updated_at = models.DateTimeField(_('updated at'), auto_now=True)

    class Meta:
        verbose_name = _('user profile')
        verbose_name_plural = _('user profiles')
        ordering = ['-created_at']

    def __str__(self):
        return f"Profile for: {self.display_name}"

    @property
    def display_name(self):
        return self.full_name or self.email or str(self.user_id)

    @property
    def role(self):
        return get_effective_role(self.user)


# USER ROLE MODEL
class UserRole(models.Model):
    """
    Role assignment for a user

    At most one row per user. Missing rows are read as the 'user' role.
    Only administrators change role rows (see accounts.services.UserService).
    """

    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='role_assignment', verbose_name=_('user'))
    role = models.CharField(_('role'), max_length=20, choices=ROLE_CHOICES, default=ROLE_USER, db_index=True)
    created_at = models.DateTimeField(_('created at'), auto_now_add=True)
    updated_at = models.DateTimeField(_('updated at'), auto_now=True)

    class Meta:
        verbose_name = _('user role')
        verbose_name_plural = _('user roles')

    def __str__(self):
        return f"{self.user.email}: {self.get_role_display()}"


def get_effective_role(user):
    """
    Resolve the role of a user

    The role row wins. Without one, superusers read as 'admin' and everyone
    else as 'user'. Anonymous users have no role (None).
    """
    if user is None or not getattr(user, 'is_authenticated', False):
        return None
    try:
        return user.role_assignment.role
    except UserRole.DoesNotExist:
        return ROLE_ADMIN if user.is_superuser else DEFAULT_ROLE
