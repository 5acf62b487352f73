# Decorators in this file:
# 1. role_required - Only the listed roles can access
# 2. admin_required - Only admins can access
# 3. salesman_required - Only salesmen can access
#
# Routing rules:
# - Anonymous caller on a protected route → sign-in page (/auth/)
# - Signed-in caller whose role is not allowed → their default dashboard
#
# These checks are a convenience for navigation only. Data access is
# enforced again by the services and their policies.
# ==============================================================================

from functools import wraps
from django.shortcuts import redirect
from django.contrib import messages
from django.contrib.auth.views import redirect_to_login
from django.http import JsonResponse
from django.utils.translation import gettext_lazy as _

from .models import ROLE_ADMIN, ROLE_SALESMAN, get_effective_role


def _is_ajax(request):
    return request.headers.get('X-Requested-With') == 'XMLHttpRequest'


# Where a signed-in caller lands when a route is not meant for them
DEFAULT_DASHBOARD = 'core:dashboard'


def _deny_anonymous(request):
    if _is_ajax(request):
        return JsonResponse({'success': False, 'error': 'Authentication required'}, status=401)
    messages.info(request, _('Please sign in to continue.'))
    return redirect_to_login(request.get_full_path())


def _deny_role(request, message):
    if _is_ajax(request):
        return JsonResponse({'success': False, 'error': str(message)}, status=403)
    messages.error(request, message)
    return redirect(DEFAULT_DASHBOARD)


# ROLE-BASED DECORATORS
def role_required(*allowed_roles):
    """
    Decorator: Only specific roles can access

    Args:
        *allowed_roles: Role names allowed through

    Usage:
    @role_required('admin', 'manager')
    def leads_overview(request):
        ...
    """

    def decorator(view_func):
        @wraps(view_func)
        def wrapper(request, *args, **kwargs):
            if not request.user.is_authenticated:
                return _deny_anonymous(request)

            if get_effective_role(request.user) in allowed_roles:
                return view_func(request, *args, **kwargs)

            return _deny_role(request, _('You do not have permission to access this page.'))

        return wrapper

    return decorator


def admin_required(view_func):
    """
    Decorator: Only admins can access this view

    Checks:
    1. User is authenticated (logged in)
    2. User role is 'admin'
    """

    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        if not request.user.is_authenticated:
            return _deny_anonymous(request)

        if get_effective_role(request.user) == ROLE_ADMIN:
            return view_func(request, *args, **kwargs)

        return _deny_role(
            request,
            _('You do not have permission to access this page. Admin access required.')
        )

    return wrapper


def salesman_required(view_func):

    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        if not request.user.is_authenticated:
            return _deny_anonymous(request)

        if get_effective_role(request.user) == ROLE_SALESMAN:
            return view_func(request, *args, **kwargs)

        return _deny_role(request, _('This page is only accessible to salesmen.'))

    return wrapper


def signin_required(view_func):
    """Any signed-in role; anonymous callers are sent to the sign-in page."""

    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        if not request.user.is_authenticated:
            return _deny_anonymous(request)
        return view_func(request, *args, **kwargs)

    return wrapper
