import logging

from django.shortcuts import render, redirect
from django.contrib.auth import authenticate, login, logout
from django.contrib import messages
from django.utils.http import url_has_allowed_host_and_scheme
from django.utils.translation import gettext_lazy as _
from django.views.decorators.http import require_POST
from django.views.decorators.cache import never_cache
from rest_framework.decorators import api_view
from rest_framework.response import Response

from .models import UserProfile
from .forms import LoginForm, CreateUserForm, RoleUpdateForm, UserProfileForm
from .decorators import admin_required, signin_required
from .serializers import UserWithRoleSerializer
from .services import UserService, VALID_ROLES
from .session import AccessContext, CollectingNotifier

logger = logging.getLogger(__name__)


# AUTHENTICATION VIEWS
@never_cache
def login_view(request):
    # Already signed in: straight to the dashboard
    if request.user.is_authenticated:
        return redirect('core:dashboard')

    if request.method == 'POST':
        form = LoginForm(request.POST)

        if form.is_valid():
            email = form.cleaned_data['email']
            password = form.cleaned_data['password']

            user = authenticate(request, username=email, password=password)

            if user is not None:
                login(request, user)
                logger.info(f"User {user.pk} signed in")

                messages.success(
                    request,
                    _('Welcome back, {}!').format(user.get_full_name())
                )

                next_url = request.GET.get('next') or request.POST.get('next')
                if next_url and url_has_allowed_host_and_scheme(next_url, allowed_hosts={request.get_host()}):
                    return redirect(next_url)
                return redirect('core:dashboard')

            messages.error(
                request,
                _('Invalid email or password. Please try again.')
            )
        else:
            messages.error(request, _('Please correct the errors below.'))

    else:
        form = LoginForm()

    context = {
        'form': form,
        'page_title': _('Sign In'),
        'next': request.GET.get('next', ''),
    }

    return render(request, 'accounts/login.html', context)


def logout_view(request):
    if request.user.is_authenticated:
        logger.info(f"User {request.user.pk} signed out")
        logout(request)
        messages.success(request, _('You have been signed out.'))
    return redirect('accounts:login')


# PROFILE VIEWS
@signin_required
def profile_view(request):
    profile, _created = UserProfile.objects.get_or_create(
        user=request.user,
        defaults={'email': request.user.email},
    )

    if request.method == 'POST':
        form = UserProfileForm(request.POST, instance=profile)
        if form.is_valid():
            form.save()
            messages.success(request, _('Profile updated successfully'))
            return redirect('accounts:profile')
        messages.error(request, _('Please correct the errors below.'))
    else:
        form = UserProfileForm(instance=profile)

    context = {
        'profile': profile,
        'form': form,
        'role': request.user.role,
        'page_title': _('My Profile'),
    }

    return render(request, 'accounts/profile.html', context)


# USER MANAGEMENT VIEWS (Admin Only)
@admin_required
def user_list_view(request):
    context = AccessContext.from_request(request)
    users = UserService(context).list_users()

    search_query = request.GET.get('q', '').strip()
    if search_query:
        needle = search_query.lower()
        users = [
            u for u in users
            if needle in (u.full_name or '').lower() or needle in (u.email or '').lower()
        ]

    role_filter = request.GET.get('role', '')
    if role_filter in VALID_ROLES:
        users = [u for u in users if u.role == role_filter]

    role_counts = {role: 0 for role in VALID_ROLES}
    for u in users:
        role_counts[u.role] = role_counts.get(u.role, 0) + 1

    page_context = {
        'users': users,
        'total_users': len(users),
        'role_counts': role_counts,
        'search_query': search_query,
        'role_filter': role_filter,
        'create_form': CreateUserForm(),
        'role_form': RoleUpdateForm(),
        'roles': VALID_ROLES,
        'page_title': _('User Management'),
    }

    return render(request, 'accounts/user_list.html', page_context)


@admin_required
def user_create_view(request):
    context = AccessContext.from_request(request)

    if request.method == 'POST':
        form = CreateUserForm(request.POST)
        if form.is_valid():
            result = UserService(context).create_user(
                email=form.cleaned_data['email'],
                password=form.cleaned_data['password'],
                full_name=form.cleaned_data['full_name'],
                role=form.cleaned_data['role'],
            )
            if result:
                return redirect('accounts:user_list')
    else:
        form = CreateUserForm()

    return render(request, 'accounts/user_form.html', {
        'form': form,
        'page_title': _('Create New User'),
    })


@admin_required
@require_POST
def user_update_role_view(request, pk):
    context = AccessContext.from_request(request)
    form = RoleUpdateForm(request.POST)

    if form.is_valid():
        UserService(context).update_role(pk, form.cleaned_data['role'])
    else:
        context.notify_error('Error updating user role', f"Invalid role: {request.POST.get('role', '')}")

    return redirect('accounts:user_list')


@admin_required
@api_view(['GET'])
def user_list_json_view(request):
    context = AccessContext.from_request(request, notifier=CollectingNotifier())
    users = UserService(context).list_users()
    return Response({'users': UserWithRoleSerializer(users, many=True).data})
