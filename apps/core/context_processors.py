from apps.accounts.models import ROLE_ADMIN, ROLE_SALESMAN, get_effective_role


ADMIN_NAV = [
    ('Dashboard', 'core:dashboard', 'bi-speedometer2'),
    ('All Leads', 'leads:lead_list', 'bi-file-earmark-text'),
    ('Team Performance', 'core:team_performance', 'bi-trophy'),
    ('Users', 'accounts:user_list', 'bi-people'),
    ('Settings', 'core:settings', 'bi-gear'),
]

SALESMAN_NAV = [
    ('Dashboard', 'core:dashboard', 'bi-speedometer2'),
    ('My Leads', 'leads:my_leads', 'bi-file-earmark-text'),
    ('Profile', 'accounts:profile', 'bi-person-circle'),
]

# Managers and plain users only get routes open to any signed-in role
DEFAULT_NAV = [
    ('Dashboard', 'core:dashboard', 'bi-speedometer2'),
    ('Profile', 'accounts:profile', 'bi-person-circle'),
]


def navigation(request):
    """Sidebar entries and the effective role for every template"""
    user = getattr(request, 'user', None)
    if user is None or not user.is_authenticated:
        return {'nav_items': [], 'current_role': None}

    role = get_effective_role(user)
    if role == ROLE_ADMIN:
        items = ADMIN_NAV
    elif role == ROLE_SALESMAN:
        items = SALESMAN_NAV
    else:
        items = DEFAULT_NAV

    return {
        'nav_items': [{'title': title, 'url_name': url_name, 'icon': icon} for title, url_name, icon in items],
        'current_role': role,
    }
