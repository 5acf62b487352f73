"""
Access context passed to every service call.

Services never read a global "current user". Views build an AccessContext
from the request and hand it to the service; tests build one directly.
The context also carries the notifier that turns service outcomes into
transient notifications (Django messages in the web app).
"""

import logging

from django.contrib import messages

from .models import ROLE_ADMIN, ROLE_MANAGER, ROLE_SALESMAN, get_effective_role

logger = logging.getLogger(__name__)


# Notification levels understood by every notifier
NOTIFY_SUCCESS = 'success'
NOTIFY_ERROR = 'error'
NOTIFY_INFO = 'info'

_MESSAGE_LEVELS = {
    NOTIFY_SUCCESS: messages.SUCCESS,
    NOTIFY_ERROR: messages.ERROR,
    NOTIFY_INFO: messages.INFO,
}


def format_notification(title, description=None):
    if description:
        return f"{title}: {description}"
    return title


class MessagesNotifier:
    """Forwards notifications to the Django messages framework of a request."""

    def __init__(self, request):
        self.request = request

    def __call__(self, level, title, description=None):
        messages.add_message(
            self.request,
            _MESSAGE_LEVELS.get(level, messages.INFO),
            format_notification(title, description),
            fail_silently=True,
        )


class CollectingNotifier:
    """Keeps notifications in memory (JSON endpoints, shell usage, tests)."""

    def __init__(self):
        self.notifications = []

    def __call__(self, level, title, description=None):
        self.notifications.append({
            'level': level,
            'title': title,
            'description': description,
        })

    @property
    def last(self):
        return self.notifications[-1] if self.notifications else None


class AccessContext:
    """
    Who is calling, with which role, and where notifications go

    Args:
        user: authenticated User or None for a signed-out caller
        role (str, optional): effective role; resolved from the user when omitted
        notifier (callable, optional): called as notifier(level, title, description)
        session_token (str, optional): token forwarded to remote procedures
    """

    def __init__(self, user=None, role=None, notifier=None, session_token=None):
        if user is not None and not getattr(user, 'is_authenticated', False):
            user = None
        self.user = user
        self.role = role if role is not None else get_effective_role(user)
        self.notifier = notifier or CollectingNotifier()
        self.session_token = session_token

    def __repr__(self):
        return f"<AccessContext user={self.user_id} role={self.role}>"

    @classmethod
    def from_request(cls, request, notifier=None):
        user = getattr(request, 'user', None)
        session = getattr(request, 'session', None)
        session_token = session.session_key if session is not None else None
        return cls(
            user=user,
            notifier=notifier or MessagesNotifier(request),
            session_token=session_token,
        )

    @classmethod
    def anonymous(cls, notifier=None):
        return cls(user=None, notifier=notifier)

    @property
    def user_id(self):
        return self.user.pk if self.user is not None else None

    @property
    def is_authenticated(self):
        return self.user is not None

    def is_admin(self):
        return self.role == ROLE_ADMIN

    def is_manager(self):
        return self.role == ROLE_MANAGER

    def is_salesman(self):
        return self.role == ROLE_SALESMAN

    # NOTIFICATIONS
    def notify(self, level, title, description=None):
        self.notifier(level, title, description)

    def notify_success(self, title, description=None):
        self.notify(NOTIFY_SUCCESS, title, description)

    def notify_error(self, title, description=None):
        logger.warning("%s for %s: %s", title, self.user_id, description)
        self.notify(NOTIFY_ERROR, title, description)


class MutationResult:
    """Outcome of a service mutation; failures never raise past the service."""

    def __init__(self, ok, message='', data=None):
        self.ok = ok
        self.message = message
        self.data = data

    def __bool__(self):
        return self.ok

    def __repr__(self):
        return f"<MutationResult ok={self.ok} message={self.message!r}>"

    @classmethod
    def success(cls, message='', data=None):
        return cls(True, message, data)

    @classmethod
    def failure(cls, message):
        return cls(False, message)
