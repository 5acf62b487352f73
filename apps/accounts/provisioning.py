"""
User provisioning

Accounts are never created directly by the dashboard code. Creation is routed
through a trusted provisioning procedure which receives
{email, password, full_name, role} and either returns the created user payload
or an error with a human-readable message.

Two clients:
- RemoteProvisioningClient: calls the provisioning function over HTTP
- LocalProvisioningClient: the trusted server-side implementation itself

The client in use is chosen by settings.USER_PROVISIONING_CLIENT.
"""

import logging

import requests
from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils.module_loading import import_string

logger = logging.getLogger(__name__)


class ProvisioningError(Exception):
    """
    Raised when the provisioning procedure refuses or fails

    The message is shown to the administrator verbatim.
    """
    pass


class RemoteProvisioningClient:

    def __init__(self, url=None, timeout=None):
        self.url = url or getattr(settings, 'USER_PROVISIONING_URL', '')
        self.timeout = timeout or getattr(settings, 'USER_PROVISIONING_TIMEOUT', 30)

    def _get_headers(self, session_token):
        return {
            'Content-Type': 'application/json',
            'Authorization': f'Bearer {session_token}',
        }

    def create_user(self, payload, session_token):
        if not self.url:
            raise ProvisioningError('User provisioning endpoint is not configured')

        logger.info(f"Invoking provisioning function for {payload.get('email')}")

        try:
            response = requests.post(
                self.url,
                headers=self._get_headers(session_token),
                json=payload,
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout:
            raise ProvisioningError('Request timeout - provisioning function did not respond')
        except requests.exceptions.ConnectionError:
            raise ProvisioningError('Connection error - could not reach provisioning function')
        except requests.exceptions.RequestException as e:
            raise ProvisioningError(f'Request error: {str(e)}')

        try:
            data = response.json()
        except ValueError:
            data = None

        if response.status_code not in [200, 201]:
            message = None
            if isinstance(data, dict):
                message = data.get('error') or data.get('message')
            message = message or response.text or 'Failed to create user'
            logger.error(f"Provisioning error: {message}")
            raise ProvisioningError(message)

        if isinstance(data, dict) and data.get('error'):
            logger.error(f"Provisioning error: {data['error']}")
            raise ProvisioningError(data['error'])

        return data or {}


class LocalProvisioningClient:
    """
    Server-side provisioning

    Creates the identity, fills the profile written by the post_save signal
    and stores the role row, all in one transaction.
    """

    def create_user(self, payload, session_token):
        from .models import ROLE_CHOICES, UserProfile, UserRole, User

        role = payload.get('role')
        if role not in [value for value, label in ROLE_CHOICES]:
            raise ProvisioningError(f'Invalid role: {role}')

        email = User.objects.normalize_email(payload.get('email') or '').lower()
        if User.objects.filter(email__iexact=email).exists():
            raise ProvisioningError('A user with this email address has already been registered')

        try:
            with transaction.atomic():
                user = User.objects.create_user(email=email, password=payload.get('password'))
                UserProfile.objects.update_or_create(
                    user=user,
                    defaults={'email': email, 'full_name': payload.get('full_name', '')},
                )
                UserRole.objects.update_or_create(user=user, defaults={'role': role})
        except (IntegrityError, ValueError) as e:
            # ValueError: the manager refused the email
            raise ProvisioningError(str(e))

        logger.info(f"Provisioned user {email} with role {role}")
        return {
            'user': {
                'id': str(user.pk),
                'email': user.email,
                'full_name': payload.get('full_name', ''),
                'role': role,
            }
        }


def get_provisioning_client():
    path = getattr(
        settings,
        'USER_PROVISIONING_CLIENT',
        'apps.accounts.provisioning.LocalProvisioningClient',
    )
    return import_string(path)()
