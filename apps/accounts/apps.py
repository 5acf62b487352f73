from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class AccountsConfig(AppConfig):
    """
    Users, profiles and roles

    Signals registered:
    - post_save on User → profile row for every new account
    - profile and role changes → cached user list and team figures dropped
    """

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.accounts'
    verbose_name = _('Users & Roles')

    def ready(self):
        import apps.accounts.signals  # noqa: F401
