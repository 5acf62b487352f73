from django.apps import AppConfig


class LeadsConfig(AppConfig):
    """Leads, their activity log and the team performance figures"""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.leads'
    verbose_name = 'Leads'
