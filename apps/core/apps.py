from django.apps import AppConfig


class CoreConfig(AppConfig):
    """
    Configuration for Core application

    This app contains:
        - Landing page
        - Role-aware dashboard
        - Team performance pages (admin)
        - Settings page (admin)
        - Not-found page

    It owns no models; every figure it shows comes from the
    lead and account services.
    """
    name = 'apps.core'
    verbose_name = 'Core'
