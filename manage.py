#!/usr/bin/env python
# TVS CRM - management entry point
#
# Useful commands:
# - python manage.py migrate                # Create tables, normalize legacy lead statuses
# - python manage.py createcachetable       # Shared query cache table (skip when REDIS_URL is set)
# - python manage.py createsuperuser        # First administrator (gets the admin role)
# - python manage.py runserver              # Dashboard at /dashboard/, sign in at /auth/
# - python manage.py test apps              # Run the test suite
# ==============================================================================

import os
import sys


def main():
    """Point Django at config.settings and hand over the command line."""
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')

    try:
        from django.core.management import execute_from_command_line
    except ImportError as exc:
        raise ImportError(
            "Couldn't import Django. Install the project first "
            "(pip install -e .) and activate its virtual environment."
        ) from exc

    execute_from_command_line(sys.argv)


if __name__ == '__main__':
    main()
