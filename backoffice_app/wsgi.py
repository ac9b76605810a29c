"""
WSGI config for the back-office project.

It exposes the WSGI callable as a module-level variable named ``application``
after bringing the database schema up to date.
"""

import os

from django.core.management import call_command
from django.core.wsgi import get_wsgi_application
from django.db.utils import OperationalError

from backoffice_app.logging import configure_logging

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "backoffice_app.settings")
configure_logging()

application = get_wsgi_application()

try:
    call_command("migrate", interactive=False)
except OperationalError:
    # Database may be unavailable when the server starts; continue without failing.
    pass
