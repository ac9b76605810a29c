"""Core application configuration."""

import logging

from django.apps import AppConfig
from django.conf import settings
from django.db.models.signals import post_migrate

logger = logging.getLogger(__name__)


def _bootstrap_admin(sender, **kwargs):
    """Make sure the back office can be entered after a fresh migrate.

    Creates the bootstrap superuser when missing and restores the ``admin``
    role on it if it was edited away, so the admin-only endpoints stay
    reachable.
    """

    from django.contrib.auth import get_user_model

    User = get_user_model()
    username = getattr(settings, "BACKOFFICE_ADMIN_USERNAME", "admin")
    user = User.objects.filter(username=username).first()
    if user is None:
        User.objects.create_superuser(
            username,
            email="",
            password=getattr(settings, "BACKOFFICE_ADMIN_PASSWORD", "admin"),
            role=User.ROLE_ADMIN,
        )
        logger.info("Created bootstrap admin user %s", username)
    elif user.role != User.ROLE_ADMIN:
        user.role = User.ROLE_ADMIN
        user.save(update_fields=["role"])
        logger.warning("Restored admin role on bootstrap user %s", username)


class CoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "core"

    def ready(self):  # pragma: no cover - executed via Django startup
        post_migrate.connect(_bootstrap_admin, dispatch_uid="core.bootstrap_admin")
