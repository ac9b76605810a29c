from unittest.mock import patch
import sys

from django.db.utils import OperationalError


def test_wsgi_runs_migrate():
    sys.modules.pop("backoffice_app.wsgi", None)
    with patch("django.core.management.call_command") as call, patch(
        "django.core.wsgi.get_wsgi_application"
    ):
        import backoffice_app.wsgi  # noqa: F401

    call.assert_called_with("migrate", interactive=False)


def test_wsgi_tolerates_unavailable_database():
    sys.modules.pop("backoffice_app.wsgi", None)
    with patch(
        "django.core.management.call_command", side_effect=OperationalError
    ), patch("django.core.wsgi.get_wsgi_application", return_value="app"):
        import backoffice_app.wsgi as wsgi

    assert wsgi.application == "app"
