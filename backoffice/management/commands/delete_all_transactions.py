from django.core.management.base import BaseCommand, CommandError

from backoffice.services import admin_data_service


class Command(BaseCommand):
    """Remove all transactional data and reset ingredient stock to zero."""

    help = "Delete all transactions, keeping ingredients, vendors, recipes and users."

    def add_arguments(self, parser):
        parser.add_argument(
            "--confirm",
            required=True,
            help=f"Must be {admin_data_service.DELETE_CONFIRMATION}.",
        )

    def handle(self, *args, **options):
        ok, msg, payload = admin_data_service.delete_all_transactions(
            options["confirm"]
        )
        if not ok:
            raise CommandError(msg)
        self.stdout.write(
            self.style.SUCCESS(
                f"{msg}: {payload['totalDeleted']} records deleted, "
                f"{payload['ingredientsReset']} ingredients reset."
            )
        )
