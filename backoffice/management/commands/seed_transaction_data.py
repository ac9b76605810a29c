from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError

from backoffice.services import admin_data_service


class Command(BaseCommand):
    """Create a realistic set of transactions on top of existing ingredients."""

    help = "Seed vendors, intends, purchase orders, receipts, payments, sales and expenses."

    def add_arguments(self, parser):
        parser.add_argument(
            "--username", help="Record the seeded documents as created by this user."
        )

    def handle(self, *args, **options):
        user = None
        if options.get("username"):
            User = get_user_model()
            try:
                user = User.objects.get(username=options["username"])
            except User.DoesNotExist:
                raise CommandError(f"User {options['username']} does not exist")
        ok, msg, payload = admin_data_service.seed_transaction_data(user=user)
        if not ok:
            raise CommandError(msg)
        self.stdout.write(
            self.style.SUCCESS(f"{msg}: {payload['totalCreated']} records created.")
        )
        for name, count in payload["createdCounts"].items():
            self.stdout.write(f"  {name}: {count}")
