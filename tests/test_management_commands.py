import pytest
from django.core.management import call_command
from django.core.management.base import CommandError

from backoffice.models import PurchaseOrder


@pytest.mark.django_db
def test_seed_and_delete_commands(ingredient_factory, capsys):
    ingredient_factory(name="Rice", last_price=40)
    call_command("seed_transaction_data")
    assert "records created" in capsys.readouterr().out
    assert PurchaseOrder.objects.count() == 2

    with pytest.raises(CommandError):
        call_command("delete_all_transactions", confirm="nope")

    call_command("delete_all_transactions", confirm="DELETE_ALL_TRANSACTIONS")
    assert not PurchaseOrder.objects.exists()
