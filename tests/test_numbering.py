from datetime import date

import pytest

from backoffice.models import DocumentSequence
from backoffice.services import numbering


@pytest.mark.django_db
def test_next_number_format_and_sequence():
    day = date(2024, 3, 5)
    assert numbering.next_number("PO", day) == "PO-20240305-001"
    assert numbering.next_number("PO", day) == "PO-20240305-002"
    # Each prefix keeps its own counter.
    assert numbering.next_number("GRN", day) == "GRN-20240305-001"


@pytest.mark.django_db
def test_next_number_restarts_each_day():
    numbering.next_number("PAY", date(2024, 3, 5))
    assert numbering.next_number("PAY", date(2024, 3, 6)) == "PAY-20240306-001"
    assert DocumentSequence.objects.filter(prefix="PAY").count() == 2


@pytest.mark.django_db
def test_next_number_accepts_iso_string():
    assert numbering.next_number("SALE", "2024-12-31") == "SALE-20241231-001"


@pytest.mark.django_db
def test_next_number_rejects_unknown_prefix():
    with pytest.raises(ValueError):
        numbering.next_number("XYZ")


def test_as_date_handles_junk():
    assert numbering.as_date("not a date") is None
    assert numbering.as_date("2024-02-30") is None
    assert numbering.as_date(None) is None
    assert numbering.as_date("2024-02-29") == date(2024, 2, 29)
