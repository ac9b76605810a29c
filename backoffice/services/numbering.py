"""Human readable document numbers such as ``PO-20240131-007``."""

import logging
from datetime import date, datetime
from typing import Any, Optional

from django.db import transaction
from django.utils import timezone
from django.utils.dateparse import parse_date

from backoffice.models import DocumentSequence

logger = logging.getLogger(__name__)

PREFIXES = ("INT", "PO", "GRN", "PAY", "SALE", "ADJ", "EXP")


def as_date(value: Any) -> Optional[date]:
    """Return ``value`` as a date; ISO strings are parsed, junk gives None."""

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return parse_date(value)
        except ValueError:
            return None
    return None


def next_number(prefix: str, on_date: Any = None) -> str:
    """Issue the next number for ``prefix`` on ``on_date`` (default today).

    Counters restart every day and are incremented under a row lock so two
    requests never receive the same number.
    """

    if prefix not in PREFIXES:
        raise ValueError(f"Unknown document prefix: {prefix}")
    period = (as_date(on_date) or timezone.localdate()).strftime("%Y%m%d")
    with transaction.atomic():
        DocumentSequence.objects.get_or_create(prefix=prefix, period=period)
        seq = DocumentSequence.objects.select_for_update().get(
            prefix=prefix, period=period
        )
        seq.last_value += 1
        seq.save(update_fields=["last_value"])
    number = f"{prefix}-{period}-{seq.last_value:03d}"
    logger.debug("Issued document number %s", number)
    return number
