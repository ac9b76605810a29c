from django.db import models


class DocumentSequence(models.Model):
    """Last number issued for a document prefix on a given day."""

    prefix = models.CharField(max_length=10)
    period = models.CharField(max_length=8)
    last_value = models.PositiveIntegerField(default=0)

    def __str__(self) -> str:  # pragma: no cover - simple representation
        return f"{self.prefix}-{self.period}: {self.last_value}"

    class Meta:
        db_table = "document_sequences"
        constraints = [
            models.UniqueConstraint(
                fields=["prefix", "period"], name="uniq_document_sequence"
            )
        ]
