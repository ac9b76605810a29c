from django.db import models


class Vendor(models.Model):
    """Stores vendor contact details."""

    vendor_id = models.AutoField(primary_key=True)
    name = models.CharField(max_length=255, unique=True, null=False, blank=False)
    contact = models.CharField(max_length=255, null=False, blank=False)
    email = models.CharField(max_length=254, blank=True, null=True)
    address = models.TextField(blank=True, null=True)
    notes = models.TextField(blank=True, null=True)
    is_active = models.BooleanField(default=True, null=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:  # pragma: no cover - simple representation
        return self.name or f"Vendor {self.pk}"

    class Meta:
        db_table = "vendors"
        ordering = ["name"]
