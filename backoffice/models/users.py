from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """Back-office login carrying the role used for authorization."""

    ROLE_ADMIN = "admin"
    ROLE_ACCOUNTS = "accounts"
    ROLE_MANAGER = "manager"
    ROLE_STAFF = "staff"
    ROLE_CHOICES = [
        (ROLE_ADMIN, "Admin"),
        (ROLE_ACCOUNTS, "Accounts"),
        (ROLE_MANAGER, "Manager"),
        (ROLE_STAFF, "Staff"),
    ]

    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=ROLE_STAFF)

    def has_role(self, *roles: str) -> bool:
        return self.is_active and self.role in roles

    class Meta:
        db_table = "users"
