"""Client model.

Business rules implemented:
- Email must be unique in the system.
- Inactive clients cannot place orders (enforced at service layer).
- A client may be linked to one login user; staff act on a client's
  behalf without one.
- Phone numbers are masked in ``__str__``.
"""

from __future__ import annotations

from django.conf import settings
from django.db import models

from modules.core.models import BaseModel


class Client(BaseModel):
    """Client placing aggregate orders."""

    name = models.CharField(max_length=255)
    email = models.EmailField(max_length=254, unique=True)
    phone = models.CharField(max_length=20, blank=True, default="")
    address = models.TextField(blank=True, default="")
    is_active = models.BooleanField(default=True)
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="client_profile",
    )

    class Meta:
        db_table = "clients"
        ordering = ["name", "id"]
        indexes = [
            models.Index(fields=["is_active"], name="clients_active_idx"),
        ]

    def __str__(self) -> str:
        suffix = self.phone[-3:] if self.phone else "???"
        return f"{self.name} (tel ***{suffix})"
