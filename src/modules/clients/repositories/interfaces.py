"""Client repository interface."""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, Optional

from django.db import models

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.clients.models import Client


class IClientRepository(IRepository["Client"]):
    """Repository contract for the Client aggregate."""

    @abstractmethod
    def list(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> "models.QuerySet[Client]":
        """List clients with optional filters."""

    @abstractmethod
    def get_active(self, id: int) -> Optional[Client]:
        """Retrieve a client only if it exists and is active."""

    @abstractmethod
    def get_by_user(self, user_id: int) -> Optional[Client]:
        """Retrieve the client linked to a login user."""
