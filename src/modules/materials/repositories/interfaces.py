"""Material repository interface."""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, Optional

from django.db import models

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.materials.models import Material


class IMaterialRepository(IRepository["Material"]):
    """Repository contract for the Material catalog."""

    @abstractmethod
    def list(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> "models.QuerySet[Material]":
        """List materials with optional filters."""

    @abstractmethod
    def get_active(self, id: int) -> Optional[Material]:
        """Retrieve a material only if it exists and is active."""
