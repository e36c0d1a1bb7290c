"""Django ORM implementation of the Material repository."""

from __future__ import annotations

from typing import Any, Dict, Optional

import structlog
from django.db import models, transaction

from modules.materials.models import Material
from modules.materials.repositories.interfaces import IMaterialRepository

logger = structlog.get_logger(__name__)


class MaterialDjangoRepository(IMaterialRepository):
    """Concrete Material repository backed by Django ORM."""

    def get_by_id(self, id: int) -> Optional[Material]:
        try:
            return Material.objects.filter(id=id).first()
        except (TypeError, ValueError):
            return None

    def get_active(self, id: int) -> Optional[Material]:
        try:
            return Material.objects.filter(id=id, is_active=True).first()
        except (TypeError, ValueError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> models.QuerySet[Material]:
        queryset = Material.objects.all()
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    @transaction.atomic
    def save(self, entity: Material) -> Material:
        is_new = entity._state.adding
        entity.save()
        logger.info("material.saved", material_id=entity.id, is_new=is_new)
        return entity
