"""Django ORM implementation of the Client repository.

Methods return ``None`` for missing rows; the Service Layer decides
which domain error a missing client becomes.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import structlog
from django.db import models, transaction

from modules.clients.models import Client
from modules.clients.repositories.interfaces import IClientRepository

logger = structlog.get_logger(__name__)


class ClientDjangoRepository(IClientRepository):
    """Concrete Client repository backed by Django ORM."""

    def get_by_id(self, id: int) -> Optional[Client]:
        try:
            return Client.objects.filter(id=id).first()
        except (TypeError, ValueError):
            return None

    def get_active(self, id: int) -> Optional[Client]:
        try:
            return Client.objects.filter(id=id, is_active=True).first()
        except (TypeError, ValueError):
            return None

    def get_by_user(self, user_id: int) -> Optional[Client]:
        return Client.objects.filter(user_id=user_id).first()

    def list(self, filters: Optional[Dict[str, Any]] = None) -> models.QuerySet[Client]:
        queryset = Client.objects.all()
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    @transaction.atomic
    def save(self, entity: Client) -> Client:
        is_new = entity._state.adding
        entity.save()
        logger.info("client.saved", client_id=entity.id, is_new=is_new)
        return entity
