"""Helpers that move collected domain events into the outbox table.

Repositories call ``flush_domain_events`` from ``save()`` so the events
are written in the same transaction as the aggregate.
"""

from __future__ import annotations

import json
from dataclasses import asdict
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List
from uuid import UUID

from modules.core.models import OutboxEvent
from shared.domain.events import DomainEvent


def flush_domain_events(entity: Any, topic: str) -> List[OutboxEvent]:
    """Persist and clear the events collected on ``entity``."""
    events = entity.domain_events if hasattr(entity, "domain_events") else []
    rows = [record_event(event, topic) for event in events]
    if hasattr(entity, "clear_domain_events"):
        entity.clear_domain_events()
    return rows


def record_event(event: DomainEvent, topic: str) -> OutboxEvent:
    return OutboxEvent.objects.create(
        event_type=event.event_name,
        aggregate_id=str(event.aggregate_id),
        payload=serialize_event_payload(event),
        topic=topic,
    )


def serialize_event_payload(event: DomainEvent) -> Dict[str, Any]:
    data = asdict(event)
    data["event_name"] = event.event_name
    normalized = _normalize_for_json(data)
    return json.loads(json.dumps(normalized))


def _normalize_for_json(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (list, tuple)):
        return [_normalize_for_json(item) for item in value]
    if isinstance(value, dict):
        return {key: _normalize_for_json(val) for key, val in value.items()}
    return value
