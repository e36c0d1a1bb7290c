"""Asynchronous tasks of the core module."""

import structlog
from celery import shared_task

from modules.core.models import EventStatus, OutboxEvent
from shared.domain.events import DomainEvent
from shared.infrastructure.bus import event_bus

logger = structlog.get_logger(__name__)

OUTBOX_BATCH_SIZE = 100
OUTBOX_MAX_RETRIES = 5


@shared_task(name="core.debug_task")
def debug_task():
    """Diagnostic task used to check that Celery is running."""
    logger.info("debug_task.executed", status="ok")
    return {"status": "ok", "message": "Celery is working"}


@shared_task(name="core.publish_outbox_events")
def publish_outbox_events(batch_size: int = OUTBOX_BATCH_SIZE):
    """Publish pending (and retryable failed) outbox events on the event bus."""
    pending = OutboxEvent.objects.filter(
        status__in=[EventStatus.PENDING, EventStatus.FAILED],
        retry_count__lt=OUTBOX_MAX_RETRIES,
    ).order_by("created_at", "id")[:batch_size]

    published = 0
    failed = 0
    for row in pending:
        log = logger.bind(outbox_id=row.id, event_type=row.event_type)
        try:
            event = DomainEvent.from_payload(row.payload)
            event_bus.publish(event)
        except Exception as exc:  # noqa: BLE001
            row.mark_as_failed(str(exc))
            log.error("outbox.publish_failed", error=str(exc))
            failed += 1
            continue
        row.mark_as_published()
        published += 1

    logger.info("outbox.batch_processed", published=published, failed=failed)
    return {"published": published, "failed": failed}
