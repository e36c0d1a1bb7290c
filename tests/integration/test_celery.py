"""Integration tests for the Celery setup and the outbox relay."""

import pytest

from modules.core.models import EventStatus, OutboxEvent
from modules.core.outbox import record_event
from modules.orders.events import OrderCancelled
from shared.infrastructure.bus import InMemoryEventBus

pytestmark = pytest.mark.integration


@pytest.fixture(autouse=True)
def _celery_eager(settings):
    """Run tasks synchronously inside the test process."""
    settings.CELERY_TASK_ALWAYS_EAGER = True
    settings.CELERY_TASK_EAGER_PROPAGATES = True


class TestCeleryConfig:
    def test_celery_app_is_importable(self):
        from config.celery import app

        assert app.main == "logistics"

    def test_celery_app_exported_from_init(self):
        from config import celery_app

        assert celery_app.main == "logistics"

    def test_celery_broker_url_configured(self, settings):
        assert "redis" in settings.CELERY_BROKER_URL
        assert "redis" in settings.CELERY_RESULT_BACKEND

    def test_celery_serializer_is_json(self, settings):
        assert settings.CELERY_TASK_SERIALIZER == "json"
        assert settings.CELERY_RESULT_SERIALIZER == "json"
        assert settings.CELERY_ACCEPT_CONTENT == ["json"]

    def test_celery_timezone_matches_django(self, settings):
        assert settings.CELERY_TIMEZONE == settings.TIME_ZONE


class TestDebugTask:
    def test_debug_task_eager(self):
        from modules.core.tasks import debug_task

        result = debug_task.delay()

        assert result.successful()
        assert result.result == {"status": "ok", "message": "Celery is working"}


class TestPublishOutboxEvents:
    def test_publishes_pending_rows(self, monkeypatch):
        from modules.core.tasks import publish_outbox_events

        received = []

        class Collector:
            def handle(self, event):
                received.append(event)

        bus = InMemoryEventBus()
        bus.subscribe(OrderCancelled, Collector())
        monkeypatch.setattr("modules.core.tasks.event_bus", bus)
        row = record_event(
            OrderCancelled(aggregate_id=7, previous_status="pendiente"), topic="orders"
        )

        result = publish_outbox_events.delay().result

        row.refresh_from_db()
        assert result == {"published": 1, "failed": 0}
        assert row.status == EventStatus.PUBLISHED
        assert row.processed_at is not None
        assert [e.aggregate_id for e in received] == [7]
        assert received[0].previous_status == "pendiente"

    def test_unreadable_payload_marked_failed(self):
        from modules.core.tasks import publish_outbox_events

        row = OutboxEvent.objects.create(
            event_type="Unknown",
            aggregate_id="1",
            payload={"event_name": "Unknown"},
            topic="orders",
        )

        result = publish_outbox_events()

        row.refresh_from_db()
        assert result == {"published": 0, "failed": 1}
        assert row.status == EventStatus.FAILED
        assert row.retry_count == 1
        assert row.error_message

    def test_published_rows_are_not_sent_twice(self):
        from modules.core.tasks import publish_outbox_events

        record_event(OrderCancelled(aggregate_id=8, previous_status="pendiente"), topic="orders")

        assert publish_outbox_events()["published"] == 1
        assert publish_outbox_events()["published"] == 0
