"""Tests for the booking webhook and its Celery tasks."""
from datetime import datetime, time, timedelta
from decimal import Decimal
from unittest.mock import Mock, patch

import httpx
import pytest

from app.models.booking import Booking, BookingStatus
from app.models.business import PlanType
from app.services.booking.booking_service import BookingService
from app.services.notification.notification_service import (
    NotificationDeliveryError,
    NotificationService,
    dispatch_booking_notification,
)
from tests.conftest import CLIENT, DAY_BEFORE, MONDAY


@pytest.fixture
def confirmed_booking(db, business, make_service, notifier):
    service = make_service(name="Coloring", duration_minutes=90, price=Decimal("80.00"))
    return BookingService(db, notifier=notifier).create_booking(
        business=business,
        staff_id=None,
        service=service,
        target_date=MONDAY,
        start_time=time(14, 0),
        client_info=CLIENT,
        now=DAY_BEFORE,
    )


def client_returning(handler):
    return httpx.Client(transport=httpx.MockTransport(handler))


class TestNotificationService:

    def test_only_pro_businesses_with_webhook_are_notified(self, business):
        assert not NotificationService.should_notify(business)

        business.webhook_url = "https://hooks.example.com/bookings"
        assert NotificationService.should_notify(business)

        business.plan_type = PlanType.FREE.value
        assert not NotificationService.should_notify(business)

    def test_payload_fields(self, business, confirmed_booking):
        payload = NotificationService.build_payload(confirmed_booking, confirmed_booking.service, business)

        assert payload["booking_id"] == str(confirmed_booking.id)
        assert payload["status"] == "confirmed"
        assert payload["client_name"] == "Maria Silva"
        assert payload["client_email"] == "maria@example.com"
        assert payload["service"] == "Coloring"
        assert payload["service_duration"] == 90
        assert payload["service_price"] == 80.0
        assert payload["date"] == "2030-01-07"
        assert payload["time"] == "14:00"
        assert payload["business_name"] == "Studio Demo"

    def test_deliver_posts_json(self):
        seen = {}

        def handler(request):
            seen["method"] = request.method
            seen["event"] = request.headers["X-Webhook-Event"]
            seen["body"] = request.content
            return httpx.Response(202)

        status = NotificationService(http_client=client_returning(handler)).deliver(
            "https://hooks.example.com/bookings", {"event": "booking.created", "booking_id": "abc"}
        )

        assert status == 202
        assert seen["method"] == "POST"
        assert seen["event"] == "booking.created"
        assert b'"booking_id"' in seen["body"]

    def test_non_2xx_raises(self):
        service = NotificationService(http_client=client_returning(lambda request: httpx.Response(500, text="boom")))

        with pytest.raises(NotificationDeliveryError, match="HTTP 500"):
            service.deliver("https://hooks.example.com/bookings", {"booking_id": "abc"})

    def test_timeout_raises(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        service = NotificationService(http_client=client_returning(handler))

        with pytest.raises(NotificationDeliveryError, match="timeout"):
            service.deliver("https://hooks.example.com/bookings", {"booking_id": "abc"})


class TestDispatch:

    def test_skips_businesses_without_webhook(self, business, confirmed_booking):
        with patch("app.tasks.notification_tasks.send_booking_notification.delay") as delay:
            assert dispatch_booking_notification(business, confirmed_booking) is False

        delay.assert_not_called()

    def test_queues_task_for_pro_business(self, business, confirmed_booking):
        business.webhook_url = "https://hooks.example.com/bookings"

        with patch("app.tasks.notification_tasks.send_booking_notification.delay") as delay:
            assert dispatch_booking_notification(business, confirmed_booking) is True

        delay.assert_called_once_with(str(confirmed_booking.id))

    def test_broker_failure_is_swallowed(self, business, confirmed_booking):
        business.webhook_url = "https://hooks.example.com/bookings"

        with patch(
            "app.tasks.notification_tasks.send_booking_notification.delay",
            side_effect=ConnectionError("broker down")
        ):
            assert dispatch_booking_notification(business, confirmed_booking) is False


class TestTasks:

    def test_send_booking_notification_delivers(self, db, business, confirmed_booking, session_factory):
        from app.tasks.notification_tasks import send_booking_notification

        business.webhook_url = "https://hooks.example.com/bookings"
        db.commit()
        deliver = Mock(return_value=200)

        with patch("app.tasks.notification_tasks.SessionLocal", session_factory), \
                patch.object(NotificationService, "deliver", deliver):
            result = send_booking_notification.apply(args=[str(confirmed_booking.id)]).get()

        assert result["status"] == "success"
        url, payload = deliver.call_args.args
        assert url == "https://hooks.example.com/bookings"
        assert payload["booking_id"] == str(confirmed_booking.id)

    def test_send_booking_notification_skips_free_plan(self, db, business, confirmed_booking, session_factory):
        from app.tasks.notification_tasks import send_booking_notification

        business.plan_type = PlanType.FREE.value
        business.webhook_url = "https://hooks.example.com/bookings"
        db.commit()

        with patch("app.tasks.notification_tasks.SessionLocal", session_factory):
            result = send_booking_notification.apply(args=[str(confirmed_booking.id)]).get()

        assert result == {"status": "skipped", "reason": "notifications_disabled"}

    def test_complete_elapsed_bookings_task(self, db, business, make_service, session_factory):
        from app.tasks.booking_tasks import complete_elapsed_bookings

        service = make_service()
        start = datetime(2020, 1, 6, 10, 0)
        past = Booking(
            business_id=business.id,
            service_id=service.id,
            client_name="Old Client",
            client_phone="+5511900000000",
            client_email="old@example.com",
            scheduled_at=start,
            duration_minutes=30,
            ends_at=start + timedelta(minutes=30),
            status=BookingStatus.CONFIRMED.value,
        )
        db.add(past)
        db.commit()

        with patch("app.tasks.booking_tasks.SessionLocal", session_factory):
            result = complete_elapsed_bookings.apply().get()

        assert result == {"status": "success", "completed": 1}
        db.refresh(past)
        assert past.status == BookingStatus.COMPLETED.value
