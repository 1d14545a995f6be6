# app/services/notification/notification_service.py
"""
Booking notification webhook.

Businesses on the pro plan with a webhook URL receive a JSON POST for each
new booking. Delivery is fire-and-forget from the booking's point of view:
nothing here may fail a booking.
"""
import logging
from typing import Any, Dict, Optional

import httpx

from app.config.settings import Settings, get_settings
from app.models.booking import Booking
from app.models.business import Business
from app.models.service import Service

logger = logging.getLogger(__name__)

EVENT_BOOKING_CREATED = "booking.created"


class NotificationDeliveryError(Exception):
    """Webhook endpoint did not accept the notification"""


class NotificationService:
    """Builds and delivers booking notifications"""

    def __init__(self, settings: Optional[Settings] = None, http_client: Optional[httpx.Client] = None):
        self.settings = settings or get_settings()
        self.http_client = http_client or httpx.Client(
            timeout=self.settings.NOTIFICATION_TIMEOUT_SECONDS,
            follow_redirects=True
        )

    @staticmethod
    def should_notify(business: Business) -> bool:
        """Only pro businesses with a configured webhook are notified"""
        return bool(business.is_pro and business.webhook_url)

    @staticmethod
    def build_payload(booking: Booking, service: Service, business: Business) -> Dict[str, Any]:
        """Booking details in the shape webhook consumers expect"""
        return {
            "event": EVENT_BOOKING_CREATED,
            "booking_id": str(booking.id),
            "status": booking.status,
            "client_name": booking.client_name,
            "client_phone": booking.client_phone,
            "client_email": booking.client_email,
            "service": service.name,
            "service_duration": service.duration_minutes,
            "service_price": float(service.price) if service.price is not None else None,
            "date": booking.scheduled_at.strftime("%Y-%m-%d"),
            "time": booking.scheduled_at.strftime("%H:%M"),
            "business_name": business.name,
        }

    def deliver(self, url: str, payload: Dict[str, Any]) -> int:
        """
        POST the payload to the webhook URL.

        Returns:
            HTTP status code of a 2xx response

        Raises:
            NotificationDeliveryError on transport errors and non-2xx responses
        """
        headers = {
            "Content-Type": "application/json",
            "Accept": "*/*",
            "User-Agent": self.settings.NOTIFICATION_USER_AGENT,
            "X-Webhook-Event": payload.get("event", EVENT_BOOKING_CREATED),
        }

        try:
            response = self.http_client.post(url, json=payload, headers=headers)
        except httpx.TimeoutException as exc:
            raise NotificationDeliveryError(
                f"Request timeout ({self.settings.NOTIFICATION_TIMEOUT_SECONDS}s)"
            ) from exc
        except httpx.RequestError as exc:
            raise NotificationDeliveryError(f"Request error: {str(exc)[:200]}") from exc

        if not 200 <= response.status_code < 300:
            raise NotificationDeliveryError(f"HTTP {response.status_code}: {response.text[:200]}")

        logger.info(f"Booking notification {payload.get('booking_id')} delivered ({response.status_code})")
        return response.status_code

    def close(self):
        self.http_client.close()


def dispatch_booking_notification(business: Business, booking: Booking) -> bool:
    """
    Queue the notification task for a new booking.

    Returns True when a task was queued. Broker failures are logged and
    swallowed so they never reach the booking caller.
    """
    if not NotificationService.should_notify(business):
        logger.debug(f"Business {business.id} has no webhook notifications enabled")
        return False

    from app.tasks.notification_tasks import send_booking_notification

    try:
        send_booking_notification.delay(str(booking.id))
        return True
    except Exception as exc:
        logger.error(f"Failed to queue notification for booking {booking.id}: {exc}")
        return False
