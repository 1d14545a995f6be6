# ===== app/tasks/notification_tasks.py =====
import logging
from uuid import UUID

from app.config.celery_config import celery_app
from app.config.database import SessionLocal
from app.config.settings import get_settings
from app.models.booking import Booking
from app.models.business import Business
from app.services.notification.notification_service import NotificationDeliveryError, NotificationService

logger = logging.getLogger(__name__)


@celery_app.task(bind=True, max_retries=get_settings().NOTIFICATION_MAX_RETRIES)
def send_booking_notification(self, booking_id: str):
    """
    Deliver the booking webhook for one booking

    Args:
        booking_id: ID of the booking that was just created
    """
    db = SessionLocal()
    try:
        booking = db.query(Booking).filter(Booking.id == UUID(booking_id)).first()
        if not booking:
            logger.error(f"Booking {booking_id} not found")
            return {"status": "failed", "reason": "booking_not_found"}

        business = db.query(Business).filter(Business.id == booking.business_id).first()
        if not business or not NotificationService.should_notify(business):
            return {"status": "skipped", "reason": "notifications_disabled"}

        payload = NotificationService.build_payload(booking, booking.service, business)
        service = NotificationService()
        try:
            status_code = service.deliver(business.webhook_url, payload)
        finally:
            service.close()

        return {"status": "success", "booking_id": booking_id, "status_code": status_code}

    except NotificationDeliveryError as exc:
        logger.error(f"Notification for booking {booking_id} failed: {exc}")

        if self.request.retries >= self.max_retries:
            logger.error(f"Giving up on notification for booking {booking_id}")
            return {"status": "failed", "reason": str(exc)}

        # Retry with exponential backoff: 1min, 2min, 4min
        raise self.retry(
            exc=exc,
            countdown=60 * (2 ** self.request.retries)
        )

    finally:
        db.close()
