# ===== app/tasks/booking_tasks.py =====
import logging

from app.config.celery_config import celery_app
from app.config.database import SessionLocal
from app.models.business import Business
from app.services.booking.booking_service import BookingService

logger = logging.getLogger(__name__)


@celery_app.task(bind=True, max_retries=3)
def complete_elapsed_bookings(self):
    """
    Marks confirmed bookings that already ended as completed.
    Runs every 15 minutes via beat (configured in celery_config.py).

    Returns:
        dict with the number of bookings completed
    """
    db = SessionLocal()
    completed = 0
    try:
        service = BookingService(db)
        businesses = db.query(Business).filter(Business.is_active == True).all()

        for business in businesses:
            try:
                completed += service.complete_elapsed_bookings(business)
            except Exception as e:
                db.rollback()
                logger.error(f"Error completing bookings for business {business.id}: {str(e)}")
                # Continue with the other businesses
                continue

        if completed > 0:
            logger.info(f"complete_elapsed_bookings: {completed} bookings completed")

        return {"status": "success", "completed": completed}

    except Exception as exc:
        logger.error(f"complete_elapsed_bookings failed: {exc}")
        raise self.retry(exc=exc, countdown=60 * (self.request.retries + 1))

    finally:
        db.close()
