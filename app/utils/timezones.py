# app/utils/timezones.py
"""Business-local clock helpers. Bookings store naive wall-clock time in the business timezone."""
import logging
from datetime import datetime, timezone
from typing import Optional

import pytz

from app.config.settings import get_settings

logger = logging.getLogger(__name__)


def get_business_timezone(business) -> pytz.BaseTzInfo:
    """pytz timezone of a business, falling back to the configured default"""
    tz_name = getattr(business, "timezone", None) or get_settings().DEFAULT_TIMEZONE

    try:
        return pytz.timezone(tz_name)
    except pytz.UnknownTimeZoneError:
        logger.error(f"Invalid timezone '{tz_name}' for business {getattr(business, 'id', '?')}, using UTC")
        return pytz.UTC


def business_now(business, now: Optional[datetime] = None) -> datetime:
    """
    Current naive local time of a business.

    An explicit naive `now` is taken as already local; an aware one is
    converted to the business timezone.
    """
    if now is not None and now.tzinfo is None:
        return now

    reference = now or datetime.now(timezone.utc)
    return reference.astimezone(get_business_timezone(business)).replace(tzinfo=None)
