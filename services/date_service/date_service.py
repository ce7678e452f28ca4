#!/usr/bin/env python3
"""
Date Service Module

Resolves the caller's timezone and formats the current date for it.
"""

from datetime import datetime
from functools import lru_cache
from typing import Any, Dict, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError, available_timezones

import structlog

from services.config import AppConfig
from services.utils.error_utils import InvalidTimezoneError

logger = structlog.get_logger(__name__)

DATE_FORMAT = "%d/%m/%Y"

def resolve_timezone(
    query_timezone: Optional[str],
    header_timezone: Optional[str],
    default: Optional[str] = None
) -> str:
    """Pick the first non-empty value: query parameter, geo header, default."""
    return query_timezone or header_timezone or default or AppConfig.DEFAULT_TIMEZONE

@lru_cache(maxsize=1)
def _canonical_zone_names() -> Dict[str, str]:
    """Lowercased IANA identifier -> canonical spelling."""
    return {name.lower(): name for name in available_timezones()}

def get_zone(name: str) -> ZoneInfo:
    """
    Look up an IANA timezone.

    Identifiers match case-insensitively, so ``asia/kolkata`` resolves to
    ``Asia/Kolkata``.

    Raises:
        InvalidTimezoneError: If the identifier is unknown or malformed.
    """
    try:
        return ZoneInfo(name)
    # ValueError/OSError cover malformed keys such as absolute paths or directories
    except (ZoneInfoNotFoundError, ValueError, OSError) as e:
        canonical = _canonical_zone_names().get(name.lower())
        if canonical:
            return ZoneInfo(canonical)
        logger.info("Rejected unknown timezone", timezone=name, error=str(e))
        raise InvalidTimezoneError(name) from e

def format_date(zone: ZoneInfo, now: Optional[datetime] = None) -> str:
    """Format an instant (default: now) as DD/MM/YYYY in the given zone."""
    if now is None:
        return datetime.now(zone).strftime(DATE_FORMAT)
    if now.tzinfo is None:
        raise ValueError("now must be timezone-aware")
    return now.astimezone(zone).strftime(DATE_FORMAT)

def build_date_payload(
    timezone: str,
    now: Optional[datetime] = None,
    message_template: Optional[str] = None
) -> Dict[str, Any]:
    """
    Build the date endpoint response body.

    Args:
        timezone: Resolved IANA identifier.
        now: Instant to format; defaults to the current time.
        message_template: Template with a ``{date}`` placeholder.

    Returns:
        ``{"message", "date", "timezone"}``

    Raises:
        InvalidTimezoneError: If the timezone is not recognized.
    """
    zone = get_zone(timezone)
    formatted_date = format_date(zone, now)
    template = message_template or AppConfig.DATE_MESSAGE_TEMPLATE
    return {
        "message": template.format(date=formatted_date),
        "date": formatted_date,
        "timezone": timezone
    }
