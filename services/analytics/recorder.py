#!/usr/bin/env python3
"""
Analytics Recorder

Builds anonymized request snapshots and applies the per-request sequence of
counter and list mutations to Redis.

The sequence is not transactional. Each step is an independent atomic Redis
command; if one fails the remaining steps are skipped and the steps already
applied stay applied.
"""

import json
import time
from datetime import datetime, timezone as dt_timezone
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple
from urllib.parse import unquote

import redis
import structlog

from services.config import AppConfig
from .keys import AnalyticsKeys

logger = structlog.get_logger(__name__)

UNKNOWN = "unknown"

# Order in which a hit is applied
STEPS = (
    "total_hits",
    "daily_hits",
    "timezones",
    "countries",
    "cities",
    "regions",
    "recent_push",
    "recent_trim",
    "daily_expire",
)

def mask_ip(headers: Mapping[str, str], config=AppConfig) -> str:
    """
    Return an anonymized client IP.

    The first X-Forwarded-For entry wins, then X-Real-IP, then ``unknown``.
    Only the first ANALYTICS_IP_PREFIX_LENGTH characters are kept, followed
    by the mask.
    """
    forwarded_for = headers.get(config.FORWARDED_FOR_HEADER) or ""
    ip = forwarded_for.split(",")[0].strip() or (headers.get(config.REAL_IP_HEADER) or "").strip() or UNKNOWN
    return ip[:config.ANALYTICS_IP_PREFIX_LENGTH] + config.ANALYTICS_IP_MASK

def _header(headers: Mapping[str, str], name: str) -> str:
    value = unquote(headers.get(name) or "").strip()
    return value or UNKNOWN

def build_request_snapshot(
    headers: Mapping[str, str],
    timezone: str,
    now_ms: Optional[int] = None,
    config=AppConfig
) -> Dict[str, Any]:
    """
    Derive the recorded metadata for one request.

    Args:
        headers: Request headers (case-insensitive mapping, e.g. ``request.headers``).
        timezone: The resolved timezone served to the caller.
        now_ms: Epoch milliseconds; defaults to the current time.

    Returns:
        Snapshot dict ready to be JSON encoded.
    """
    user_agent = headers.get("User-Agent") or UNKNOWN
    return {
        "timestamp": now_ms if now_ms is not None else int(time.time() * 1000),
        "ip": mask_ip(headers, config),
        "country": _header(headers, config.GEO_COUNTRY_HEADER),
        "city": _header(headers, config.GEO_CITY_HEADER),
        "region": _header(headers, config.GEO_REGION_HEADER),
        "timezone": timezone,
        "userAgent": user_agent[:config.ANALYTICS_USER_AGENT_MAX_LENGTH]
    }

def mutation_steps(
    redis_client: redis.Redis,
    snapshot: Dict[str, Any],
    today: str,
    keys: AnalyticsKeys,
    config=AppConfig
) -> List[Tuple[str, Callable[[], Any]]]:
    """Ordered (name, call) pairs making up one recorded hit."""
    country = snapshot.get("country", UNKNOWN)
    recent_limit = config.ANALYTICS_RECENT_LIMIT
    return [
        ("total_hits", lambda: redis_client.incr(keys.total_hits)),
        ("daily_hits", lambda: redis_client.hincrby(keys.daily_hits, today, 1)),
        ("timezones", lambda: redis_client.hincrby(keys.timezones, snapshot.get("timezone", UNKNOWN), 1)),
        ("countries", lambda: redis_client.hincrby(keys.countries, country, 1)),
        ("cities", lambda: redis_client.hincrby(keys.cities, f"{snapshot.get('city', UNKNOWN)}, {country}", 1)),
        ("regions", lambda: redis_client.hincrby(keys.regions, f"{snapshot.get('region', UNKNOWN)}, {country}", 1)),
        ("recent_push", lambda: redis_client.lpush(keys.recent_requests, json.dumps(snapshot))),
        ("recent_trim", lambda: redis_client.ltrim(keys.recent_requests, 0, recent_limit - 1)),
        ("daily_expire", lambda: redis_client.expire(keys.daily_hits, config.ANALYTICS_TTL_SECONDS)),
    ]

def record_request(
    redis_client: redis.Redis,
    snapshot: Dict[str, Any],
    today: Optional[str] = None,
    keys: Optional[AnalyticsKeys] = None,
    config=AppConfig
) -> int:
    """
    Apply the mutation sequence for one request.

    Store errors stop the sequence and are logged, never raised.

    Returns:
        Number of steps applied.
    """
    keys = keys or AnalyticsKeys(prefix=config.ANALYTICS_KEY_PREFIX)
    today = today or datetime.now(dt_timezone.utc).strftime("%Y-%m-%d")
    steps = mutation_steps(redis_client, snapshot, today, keys, config)

    for applied, (name, step) in enumerate(steps):
        try:
            step()
        except redis.exceptions.RedisError as e:
            logger.error("Analytics write aborted",
                         failed_step=name,
                         applied_steps=applied,
                         total_steps=len(steps),
                         error=str(e),
                         exc_info=True)
            return applied

    logger.debug("Analytics hit recorded", timezone=snapshot.get("timezone"), country=snapshot.get("country"))
    return len(steps)
