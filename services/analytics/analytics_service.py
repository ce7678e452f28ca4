#!/usr/bin/env python3
"""
Analytics Service Module

Dispatches request snapshots to the background recorder and builds the
analytics report from Redis.
"""

import json
import structlog
from typing import Dict, List, Any, Optional, Mapping, Iterable
import redis

from services.config import AppConfig
from services.utils.error_utils import AnalyticsStoreError
from services.tasks.analytics_tasks import record_request_task
from .keys import AnalyticsKeys

logger = structlog.get_logger(__name__)

def sort_counters(counters: Optional[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    """Turn a counter hash into ``[{name, count}]`` sorted by count, highest first."""
    items = [{"name": name, "count": int(count)} for name, count in (counters or {}).items()]
    # sorted() is stable, so ties keep store order
    return sorted(items, key=lambda item: item["count"], reverse=True)

def daily_series(daily_hits: Optional[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    """Turn the daily hash into ``[{date, hits}]`` ordered by date."""
    return [
        {"date": date, "hits": int(hits)}
        for date, hits in sorted((daily_hits or {}).items())
    ]

def parse_recent(entries: Optional[Iterable[str]]) -> List[Dict[str, Any]]:
    """Decode stored snapshots, dropping any entry that is not a JSON object."""
    parsed = []
    for entry in entries or []:
        try:
            item = json.loads(entry)
        except (TypeError, ValueError):
            logger.debug("Skipping unparseable recent request entry")
            continue
        if isinstance(item, dict):
            parsed.append(item)
    return parsed

def build_report(
    raw: Dict[str, Any],
    top_cities: int = AppConfig.ANALYTICS_TOP_CITIES,
    top_regions: int = AppConfig.ANALYTICS_TOP_REGIONS,
    recent_display_limit: int = AppConfig.ANALYTICS_RECENT_DISPLAY_LIMIT
) -> Dict[str, Any]:
    """
    Shape the raw store values into the analytics response.

    Args:
        raw: Dict with ``total_hits``, ``daily_hits``, ``timezones``,
             ``countries``, ``cities``, ``regions`` and ``recent_requests``
             as returned by Redis.
    """
    timezones = raw.get("timezones") or {}
    countries = raw.get("countries") or {}
    cities = raw.get("cities") or {}
    regions = raw.get("regions") or {}

    return {
        "summary": {
            "totalHits": int(raw.get("total_hits") or 0),
            "uniqueCountries": len(countries),
            "uniqueCities": len(cities),
            "uniqueTimezones": len(timezones)
        },
        "dailyHits": daily_series(raw.get("daily_hits")),
        "timezones": sort_counters(timezones),
        "countries": sort_counters(countries),
        "cities": sort_counters(cities)[:top_cities],
        "regions": sort_counters(regions)[:top_regions],
        "recentRequests": parse_recent(raw.get("recent_requests"))[:recent_display_limit]
    }

class AnalyticsService:
    """Service class for recording and reporting request analytics using Redis."""

    def __init__(self, config: Mapping[str, Any], redis_client: Optional[redis.Redis]):
        """Initialize the AnalyticsService with an injected Redis client."""
        self.config = config
        self.redis_client = redis_client
        self.keys = AnalyticsKeys(prefix=self.config.get('ANALYTICS_KEY_PREFIX', AppConfig.ANALYTICS_KEY_PREFIX))
        self.recent_limit = self.config.get('ANALYTICS_RECENT_LIMIT', AppConfig.ANALYTICS_RECENT_LIMIT)

        if self.redis_client:
            logger.info("AnalyticsService initialized with Redis client.")
        else:
            logger.warning("AnalyticsService initialized without a Redis client. Reports will be unavailable.")

    def track_request(self, snapshot: Dict[str, Any]) -> bool:
        """
        Enqueue a request snapshot for recording without waiting for it.

        Returns:
            True if the task was handed to the broker, False otherwise.
            Failures are logged and never raised.
        """
        try:
            record_request_task.delay(snapshot)
            logger.debug("Analytics hit enqueued", timezone=snapshot.get("timezone"))
            return True
        except Exception as e:
            logger.error("Failed to enqueue analytics hit", error=str(e), exc_info=True)
            return False

    def fetch_raw(self) -> Dict[str, Any]:
        """
        Read every analytics key in a single pipelined round trip.

        Raises:
            AnalyticsStoreError: If Redis is not configured or any read fails.
        """
        if not self.redis_client:
            logger.error("Cannot fetch analytics: Redis client not available.")
            raise AnalyticsStoreError()

        pipe = self.redis_client.pipeline(transaction=False)
        pipe.get(self.keys.total_hits)
        pipe.hgetall(self.keys.daily_hits)
        pipe.hgetall(self.keys.timezones)
        pipe.hgetall(self.keys.countries)
        pipe.hgetall(self.keys.cities)
        pipe.hgetall(self.keys.regions)
        pipe.lrange(self.keys.recent_requests, 0, self.recent_limit - 1)

        try:
            (total_hits, daily_hits, timezones, countries,
             cities, regions, recent_requests) = pipe.execute()
        except redis.exceptions.RedisError as e:
            logger.error("Redis error retrieving analytics data", error=str(e), exc_info=True)
            raise AnalyticsStoreError() from e

        return {
            "total_hits": total_hits,
            "daily_hits": daily_hits,
            "timezones": timezones,
            "countries": countries,
            "cities": cities,
            "regions": regions,
            "recent_requests": recent_requests
        }

    def get_report(self) -> Dict[str, Any]:
        """Return the analytics summary document."""
        report = build_report(
            self.fetch_raw(),
            top_cities=self.config.get('ANALYTICS_TOP_CITIES', AppConfig.ANALYTICS_TOP_CITIES),
            top_regions=self.config.get('ANALYTICS_TOP_REGIONS', AppConfig.ANALYTICS_TOP_REGIONS),
            recent_display_limit=self.config.get('ANALYTICS_RECENT_DISPLAY_LIMIT', AppConfig.ANALYTICS_RECENT_DISPLAY_LIMIT)
        )
        logger.debug("Analytics report built", total_hits=report["summary"]["totalHits"])
        return report
