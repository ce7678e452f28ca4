"""
Redis key layout for analytics data.
"""

from dataclasses import dataclass

from services.config import AppConfig


@dataclass(frozen=True)
class AnalyticsKeys:
    """Names of the Redis keys holding analytics data, under one prefix."""

    prefix: str = AppConfig.ANALYTICS_KEY_PREFIX

    @property
    def total_hits(self) -> str:
        return f"{self.prefix}total_hits"

    @property
    def daily_hits(self) -> str:
        return f"{self.prefix}daily_hits"

    @property
    def timezones(self) -> str:
        return f"{self.prefix}timezones"

    @property
    def countries(self) -> str:
        return f"{self.prefix}countries"

    @property
    def cities(self) -> str:
        return f"{self.prefix}cities"

    @property
    def regions(self) -> str:
        return f"{self.prefix}regions"

    @property
    def recent_requests(self) -> str:
        return f"{self.prefix}recent_requests"
