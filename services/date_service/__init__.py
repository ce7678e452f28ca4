"""
Date Service Package

Timezone resolution and date formatting for the date endpoint.
"""

from .date_service import (
    resolve_timezone,
    get_zone,
    format_date,
    build_date_payload
)

__all__ = [
    'resolve_timezone',
    'get_zone',
    'format_date',
    'build_date_payload'
]
