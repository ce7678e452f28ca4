#!/usr/bin/env python3
"""
Analytics API Routes

Provides the API endpoint for the analytics summary report.
"""

import structlog
from flask import Blueprint, jsonify, current_app

from services.analytics.analytics_service import AnalyticsService
from services.utils.error_utils import AnalyticsStoreError

# Configure logger
logger = structlog.get_logger(__name__)

# Create Blueprint
analytics_bp = Blueprint("analytics", __name__)

def get_analytics_service() -> AnalyticsService:
    analytics_service = getattr(current_app, 'analytics_service', None)
    if analytics_service is None:
        logger.error("AnalyticsService not initialized or attached to current_app")
        raise AnalyticsStoreError()
    return analytics_service

@analytics_bp.route("/analytics", methods=["GET"])
def analytics_report():
    """
    Get the analytics summary.

    Returns:
        200: Summary counters, daily hits, sorted dimension lists and recent requests
        500: The analytics store could not be read
    """
    # AnalyticsStoreError propagates to the app error handler as a 500
    report = get_analytics_service().get_report()
    return jsonify(report)
