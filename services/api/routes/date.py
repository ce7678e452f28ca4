from flask import Blueprint, jsonify, current_app, request
import structlog

from services.date_service import resolve_timezone, build_date_payload
from services.analytics.recorder import build_request_snapshot

date_bp = Blueprint('date', __name__)

logger = structlog.get_logger(__name__)

@date_bp.route('/date', methods=['GET'])
def get_date():
    """
    Return today's date for the caller's timezone.

    Query Parameters:
        timezone: Optional IANA timezone identifier. Falls back to the
                  geo-IP timezone header, then to the default timezone.

    Returns:
        200: {"message", "date", "timezone"}
        400: Invalid timezone (raised as InvalidTimezoneError)
    """
    config = current_app.config
    timezone = resolve_timezone(
        request.args.get('timezone'),
        request.headers.get(config['GEO_TIMEZONE_HEADER']),
        config['DEFAULT_TIMEZONE']
    )

    # Raises InvalidTimezoneError before any analytics is dispatched
    payload = build_date_payload(timezone, message_template=config['DATE_MESSAGE_TEMPLATE'])

    if config.get('DATE_TRACKING_ENABLED', True):
        analytics_service = getattr(current_app, 'analytics_service', None)
        if analytics_service:
            snapshot = build_request_snapshot(request.headers, timezone)
            analytics_service.track_request(snapshot)
        else:
            logger.warning("AnalyticsService instance not found on current_app. Hit not tracked.")

    return jsonify(payload), 200
