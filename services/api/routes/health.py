from flask import Blueprint, jsonify, current_app
from typing import Dict, Any
import redis
import structlog

health_bp = Blueprint('health', __name__)

logger = structlog.get_logger(__name__)

def _check_redis_status(redis_client) -> Dict[str, Any]:
    """Checks Redis connection status."""
    if not redis_client:
        logger.warning("Redis client not configured.")
        return {"status": "unhealthy", "error": "Redis client not configured."}
    try:
        if redis_client.ping():
            return {"status": "healthy"}
        logger.warning("Redis ping returned a falsy response.")
        return {"status": "unhealthy", "error": "Redis ping failed."}
    except redis.exceptions.RedisError as e:
        logger.error("Error checking Redis status", error=str(e))
        return {"status": "unhealthy", "error": str(e)}

@health_bp.route('/health', methods=['GET'])
def health_check():
    """API endpoint to check service health.

    Always 200 while the web tier is up; Redis problems only show in the payload.
    """
    redis_client = getattr(current_app, 'redis_client', None)
    return jsonify({
        "status": "ok",
        "version": current_app.config.get('API_VERSION'),
        "redis": _check_redis_status(redis_client)
    }), 200
