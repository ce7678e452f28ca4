from flask import Blueprint, jsonify, current_app

# Define the Blueprint
root_bp = Blueprint('root_bp', __name__)

@root_bp.route('/')
def service_info():
    """Return basic API info and the endpoint map."""
    api_prefix = current_app.config.get('API_PREFIX', '/api')

    return jsonify({
        "message": "Timezone Date API",
        "version": current_app.config.get('API_VERSION'),
        "endpoints": {
            "date": f"{api_prefix}/date",
            "analytics": f"{api_prefix}/analytics",
            "health": f"{api_prefix}/health"
        }
    })
