import logging
import os

from dotenv import load_dotenv
from flask import Flask, jsonify
from flask_cors import CORS

# our functions
from activity.routes import (
    add_problem, get_dashboard, get_platform_progress, get_progress, refresh_dashboard, resync_progress,
)
from auth.auth import api_login, api_logout, api_register, session_required, whoami
from errors import NotFound, SyncError, SyncInProgress, Unavailable, ValidationError
from logging_config import configure_logging
from profiles.routes import (
    add_handle, get_handles, get_profile, get_profiles, put_handles, remove_handle,
    sync_all, sync_platform,
)

load_dotenv()

log = logging.getLogger(__name__)

ERROR_STATUS = (
    (ValidationError, 400),
    (NotFound, 404),
    (SyncInProgress, 409),
    (Unavailable, 502),
)


def handle_sync_error(e: SyncError):
    for cls, code in ERROR_STATUS:
        if isinstance(e, cls):
            return jsonify({"error": e.message, "platform": e.platform}), code
    log.error("Unmapped sync error: %s", e)
    return jsonify({"error": e.message, "platform": e.platform}), 500


def register_routes(app):
    # Auth
    app.add_url_rule("/api/register", view_func=api_register, methods=["POST"])
    app.add_url_rule("/api/login", view_func=api_login, methods=["POST"])
    app.add_url_rule("/api/whoami", view_func=session_required(whoami), methods=["GET"])
    app.add_url_rule("/api/logout", view_func=session_required(api_logout), methods=["POST"])

    # Handle directory
    app.add_url_rule("/api/handles", view_func=session_required(get_handles), methods=["GET"])
    app.add_url_rule("/api/handles", view_func=session_required(put_handles), methods=["PUT"])
    app.add_url_rule("/api/handles", view_func=session_required(add_handle), methods=["POST"])
    app.add_url_rule("/api/handles/<platform>", view_func=session_required(remove_handle), methods=["DELETE"])

    # Sync + profiles
    app.add_url_rule("/api/sync", view_func=session_required(sync_all), methods=["POST"])
    app.add_url_rule("/api/sync/<platform>", view_func=session_required(sync_platform), methods=["POST"])
    app.add_url_rule("/api/profiles", view_func=session_required(get_profiles), methods=["GET"])
    app.add_url_rule("/api/profiles/<platform>", view_func=session_required(get_profile), methods=["GET"])

    # Progress
    app.add_url_rule("/api/progress", view_func=session_required(get_progress), methods=["GET"])
    app.add_url_rule("/api/progress/<platform>", view_func=session_required(get_platform_progress), methods=["GET"])
    app.add_url_rule("/api/progress/problems", view_func=session_required(add_problem), methods=["POST"])
    app.add_url_rule("/api/progress/resync", view_func=session_required(resync_progress), methods=["POST"])

    # Dashboard
    app.add_url_rule("/api/dashboard", view_func=session_required(get_dashboard), methods=["GET"])
    app.add_url_rule("/api/dashboard/refresh", view_func=session_required(refresh_dashboard), methods=["POST"])


def create_app(profile_fetcher=None):
    configure_logging()
    app = Flask(__name__)
    app.config['SESSION_COOKIE_SAMESITE'] = 'None' if os.getenv("FLASK_ENV") == "production" else 'Lax'
    app.config['SESSION_COOKIE_SECURE'] = os.getenv("FLASK_ENV") == "production"
    # None means the real scrapers
    app.config['PROFILE_FETCHER'] = profile_fetcher
    CORS(app, supports_credentials=True, origins=[os.getenv("FRONTEND_URL", "http://localhost:3000")])
    app.register_error_handler(SyncError, handle_sync_error)
    register_routes(app)
    return app


if __name__ == "__main__":
    app = create_app()
    app.run(debug=False, host='0.0.0.0', port=os.getenv("PORT"))
