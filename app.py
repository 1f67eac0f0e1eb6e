"""
Clinical Scheduling Assistant - Flask Application
Main entry point for the web application.

This module orchestrates:
- App configuration and logging
- Shared services (encounter store, pending date choices, sessions)
- Route registration

For business logic, see:
- modules/date_utils.py - Date/time resolution
- modules/validation.py - Scheduling window checks
- services/encounters.py - Encounter storage
- routes/scheduling.py - JSON API
"""

import logging
from datetime import timedelta

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from config import load_settings
from modules.logging_config import setup_logging
from modules.pending_choices import PendingChoiceStore
from modules.session_context import SessionRegistry
from routes import scheduling_bp
from services.encounters import EncounterStore


logger = logging.getLogger(__name__)


def create_app(settings=None, store=None):
    """
    Build the Flask app.

    Args:
        settings: Overrides merged on top of config/settings.json
        store: Encounter store to use, a fresh in-memory one by default
    """
    merged = load_settings()
    merged.update(settings or {})

    app = Flask(__name__)
    app.config['SCHEDULING_SETTINGS'] = merged

    app.extensions['scheduling'] = {
        'store': store if store is not None else EncounterStore(),
        'pending': PendingChoiceStore(timeout=timedelta(minutes=merged['pending_choice_timeout_minutes'])),
        'sessions': SessionRegistry(timeout=timedelta(minutes=merged['session_timeout_minutes'])),
    }

    # =========================================================================
    # Register Blueprints
    # =========================================================================

    app.register_blueprint(scheduling_bp, url_prefix='')

    # =========================================================================
    # Error Handlers
    # =========================================================================

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return jsonify({'success': False, 'error': e.description}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(e):
        logger.exception("Unhandled error")
        return jsonify({'success': False, 'error': 'internal server error'}), 500

    @app.route('/health')
    def health():
        return jsonify({'status': 'ok'})

    return app


# =============================================================================
# Main Entry Point
# =============================================================================

if __name__ == '__main__':
    settings = load_settings()
    setup_logging(settings['log_level'], json_format=settings['log_json'])
    app = create_app(settings)
    app.run(host=settings['host'], port=settings['port'], debug=settings['debug'])
