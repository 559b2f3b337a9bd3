"""
Application-wide error handling.

HTML requests are redirected to the error page for the status code; backend
API requests get a JSON error instead of a redirect.
"""

from flask import current_app, jsonify, redirect, request
from werkzeug.exceptions import HTTPException
import logging

logger = logging.getLogger(__name__)


def api_error(message, status):
    """JSON error body of the manager API: {"success": false, "error": message}."""
    logger.warning(f"API error {status} at {request.path}: {message}")
    return jsonify({'success': False, 'error': message}), status


def _is_api_request():
    return '/manager/api/' in request.path


def _error_page_redirect(code):
    return redirect(f"{current_app.config['ROOT_PATH']}error/{code}", code=302)


def register_error_handlers(app):
    @app.errorhandler(HTTPException)
    def handle_http_exception(e):
        logger.info(f"{e.code} {e.name} at {request.path}")
        if _is_api_request():
            return api_error(e.description or e.name, e.code)
        return _error_page_redirect(e.code)

    @app.errorhandler(Exception)
    def handle_unexpected_exception(e):
        logger.exception(f"Unhandled error at {request.path}")
        if _is_api_request():
            return api_error('server error', 500)
        return _error_page_redirect(500)
