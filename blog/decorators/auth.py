"""
Authentication decorators for backend route protection.

Philosophy: Single source of truth for authentication. Simplicity through auto-detection.
"""

from functools import wraps
from flask import current_app, jsonify, redirect, request, url_for
from blog.utils.security import is_logged_in
import logging

logger = logging.getLogger(__name__)


def require_login(f):
    """
    Decorator to require a logged-in admin session.

    Auto-detects API vs HTML routes and responds appropriately: API routes
    (anything under /manager/api/) answer 401 with a JSON body of 0, HTML
    routes redirect to the login form.

    ADMIN_API_DEV_BYPASS lets API routes through without a session; it is
    only ever enabled in development.

    Usage:
        @backend_bp.route('/manager/')
        @require_login
        def manager():
            ...

    Args:
        f: The route function to decorate

    Returns:
        Decorated function that enforces authentication
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        is_api = '/manager/api/' in request.path or request.is_json

        if is_logged_in():
            return f(*args, **kwargs)

        if is_api and current_app.config.get('ADMIN_API_DEV_BYPASS'):
            logger.debug(f"Development bypass for {f.__name__} at {request.path}")
            return f(*args, **kwargs)

        logger.warning(
            f"Unauthenticated access attempt to {f.__name__} at {request.path}"
        )
        if is_api:
            return jsonify(0), 401
        return redirect(url_for('backend.login'))

    return decorated_function
