"""
Security utilities for the Flask application
"""
import hmac
import logging
import secrets
from functools import wraps
from flask import current_app, request, session

logger = logging.getLogger(__name__)

# Characters used for CSRF field names and values
TOKEN_VALUE_CHARS = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz-_"
TOKEN_NAME_LENGTH = 64
TOKEN_VALUE_LENGTH = 128
TOKEN_NAME_SESSION_KEY = 'token_name'
TOKEN_VALUE_SESSION_KEY = 'token_value'


def rate_limit(limit_string):
    """
    Decorator to apply rate limiting to routes in production.
    Only applies rate limiting if the limiter is configured (production mode).

    Args:
        limit_string (str): Rate limit specification like "5 per minute"
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            # Apply rate limiting only if limiter is available (production)
            if hasattr(current_app, 'limiter'):
                limited_func = current_app.limiter.limit(limit_string)(f)
                return limited_func(*args, **kwargs)
            else:
                # No rate limiting in development
                return f(*args, **kwargs)
        return decorated_function
    return decorator


def random_chars(length):
    return ''.join(secrets.choice(TOKEN_VALUE_CHARS) for _ in range(length))


def issue_csrf_token():
    """
    Create a CSRF token, remember it in the session and return it.

    Both the form field name and its value are random, so a forged form
    cannot even guess which field to fill.

    Returns:
        dict with 'name' and 'value'
    """
    token = {
        'name': random_chars(TOKEN_NAME_LENGTH),
        'value': random_chars(TOKEN_VALUE_LENGTH),
    }
    session[TOKEN_NAME_SESSION_KEY] = token['name']
    session[TOKEN_VALUE_SESSION_KEY] = token['value']
    return token


def is_valid_csrf_token():
    """Check the submitted form against the token stored in the session."""
    name = session.get(TOKEN_NAME_SESSION_KEY)
    expected = session.get(TOKEN_VALUE_SESSION_KEY)
    if not name or not expected:
        logger.warning("CSRF check failed: no token in session")
        return False

    submitted = request.form.get(name, '')
    if not submitted:
        return False
    return hmac.compare_digest(submitted, expected)


def is_logged_in():
    """True when the session carries the configured logged-in marker."""
    key = current_app.config['LOGGEDIN_KEY']
    return session.get(key) == current_app.config['LOGGEDIN_VALUE']


def mark_logged_in():
    session[current_app.config['LOGGEDIN_KEY']] = current_app.config['LOGGEDIN_VALUE']
    # Tokens are single use
    session.pop(TOKEN_NAME_SESSION_KEY, None)
    session.pop(TOKEN_VALUE_SESSION_KEY, None)
