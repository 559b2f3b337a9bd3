"""
Decorators for Flask routes.

Provides reusable decorators for common route patterns.
Philosophy: DRY - Don't Repeat Yourself.
"""

from blog.decorators.auth import require_login

__all__ = ['require_login']
