from flask import Flask, jsonify
import logging
import os
from datetime import datetime

from blog.utils.links import LinkBuilder, normalize_root_path

logger = logging.getLogger(__name__)


def create_app(config_name=None, overrides=None):
    logging.basicConfig(level=logging.INFO)
    app = Flask(__name__)
    logger.info("Logger initialized at INFO level")

    # Load configuration from config.py
    from config import config

    # Determine config name from environment or parameter
    if config_name is None:
        config_name = os.environ.get('FLASK_ENV', 'development')

    # Load the appropriate configuration
    app.config.from_object(config.get(config_name, config['development']))
    if overrides:
        app.config.update(overrides)

    # Override with additional settings for development
    if config_name == 'development':
        app.config.update(
            TEMPLATES_AUTO_RELOAD=True,
        )

    # Session cookie only travels to the backend
    root_path = normalize_root_path(app.config['ROOT_PATH'])
    app.config['ROOT_PATH'] = root_path
    app.config.update(
        SESSION_COOKIE_NAME=app.config['SESSION_NAME'],
        SESSION_COOKIE_PATH=root_path + app.config['BACKEND_URI'],
    )

    # Add security headers with Flask-Talisman (production only)
    if config_name == 'production':
        from flask_talisman import Talisman
        from flask_limiter import Limiter
        from flask_limiter.util import get_remote_address

        csp = {
            'default-src': "'self'",
            'script-src': "'self'",
            'style-src': [
                "'self'",
                "'unsafe-inline'"  # Needed for inline styles
            ],
            'img-src': [
                "'self'",
                "data:",
                "https:"
            ],
            'connect-src': "'self'"
        }

        Talisman(
            app,
            force_https=True,
            strict_transport_security=True,
            strict_transport_security_max_age=31536000,  # 1 year
            content_security_policy=csp,
            referrer_policy='strict-origin-when-cross-origin',
            session_cookie_secure=True,
        )
        logger.info("Security headers configured with Flask-Talisman")

        # Add rate limiting
        limiter = Limiter(
            key_func=get_remote_address,
            app=app,
            default_limits=["600 per hour", "120 per minute"],
            storage_uri="memory://",
            strategy="fixed-window"
        )

        # Store limiter in app for use in routes
        app.limiter = limiter
        logger.info("Rate limiting configured with Flask-Limiter")

    # Template helpers
    from blog.utils.rendering import to_markdown, dt_format
    app.jinja_env.globals['to_markdown'] = to_markdown
    app.jinja_env.filters['dt_format'] = dt_format

    @app.context_processor
    def inject_site():
        return {
            'now': datetime.now(),
            'root_path': app.config['ROOT_PATH'],
            'blog_url': app.config['BLOG_URL'],
        }

    # Content core: caches start empty, the tag index is built below
    from blog.services import EntryService, TagService
    links = LinkBuilder(root_path)
    app.entry_service = EntryService(
        links,
        page_size=app.config['PAGE_PER_VIEW'],
        max_cache_entries=app.config.get('CONTENT_CACHE_MAX_ENTRIES'),
    )
    app.tag_service = TagService(links)

    # Register blueprints
    from blog.routes.backend_routes import backend_bp
    app.register_blueprint(backend_bp, url_prefix=root_path + app.config['BACKEND_URI'].strip('/'))

    from blog.routes.public_routes import public_bp
    app.register_blueprint(public_bp, url_prefix=root_path.rstrip('/') or None)

    from blog.routes.errors import register_error_handlers
    register_error_handlers(app)

    # Initialize the database
    from blog.db_manager import init_db, init_db_command
    init_db(app)
    app.cli.add_command(init_db_command)

    # Build the tag index before the first request is served
    with app.app_context():
        app.tag_service.rebuild_tag_index()

    @app.route('/health')
    def health_check():
        """Health check endpoint for Docker and load balancers."""
        from blog.repositories import EntryRepository
        published = EntryRepository.count_published()
        if published is None:
            return jsonify({
                'status': 'unhealthy',
                'timestamp': datetime.utcnow().isoformat(),
                'database': 'unavailable'
            }), 503

        return jsonify({
            'status': 'healthy',
            'timestamp': datetime.utcnow().isoformat(),
            'database': 'connected',
            'published_entries': published,
            'tags': len(app.tag_service.tags)
        }), 200

    return app
