import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _optional_int(name):
    value = os.environ.get(name)
    if value in (None, ''):
        return None
    return int(value)


class Config:
    """Base configuration class."""
    SECRET_KEY = os.environ.get('SECRET_KEY')
    if not SECRET_KEY:
        raise ValueError("SECRET_KEY environment variable must be set")
    if SECRET_KEY in ['CHANGE_THIS_SECRET_KEY', 'your-secret-key-here', 'secret']:
        raise ValueError("SECRET_KEY must be changed from the default placeholder value")

    # Document store (SQLite file under APP_DATA_DIR unless DATABASE_PATH is given)
    APP_DATA_DIR = os.environ.get('APP_DATA_DIR', 'instance')
    DATABASE_PATH = os.environ.get('DATABASE_PATH', os.path.join(APP_DATA_DIR, 'blog.db'))
    STORE_QUERY_TIMEOUT = float(os.environ.get('STORE_QUERY_TIMEOUT', '5.0'))  # seconds per query

    FLASK_ENV = os.environ.get('FLASK_ENV', 'development')
    if FLASK_ENV == 'CHANGE_THIS_ENVIRONMENT':
        raise ValueError("FLASK_ENV must be changed from the default placeholder value")

    # Application settings
    DEBUG = False
    TESTING = False

    # Site layout
    BLOG_URL = os.environ.get('BLOG_URL', 'http://localhost:5000')
    ROOT_PATH = os.environ.get('ROOT_PATH', '/')
    BACKEND_URI = os.environ.get('BACKEND_URI', 'backend/')
    PAGE_PER_VIEW = int(os.environ.get('PAGE_PER_VIEW', '10'))

    # Per-cache memo bound; None keeps every computed page/entry/tag list
    CONTENT_CACHE_MAX_ENTRIES = _optional_int('CONTENT_CACHE_MAX_ENTRIES')

    # Session configuration (cookie path is narrowed to the backend in create_app)
    SESSION_NAME = os.environ.get('SESSION_NAME', 'blog_session')
    LOGGEDIN_KEY = os.environ.get('LOGGEDIN_KEY', 'loggedin')
    LOGGEDIN_VALUE = os.environ.get('LOGGEDIN_VALUE', '1')
    SESSION_COOKIE_SECURE = True  # Only send cookies over HTTPS
    SESSION_COOKIE_HTTPONLY = True  # Prevent XSS attacks
    SESSION_COOKIE_SAMESITE = 'Strict'

    # Admin API auth bypass, development only
    ADMIN_API_DEV_BYPASS = False

    # Upload settings (configurable via environment variables)
    MAX_CONTENT_LENGTH = int(os.environ.get('MAX_CONTENT_LENGTH', str(16 * 1024 * 1024)))  # 16MB max upload default
    FILES_FOLDER = os.environ.get('FILES_FOLDER', 'files')
    ALLOWED_IMAGE_EXTENSIONS = {'png', 'jpg', 'jpeg', 'gif', 'webp'}


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True
    SESSION_COOKIE_SECURE = os.environ.get('SESSION_COOKIE_SECURE', 'false').lower() == 'true'  # Allow HTTP in development
    ADMIN_API_DEV_BYPASS = os.environ.get('ADMIN_API_DEV_BYPASS', 'false').lower() == 'true'


class TestingConfig(Config):
    """Testing configuration."""
    TESTING = True
    SESSION_COOKIE_SECURE = False  # Allow HTTP in testing
    PAGE_PER_VIEW = 2
    STORE_QUERY_TIMEOUT = 2.0


class ProductionConfig(Config):
    """Production configuration."""
    # Explicitly disable debug mode in production
    DEBUG = False

    # Ensure HTTPS in production
    SESSION_COOKIE_SECURE = True


# Configuration dictionary
config = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
    'default': DevelopmentConfig
}
