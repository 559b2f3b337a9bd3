# Routes package initialization
from blog.routes.public_routes import public_bp
from blog.routes.backend_routes import backend_bp

__all__ = [
    'public_bp',
    'backend_bp'
]
