from blog.main import create_app

# Create the Flask application at module level
# This is required for gunicorn to find the app object
app = create_app()
