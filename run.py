import os
import sys
from pathlib import Path
import argparse


def check_environment():
    """Check that SECRET_KEY is available before the app is imported."""
    if os.environ.get('SECRET_KEY'):
        return
    if not Path(".env").exists():
        print("❌ No .env file found and SECRET_KEY is not set.")
        print("   Create a .env file with at least SECRET_KEY=<random value>.")
        sys.exit(1)


if __name__ == '__main__':
    parser = argparse.ArgumentParser(
        description='Run the blog Flask application')
    parser.add_argument('--host', default='127.0.0.1',
                        help='Interface to bind')
    parser.add_argument('--port', type=int, default=5000,
                        help='Port to run the application on')
    args = parser.parse_args()

    check_environment()

    from blog.main import create_app
    app = create_app()

    # Debug mode should be controlled by FLASK_ENV, not hardcoded
    debug_mode = os.environ.get('FLASK_ENV', 'development') == 'development'
    app.run(host=args.host, port=args.port, debug=debug_mode, threaded=True)
