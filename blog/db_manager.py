import os
import sqlite3
import time
import logging
from flask import g, current_app
import click
from flask.cli import with_appcontext

from blog.exceptions import StoreError, StoreTimeoutError

# Configure logging
logger = logging.getLogger(__name__)

# Number of SQLite VM instructions between deadline checks
PROGRESS_HANDLER_STEPS = 1000

REQUIRED_TABLES = {
    'entries': ['entry_id', 'entry_code', 'publish_date', 'title', 'content', 'tags',
                'is_published', 'author_id', 'created_at', 'updated_at'],
    'users': ['user_id', 'name', 'password'],
}


def _connect(db_path, timeout):
    """Open a connection with dict-like rows and the configured busy timeout."""
    db_dir = os.path.dirname(db_path)
    if db_dir and not os.path.exists(db_dir):
        try:
            os.makedirs(db_dir, exist_ok=True)
            logger.info(f"Created database directory: {db_dir}")
        except OSError as e:
            logger.error(f"Failed to create database directory {db_dir}: {e}")
            raise StoreError(f"Cannot create database directory {db_dir}") from e

    try:
        db = sqlite3.connect(db_path, timeout=timeout, detect_types=sqlite3.PARSE_DECLTYPES)
    except sqlite3.Error as e:
        logger.error(f"Failed to connect to database {db_path}: {e}")
        raise StoreError(f"Cannot connect to database {db_path}") from e
    db.row_factory = sqlite3.Row
    logger.debug(f"Connected to database: {db_path}")
    return db


def get_db():
    """
    Get a database connection for the current app context.
    The connection is cached and reused for the same request.
    """
    if 'db' not in g:
        g.db = _connect(
            current_app.config['DATABASE_PATH'],
            current_app.config.get('STORE_QUERY_TIMEOUT', 5.0)
        )
    return g.db


def close_db(e=None):
    """Close the database connection at the end of the request."""
    db = g.pop('db', None)
    if db is not None:
        db.close()


def init_db(app):
    """
    Create the entries/users schema if it doesn't exist, then verify it.
    """
    with app.app_context():
        db = get_db()
        with app.open_resource('schema.sql', mode='r') as f:
            db.executescript(f.read())
        db.commit()
        verify_schema(db)
        close_db()

    # Assign teardown
    app.teardown_appcontext(close_db)
    logger.info(f"Database ready at {app.config['DATABASE_PATH']}")


def verify_schema(db):
    """
    Verify that all required tables/columns are present.
    Missing pieces are logged; queries against them will fail as store errors.
    """
    cursor = db.cursor()
    for table, required_columns in REQUIRED_TABLES.items():
        cursor.execute("SELECT name FROM sqlite_master WHERE type='table' AND name=?", [table])
        if not cursor.fetchone():
            logger.warning(f"Missing table: {table}. You might need to re-run schema.sql.")
            continue

        col_names = [col[1] for col in cursor.execute(f"PRAGMA table_info({table})").fetchall()]
        missing_columns = [col for col in required_columns if col not in col_names]
        if missing_columns:
            logger.warning(f"Missing columns in '{table}' table: {missing_columns}")


def query_db(query, args=(), one=False, timeout=None):
    """
    Query the database and return results as dictionary objects.

    Args:
        query: SQL text
        args: bound parameters
        one: return the first row (or None) instead of a list
        timeout: seconds before the query is interrupted
            (defaults to STORE_QUERY_TIMEOUT)

    Raises:
        StoreTimeoutError: the query ran past its deadline
        StoreError: any other sqlite failure, or an argument too large to bind
    """
    if timeout is None:
        timeout = current_app.config.get('STORE_QUERY_TIMEOUT')

    logger.debug(f"Executing query: {query}")
    logger.debug(f"Query args: {args}")

    db = get_db()
    deadline = time.monotonic() + timeout if timeout else None
    if deadline is not None:
        db.set_progress_handler(
            lambda: 1 if time.monotonic() > deadline else 0,
            PROGRESS_HANDLER_STEPS
        )
    try:
        cursor = db.execute(query, args)
        rv = cursor.fetchall()
        cursor.close()
    except sqlite3.OperationalError as e:
        if deadline is not None and time.monotonic() > deadline:
            logger.error(f"Database query timed out after {timeout}s: {query}")
            raise StoreTimeoutError(f"Query exceeded {timeout}s") from e
        logger.error(f"Database query failed: {str(e)}")
        logger.error(f"Query was: {query}")
        logger.error(f"Args were: {args}")
        raise StoreError(str(e)) from e
    except (sqlite3.Error, OverflowError) as e:
        # OverflowError: a bound int does not fit SQLite's 64-bit INTEGER
        logger.error(f"Database query failed: {str(e)}")
        logger.error(f"Query was: {query}")
        logger.error(f"Args were: {args}")
        raise StoreError(str(e)) from e
    finally:
        if deadline is not None:
            db.set_progress_handler(None, 0)

    # Convert rows to dictionaries
    result = [dict(row) for row in rv]
    logger.debug(f"Query returned {len(result)} rows")

    return (result[0] if result else None) if one else result


def execute_db(query, args=()):
    """
    Execute a statement and commit changes, returning the rowcount.
    Used by the init-db command and test fixtures; the content core never writes.
    """
    try:
        logger.debug(f"Executing statement: {query}")
        logger.debug(f"Statement args: {args}")

        db = get_db()
        cursor = db.execute(query, args)
        rowcount = cursor.rowcount
        db.commit()
        cursor.close()

        logger.debug(f"Statement affected {rowcount} rows")
        return rowcount
    except sqlite3.Error as e:
        logger.error(f"Database execute failed: {str(e)}")
        logger.error(f"Statement was: {query}")
        logger.error(f"Args were: {args}")
        raise StoreError(str(e)) from e


@click.command('init-db')
@with_appcontext
def init_db_command():
    """Create the entries and users tables if they don't exist."""
    init_db(current_app)
    click.echo('Initialized the database.')
