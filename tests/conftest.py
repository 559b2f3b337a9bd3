"""
Shared fixtures: a Flask app on a throwaway SQLite file per test.
"""

import os

# config.Config refuses to load without a SECRET_KEY
os.environ.setdefault('SECRET_KEY', 'test-secret-key-do-not-use-in-production')

import pytest

from blog.main import create_app
from tests.test_data_generators import EntryTestData, insert_entries


@pytest.fixture
def app(tmp_path):
    """Create test Flask app with an empty store."""
    return create_app('testing', {
        'DATABASE_PATH': str(tmp_path / 'blog.db'),
        'FILES_FOLDER': str(tmp_path / 'files'),
    })


@pytest.fixture
def seed(app):
    """Insert entries and rebuild the tag index, as a restart would."""
    def _seed(entries):
        insert_entries(app, entries)
        with app.app_context():
            app.tag_service.rebuild_tag_index()
        return entries
    return _seed


@pytest.fixture
def five_posts(seed):
    """Five published entries, post-5 newest."""
    return seed(EntryTestData.published_series(5))


@pytest.fixture
def client(app):
    """Create test client."""
    with app.test_client() as client:
        yield client


@pytest.fixture
def app_ctx(app):
    with app.app_context():
        yield app
