"""
Pytest fixtures and test infrastructure for the recipe backend tests.
"""
import pytest
import os
import sys
from contextlib import contextmanager
from datetime import datetime, timezone
from unittest.mock import MagicMock

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


SAMPLE_RECIPE = {
    'id': '11111111-1111-1111-1111-111111111111',
    'title': 'Tom Yum',
    'ingredients': ['shrimp', 'lime', 'lemongrass'],
    'steps': ['boil', 'serve'],
    'category': 'traditional',
    'country': 'Thai',
    'video_url': 'https://www.youtube.com/watch?v=abc',
    'image_url': None,
    'created_by': '22222222-2222-2222-2222-222222222222',
    'created_at': datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
}


@pytest.fixture
def sample_recipe():
    """A stored recipe row as returned by RecipeStore."""
    return dict(SAMPLE_RECIPE)


@pytest.fixture
def mock_store():
    """MagicMock standing in for RecipeStore in route tests."""
    return MagicMock()


@pytest.fixture
def client(mock_store):
    """TestClient with the recipe store dependency replaced by mock_store."""
    from fastapi.testclient import TestClient
    from recipe_api.main import app
    from recipe_api.routes.recipes import get_store

    app.dependency_overrides[get_store] = lambda: mock_store
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def mock_cursor():
    """Cursor mock plus a cursor factory usable as RecipeStore(cursor=...)."""
    cursor = MagicMock()

    @contextmanager
    def factory():
        yield cursor

    cursor.factory = factory
    return cursor


class FakeRelay:
    """Relay double recording every URL it was asked to send."""

    def __init__(self, envelope=None, error=None):
        self.envelope = envelope
        self.error = error
        self.calls = []

    def send(self, video_url):
        self.calls.append(video_url)
        if self.error is not None:
            raise self.error
        return self.envelope


@pytest.fixture
def fake_relay_factory():
    return FakeRelay


@pytest.fixture
def postgres_conn():
    """Test PostgreSQL connection (requires TEST_DATABASE_URL env var)."""
    import psycopg2
    url = os.environ.get('TEST_DATABASE_URL')
    if not url:
        pytest.skip("TEST_DATABASE_URL not set")
    conn = psycopg2.connect(url)
    setup_test_schema_postgres(conn)
    yield conn
    conn.rollback()  # Don't persist test data
    conn.close()


def setup_test_schema_postgres(conn):
    """Create the recipe, favorite and profile tables for PostgreSQL testing."""
    cursor = conn.cursor()
    cursor.execute('''
        CREATE TABLE IF NOT EXISTS recipes (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            title TEXT NOT NULL,
            ingredients TEXT[] NOT NULL DEFAULT '{}',
            steps TEXT[] NOT NULL DEFAULT '{}',
            category TEXT,
            country TEXT,
            video_url TEXT,
            image_url TEXT,
            created_by UUID,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now()
        );

        CREATE TABLE IF NOT EXISTS favorites (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            user_id UUID NOT NULL,
            recipe_id UUID NOT NULL REFERENCES recipes(id) ON DELETE CASCADE,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            UNIQUE (user_id, recipe_id)
        );

        CREATE TABLE IF NOT EXISTS profiles (
            user_id UUID PRIMARY KEY,
            username TEXT,
            email TEXT
        );
    ''')
    cursor.close()


def connection_cursor_factory(conn):
    """Cursor factory over a single test connection, without committing."""
    import psycopg2.extras

    @contextmanager
    def factory():
        cursor = conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor)
        try:
            yield cursor
        finally:
            cursor.close()

    return factory
