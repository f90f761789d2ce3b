"""
Shared pytest fixtures for the intake API tests.
"""
import mongomock
import pytest
from fastapi.testclient import TestClient

from config import Settings
from database import MongoStore
from main import create_app


@pytest.fixture
def settings():
    return Settings(database_url="mongodb://localhost:27017", database_name="intake_test")


@pytest.fixture
def store(settings):
    """MongoStore backed by an in-memory mongomock client."""
    return MongoStore(mongomock.MongoClient(), settings.database_name)


@pytest.fixture
def client(settings, store):
    app = create_app(settings=settings, store=store)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def offline_client():
    """Client for an app started without a connection string."""
    settings = Settings(database_url=None, database_name="intake_test")
    app = create_app(settings=settings, store=MongoStore.connect(settings))
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def valid_feedback():
    return {
        "name": "Asha",
        "mobile": "9876543210",
        "overallExperience": "Excellent",
        "whatDidYouTry": ["Biryani", "Lassi"],
        "comments": "Loved it",
        "foodQuality": "Good",
        "serviceStaff": "Friendly",
        "whatsappUpdates": "Yes",
        "whatsappNumber": "9876543210",
    }
