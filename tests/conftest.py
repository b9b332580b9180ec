"""Shared fixtures for users platform tests."""

import pytest
from fastapi.testclient import TestClient

from service_users.main import app
from service_users.store import UserStore


@pytest.fixture
def store():
    """A fresh store holding the three seeded users."""
    return UserStore()


@pytest.fixture
def client():
    """Test client with the application lifespan running.

    Each use starts from a freshly seeded store.
    """
    with TestClient(app) as test_client:
        yield test_client
