import pytest
from unittest.mock import MagicMock
from fastapi.testclient import TestClient

from app.main import app
from app.core.auth import StaffPrincipal, get_current_staff
from app.db.mongo import get_db


@pytest.fixture
def mock_db():
    """Stand-in for the motor database; collections are MagicMocks."""
    return MagicMock()


@pytest.fixture
def client(mock_db):
    """Test client without lifespan, so no MongoDB connection is opened."""
    app.dependency_overrides[get_db] = lambda: mock_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def as_accountant():
    app.dependency_overrides[get_current_staff] = lambda: StaffPrincipal(id="staff-1", role="accountant")
    yield
    app.dependency_overrides.pop(get_current_staff, None)


@pytest.fixture
def as_teacher():
    app.dependency_overrides[get_current_staff] = lambda: StaffPrincipal(id="staff-2", role="teacher")
    yield
    app.dependency_overrides.pop(get_current_staff, None)
