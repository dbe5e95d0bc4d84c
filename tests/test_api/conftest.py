# tests/test_api/conftest.py
import pytest
from fastapi.testclient import TestClient

from api.main import app
from api.dependencies import get_system


@pytest.fixture
def client(system):
    """Test client whose routes use the test engine"""
    app.dependency_overrides[get_system] = lambda: system
    yield TestClient(app)
    app.dependency_overrides.clear()
