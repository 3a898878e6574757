"""Pytest configuration and fixtures for testing"""

import os

# Set environment variables BEFORE importing main
os.environ.setdefault("FAL_KEY", "test_fal_key_123456")
os.environ.setdefault("ADMIN_API_KEY", "test_admin_key")
os.environ.setdefault("JWT_SECRET", "test_jwt_secret")
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["REDIS_URL"] = ""
os.environ["MASKING_PROVIDER"] = "fal"
os.environ["PREMIUM_REQUIRED_FOR_TRYON"] = "false"
os.environ["TESTING"] = "true"

import io
import uuid

import pytest
from unittest.mock import Mock, patch
from PIL import Image
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from main import app, limiter as app_limiter
from api.endpoints import auth as auth_endpoints
from api.endpoints import tryon as tryon_endpoints
from database.models import Base
from services.circuit_breaker import reset_circuit_breakers


# ========== Rate limits / breakers off between tests ==========
@pytest.fixture(scope="session", autouse=True)
def disable_rate_limits():
    """The whole suite shares one client IP"""
    for limiter in (app_limiter, auth_endpoints.limiter, tryon_endpoints.limiter):
        limiter.enabled = False
    yield


@pytest.fixture(autouse=True)
def closed_breakers():
    """Failures recorded by one test must not open a breaker for the next"""
    reset_circuit_breakers()
    yield
    reset_circuit_breakers()


# ========== Test Database Setup ==========
@pytest.fixture(scope="function")
def test_db():
    """Create a test database session"""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


# ========== Test Client Setup ==========
@pytest.fixture(scope="module")
def client():
    """Create a test client; startup builds a fresh seeded in-memory database"""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def admin_headers():
    return {"X-API-Key": "test_admin_key"}


def _register(client, username, password="secret123"):
    """Register a user and return (token, user dict)"""
    response = client.post("/api/auth/register", json={"username": username, "password": password})
    assert response.status_code == 201, response.text
    data = response.json()
    return data["token"], data["user"]


@pytest.fixture
def auth_headers(client):
    """Bearer headers for a fresh user"""
    token, _ = _register(client, f"user_{uuid.uuid4().hex[:12]}")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def register_user(client):
    """Factory fixture: register_user(username) -> (token, user)"""
    def _factory(username, password="secret123"):
        return _register(client, username, password)
    return _factory


# ========== Image Helpers ==========
def _image_bytes(color="white", size=(640, 480), image_format="JPEG"):
    buffer = io.BytesIO()
    Image.new("RGB", size, color=color).save(buffer, format=image_format)
    return buffer.getvalue()


@pytest.fixture
def sample_image_bytes():
    """JPEG bytes of a plain image"""
    return _image_bytes()


@pytest.fixture
def view_files():
    """Multipart files for the three scan views"""
    return {
        "left": ("left.jpg", io.BytesIO(_image_bytes("red")), "image/jpeg"),
        "front": ("front.jpg", io.BytesIO(_image_bytes("green")), "image/jpeg"),
        "right": ("right.png", io.BytesIO(_image_bytes("blue", image_format="PNG")), "image/png"),
    }


# ========== Mock External Services ==========
@pytest.fixture
def mock_redis():
    """Mock Redis client"""
    with patch('core.cache.redis_client') as mock:
        mock.get.return_value = None
        mock.setex.return_value = True
        mock.ping.return_value = True
        yield mock


@pytest.fixture
def mock_fal_client():
    """Mock fal SyncClient returned by FalModelService.client"""
    mock = Mock()
    mock.subscribe.return_value = {}
    return mock
