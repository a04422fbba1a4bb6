"""Pytest configuration and shared fixtures for credential-service tests."""
import os

# Set test environment variables BEFORE importing app modules
os.environ.setdefault("USER_STORE_BACKEND", "memory")
os.environ.setdefault("BCRYPT_COST", "4")
os.environ.setdefault("REQUIRE_PASSWORD_FOR_STATUS_CHANGE", "true")
os.environ.pop("LOGGING_HOST", None)

import pytest
from unittest.mock import AsyncMock

from credential_service.config import Settings
from credential_service.domain.user import User
from credential_service.repositories.memory_user_store import InMemoryUserStore
from credential_service.services.credential_service import CredentialService
from credential_service.utils.crypto import PasswordHasher, hash_password

# Lowest cost bcrypt accepts, keeps the suite fast
TEST_COST = 4
TEST_SALT_KEY_SIZE = 24


@pytest.fixture
def test_settings():
    """Settings with fast hashing and the in-memory store."""
    return Settings(
        BCRYPT_COST=TEST_COST,
        SALT_KEY_SIZE=TEST_SALT_KEY_SIZE,
        USER_STORE_BACKEND="memory",
        _env_file=None
    )


@pytest.fixture
def hasher():
    return PasswordHasher(salt_key_size=TEST_SALT_KEY_SIZE, cost=TEST_COST)


@pytest.fixture
def user_store():
    return InMemoryUserStore()


@pytest.fixture
def service(user_store, hasher):
    """CredentialService over a real in-memory store."""
    return CredentialService(user_store, hasher)


@pytest.fixture
def permissive_service(user_store, hasher):
    """CredentialService that does not check passwords on status changes."""
    return CredentialService(user_store, hasher, require_password_for_status_change=False)


@pytest.fixture
def mock_user_store():
    """Mock IUserStore for testing."""
    return AsyncMock()


@pytest.fixture
def sample_user():
    """Fixture for a sample User with password 'password'."""
    password_hash, salt = hash_password("password", TEST_SALT_KEY_SIZE, TEST_COST)
    return User(
        user_id="user_test123",
        username="testuser",
        email="test@example.com",
        password_hash=password_hash,
        salt=salt
    )
