"""Configuration settings for credential-service."""
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Credential service configuration with environment variable support."""

    # Password hashing
    SALT_KEY_SIZE: int = 24  # Raw salt bytes before base64 encoding
    BCRYPT_COST: int = 12  # bcrypt work factor (log2 rounds), valid range 4-31

    # Re-authenticate with the account password before enabling/disabling it
    REQUIRE_PASSWORD_FOR_STATUS_CHANGE: bool = True

    # Datastore ('memory' or 'dynamodb')
    USER_STORE_BACKEND: str = "memory"
    DYNAMODB_ENDPOINT: str = "http://dynamodb-local:8000"
    DYNAMODB_REGION: str = "us-east-1"
    DYNAMODB_ACCESS_KEY: str = "test"
    DYNAMODB_SECRET_KEY: str = "test"
    USERS_TABLE_NAME: str = "users"

    # Service
    SERVICE_NAME: str = "credential-service"
    SERVICE_VERSION: str = "1.0.0"

    # Logging (socket handler is only attached when LOGGING_HOST is set)
    LOGGING_HOST: Optional[str] = None
    LOGGING_PORT: int = 9999
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore"
    )


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    return settings
