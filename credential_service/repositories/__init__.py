"""User store implementations."""
from credential_service.config import Settings
from credential_service.interfaces.user_store import IUserStore
from credential_service.repositories.memory_user_store import InMemoryUserStore


def build_user_store(settings: Settings) -> IUserStore:
    """Select the store backend named by USER_STORE_BACKEND."""
    backend = settings.USER_STORE_BACKEND.lower()
    if backend == 'memory':
        return InMemoryUserStore()
    if backend == 'dynamodb':
        from credential_service.repositories.dynamodb_user_store import DynamoDBUserStore
        return DynamoDBUserStore(settings)
    raise ValueError(f"Unknown user store backend: {settings.USER_STORE_BACKEND}")
