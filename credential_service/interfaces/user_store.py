"""User store interface (Dependency Inversion)"""
from abc import ABC, abstractmethod
from credential_service.domain.user import User


class IUserStore(ABC):
    """
    Interface for durable user storage.

    Implementations:
    - InMemoryUserStore (tests, local development)
    - DynamoDBUserStore (production)

    Implementations must be safe for concurrent callers and serialize
    conflicting writes to the same record themselves.
    """

    @abstractmethod
    async def create_user(self, user: User) -> User:
        """
        Persist a new user.

        Raises:
            StoreError: On duplicate username/user_id or storage failure
        """
        pass

    @abstractmethod
    async def get_user_by_id(self, user_id: str) -> User:
        """
        Get user by ID.

        Raises:
            NotFoundError: If no user has this ID
            StoreError: On storage failure
        """
        pass

    @abstractmethod
    async def save_user(self, user: User) -> None:
        """
        Full-record upsert by user_id.

        Raises:
            StoreError: On constraint violation or storage failure
        """
        pass
