"""In-memory user store implementation"""
import dataclasses
import logging
from typing import Dict

from credential_service.domain.user import User
from credential_service.errors import NotFoundError, StoreError
from credential_service.interfaces.user_store import IUserStore

logger = logging.getLogger(__name__)


class InMemoryUserStore(IUserStore):
    """
    Dict-backed user store.

    Records are copied on the way in and out so a caller never holds a
    reference to the stored object.
    """

    def __init__(self):
        self._users: Dict[str, User] = {}

    async def create_user(self, user: User) -> User:
        """Create new user"""
        if user.user_id in self._users:
            raise StoreError(f"User {user.user_id} already exists", duplicate=True)
        self._check_username_free(user)

        self._users[user.user_id] = dataclasses.replace(user)
        logger.debug(f"Created user {user.user_id}")
        return dataclasses.replace(user)

    async def get_user_by_id(self, user_id: str) -> User:
        """Get user by ID"""
        user = self._users.get(user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found")
        return dataclasses.replace(user)

    async def save_user(self, user: User) -> None:
        """Upsert full user record"""
        self._check_username_free(user)
        self._users[user.user_id] = dataclasses.replace(user)
        logger.debug(f"Saved user {user.user_id}")

    def _check_username_free(self, user: User) -> None:
        for existing in self._users.values():
            if existing.username == user.username and existing.user_id != user.user_id:
                raise StoreError(
                    f"Username '{user.username}' already exists",
                    duplicate=True
                )

    def __len__(self) -> int:
        return len(self._users)
