"""Credential management service (account lifecycle business logic)."""

from typing import Optional
import logging
import uuid

from credential_service.domain.user import User, UserCreationRequest
from credential_service.errors import (
    AuthenticationError,
    HashingError,
    ValidationError,
)
from credential_service.interfaces.user_store import IUserStore
from credential_service.utils.crypto import PasswordHasher

logger = logging.getLogger(__name__)

CURRENT_PASSWORD_FAILED = "current password validation failed"


class CredentialService:
    """
    Account lifecycle operations.

    Handles:
    - Creating users with salted password hashes and safe defaults
    - Fetching users
    - Changing passwords (verify old, rotate salt and hash)
    - Granting/revoking the admin flag
    - Enabling/disabling accounts

    Stateless apart from the injected store and hasher. Every mutation is a
    read-modify-write of the full record.
    """

    def __init__(
        self,
        user_store: IUserStore,
        hasher: PasswordHasher,
        require_password_for_status_change: bool = True
    ):
        """
        Initialize credential service with dependencies.

        Args:
            user_store: Datastore holding user records
            hasher: Password hashing utility with salt size and cost bound in
            require_password_for_status_change: Verify the account password
                before enabling/disabling it
        """
        self.user_store = user_store
        self.hasher = hasher
        self.require_password_for_status_change = require_password_for_status_change

    async def create_user(self, request: UserCreationRequest) -> User:
        """
        Create a user from a creation request.

        admin and admin_forced_password_reset default to False, enabled is
        always True.

        Raises:
            ValidationError: Missing username/email/password or password too long
            EntropyError: Salt could not be generated
            HashingError: bcrypt rejected the configured cost
            StoreError: Store rejected the write (e.g. duplicate username)
        """
        # Surrounding whitespace is dropped from identifiers, never from passwords
        username = (request.username or "").strip()
        email = (request.email or "").strip()
        for field_name, value in (('username', username), ('email', email), ('password', request.password)):
            if not value:
                raise ValidationError(f"Missing required field: {field_name}")
        self._validate_password(request.password)

        password_hash, salt = self.hasher.hash(request.password)

        user = User(
            user_id=f"user_{uuid.uuid4().hex[:12]}",
            username=username,
            email=email,
            password_hash=password_hash,
            salt=salt,
            admin=false_if_none(request.admin),
            admin_forced_password_reset=false_if_none(request.admin_forced_password_reset),
            enabled=True
        )

        user = await self.user_store.create_user(user)
        logger.info(f"Created user {user.username} ({user.user_id}), admin={user.admin}")
        return user

    async def get_user(self, user_id: str) -> User:
        """Get user by ID (raises NotFoundError)"""
        return await self.user_store.get_user_by_id(user_id)

    async def change_password(self, user_id: str, old: str, new: str) -> None:
        """
        Replace a user's password after verifying the current one.

        A fresh salt is generated; the old salt and hash are discarded.

        Raises:
            NotFoundError: Unknown user_id
            AuthenticationError: Current password did not verify
            ValidationError: New password empty or too long
            EntropyError / HashingError / StoreError: From hashing or persistence
        """
        user = await self.get_user(user_id)

        self._authenticate(user, old)

        if not new:
            raise ValidationError("Missing required field: new password")
        self._validate_password(new)

        password_hash, salt = self.hasher.hash(new)
        user.salt = salt
        user.password_hash = password_hash

        await self._save_user(user)
        logger.info(f"Password changed for user {user_id}")

    async def update_admin_role(self, user_id: str, is_admin: bool) -> None:
        """Set the admin flag (raises NotFoundError / StoreError)"""
        user = await self.get_user(user_id)
        user.admin = is_admin
        await self._save_user(user)
        logger.info(f"Admin role for user {user_id} set to {is_admin}")

    async def update_user_status(
        self,
        user_id: str,
        enabled: bool,
        password: Optional[str] = None
    ) -> None:
        """
        Enable or disable a user.

        When require_password_for_status_change is set, password must verify
        against the account's stored credential; otherwise it is ignored.

        Raises:
            NotFoundError: Unknown user_id
            AuthenticationError: Password required and did not verify
            StoreError: Persistence failed
        """
        user = await self.get_user(user_id)

        if self.require_password_for_status_change:
            self._authenticate(user, password or "")
        elif password is not None:
            logger.debug(f"Ignoring password on status change for user {user_id}")

        user.enabled = enabled
        await self._save_user(user)
        logger.info(f"User {user_id} {'enabled' if enabled else 'disabled'}")

    def _authenticate(self, user: User, plaintext: str) -> None:
        """Collapse every verification failure into one AuthenticationError."""
        try:
            verified = self.hasher.verify(plaintext, user.salt, user.password_hash)
        except HashingError as e:
            logger.warning(f"Stored credential for user {user.user_id} could not be checked")
            raise AuthenticationError(CURRENT_PASSWORD_FAILED) from e

        if not verified:
            logger.warning(f"Password verification failed for user {user.user_id}")
            raise AuthenticationError(CURRENT_PASSWORD_FAILED)

    def _validate_password(self, plaintext: str) -> None:
        if len(plaintext.encode('utf-8')) > self.hasher.max_password_bytes:
            raise ValidationError(
                f"Password must be at most {self.hasher.max_password_bytes} bytes"
            )

    async def _save_user(self, user: User) -> None:
        # Not exposed; callers go through the specific update operations
        user.touch()
        await self.user_store.save_user(user)


def false_if_none(value: Optional[bool]) -> bool:
    return bool(value) if value is not None else False
