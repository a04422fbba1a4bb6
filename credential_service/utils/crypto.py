"""Cryptography utilities (bcrypt over plaintext + random salt)"""
import base64
import secrets
from typing import Tuple, Union

import bcrypt

from credential_service.errors import EntropyError, HashingError

# bcrypt only consumes the first 72 bytes of its input
BCRYPT_MAX_INPUT_BYTES = 72


def generate_salt(key_size: int) -> str:
    """Fill key_size bytes with random data and base64 encode them"""
    if key_size < 1:
        raise EntropyError(f"Cannot generate a salt of {key_size} bytes")
    try:
        key = secrets.token_bytes(key_size)
    except (OSError, NotImplementedError) as e:
        raise EntropyError(f"Random source unavailable: {e}") from e
    return base64.b64encode(key).decode('ascii')


def salted_input(plaintext: str, salt: str) -> bytes:
    """Plaintext first, salt appended"""
    return f"{plaintext}{salt}".encode('utf-8')


def hash_password(plaintext: str, key_size: int, cost: int) -> Tuple[bytes, str]:
    """
    Hash a password with a freshly generated salt.

    Returns:
        Tuple of (bcrypt hash, salt). Both must be stored for verification.

    Raises:
        EntropyError: If the salt cannot be generated
        HashingError: If bcrypt rejects the cost or the salted input is too long
    """
    salt = generate_salt(key_size)

    with_salt = salted_input(plaintext, salt)
    if len(with_salt) > BCRYPT_MAX_INPUT_BYTES:
        raise HashingError(
            f"Salted password exceeds {BCRYPT_MAX_INPUT_BYTES} bytes"
        )

    try:
        hashed = bcrypt.hashpw(with_salt, bcrypt.gensalt(rounds=cost))
    except ValueError as e:
        raise HashingError(f"bcrypt rejected hashing parameters: {e}") from e

    return hashed, salt


def verify_password(plaintext: str, salt: str, stored_hash: Union[bytes, str]) -> bool:
    """
    Verify plaintext against a stored hash and its salt.

    Uses bcrypt's constant-time comparison.

    Raises:
        HashingError: If the stored hash is empty or malformed
    """
    if isinstance(stored_hash, str):
        stored_hash = stored_hash.encode('utf-8')
    if not stored_hash:
        raise HashingError("Stored password hash is empty")

    with_salt = salted_input(plaintext, salt)
    if len(with_salt) > BCRYPT_MAX_INPUT_BYTES:
        # Could never have been hashed, so it cannot match
        return False

    try:
        return bcrypt.checkpw(with_salt, stored_hash)
    except ValueError as e:
        raise HashingError(f"Malformed stored password hash: {e}") from e


class PasswordHasher:
    """Hashing utility bound to an explicit salt size and bcrypt cost."""

    def __init__(self, salt_key_size: int = 24, cost: int = 12):
        self.salt_key_size = salt_key_size
        self.cost = cost

    @classmethod
    def from_settings(cls, settings) -> "PasswordHasher":
        return cls(salt_key_size=settings.SALT_KEY_SIZE, cost=settings.BCRYPT_COST)

    @property
    def salt_length(self) -> int:
        """Length of the base64-encoded salt"""
        return 4 * ((self.salt_key_size + 2) // 3)

    @property
    def max_password_bytes(self) -> int:
        """Longest UTF-8 plaintext that still fits bcrypt once salted"""
        return max(BCRYPT_MAX_INPUT_BYTES - self.salt_length, 0)

    def hash(self, plaintext: str) -> Tuple[bytes, str]:
        return hash_password(plaintext, self.salt_key_size, self.cost)

    def verify(self, plaintext: str, salt: str, stored_hash: Union[bytes, str]) -> bool:
        return verify_password(plaintext, salt, stored_hash)
