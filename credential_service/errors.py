"""Custom exceptions for the credential service."""
from enum import Enum


class CredentialErrorKind(str, Enum):
    """Error kinds callers can branch on without parsing messages."""
    VALIDATION = "validation"
    ENTROPY = "entropy"
    HASHING = "hashing"
    AUTHENTICATION = "authentication"
    NOT_FOUND = "not_found"
    STORE = "store"


class CredentialError(Exception):
    """Base exception for the credential service."""
    kind: CredentialErrorKind

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class ValidationError(CredentialError):
    """Raised when a creation or change request is malformed."""
    kind = CredentialErrorKind.VALIDATION


class EntropyError(CredentialError):
    """Raised when the random source cannot supply salt bytes."""
    kind = CredentialErrorKind.ENTROPY


class HashingError(CredentialError):
    """Raised when bcrypt rejects its inputs (bad cost, malformed hash)."""
    kind = CredentialErrorKind.HASHING


class AuthenticationError(CredentialError):
    """Raised when a supplied password does not match the stored credential."""
    kind = CredentialErrorKind.AUTHENTICATION


class NotFoundError(CredentialError):
    """Raised when a user id does not exist in the store."""
    kind = CredentialErrorKind.NOT_FOUND


class StoreError(CredentialError):
    """Raised when a datastore operation fails."""
    kind = CredentialErrorKind.STORE

    def __init__(self, message: str = "", duplicate: bool = False):
        super().__init__(message)
        self.duplicate = duplicate
