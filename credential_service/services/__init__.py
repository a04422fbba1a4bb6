"""Business logic services for credential management."""

from .credential_service import CredentialService

__all__ = ["CredentialService"]
