"""User domain entity"""
from dataclasses import dataclass, field
from typing import Optional
from datetime import datetime, timezone


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class User:
    """Stored account with its salted password hash"""
    user_id: str
    username: str
    email: str
    password_hash: bytes = field(repr=False)  # bcrypt output over plaintext + salt
    salt: str = field(repr=False)  # base64 of random bytes, regenerated on every password set
    admin: bool = False
    admin_forced_password_reset: bool = False
    enabled: bool = True
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    def touch(self) -> None:
        self.updated_at = _utcnow()


@dataclass
class UserCreationRequest:
    """Input for account creation. The plaintext password is never stored."""
    username: Optional[str]
    email: Optional[str]
    password: Optional[str]
    admin: Optional[bool] = None
    admin_forced_password_reset: Optional[bool] = None

    def __repr__(self) -> str:
        return (
            f"UserCreationRequest(username={self.username!r}, email={self.email!r}, "
            f"admin={self.admin!r}, admin_forced_password_reset={self.admin_forced_password_reset!r})"
        )
