"""API response models"""
from pydantic import BaseModel
from datetime import datetime

from credential_service.domain.user import User


class UserResponse(BaseModel):
    """Public view of a user; never carries the hash or salt"""
    user_id: str
    username: str
    email: str
    admin: bool
    admin_forced_password_reset: bool
    enabled: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, user: User):
        return cls(
            user_id=user.user_id,
            username=user.username,
            email=user.email,
            admin=user.admin,
            admin_forced_password_reset=user.admin_forced_password_reset,
            enabled=user.enabled,
            created_at=user.created_at,
            updated_at=user.updated_at
        )


class StatusResponse(BaseModel):
    status: str


class ErrorResponse(BaseModel):
    detail: str
    kind: str
