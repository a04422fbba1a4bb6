"""API request models"""
from pydantic import BaseModel
from typing import Optional

from credential_service.domain.user import UserCreationRequest


class CreateUserRequest(BaseModel):
    username: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    admin: Optional[bool] = None
    admin_forced_password_reset: Optional[bool] = None

    def to_domain(self) -> UserCreationRequest:
        return UserCreationRequest(
            username=self.username,
            email=self.email,
            password=self.password,
            admin=self.admin,
            admin_forced_password_reset=self.admin_forced_password_reset
        )


class ChangePasswordRequest(BaseModel):
    old_password: str
    new_password: str


class UpdateAdminRoleRequest(BaseModel):
    admin: bool


class UpdateUserStatusRequest(BaseModel):
    enabled: bool
    password: Optional[str] = None  # Account password, checked when the policy requires it
