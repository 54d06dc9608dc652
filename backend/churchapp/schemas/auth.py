"""
ChurchApp Backend — Authentication Schemas
============================================

What:  Login request/response bodies and the decoded token principal.

Token claims (member login):
    {
        "sub": "<user id>", "email": "...", "type": "member",
        "memberId": "...", "role": "ADMINGERAL", "branchId": "...",
        "churchId": "...", "permissions": ["members_view", ...],
        "iat": 1700000000, "exp": 1700604800
    }
A user without a Member profile gets "type": "user", null member fields and
an empty permission list.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from churchapp.models import AdminRole, Role
from churchapp.schemas.common import CamelModel


class LoginRequest(CamelModel):
    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=1)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower() if isinstance(v, str) else v


class LoginUser(CamelModel):
    id: str
    name: str
    email: str
    plan: str = Field(default="free", description="Active plan name, 'free' without subscription")


class LoginMember(CamelModel):
    id: str
    name: str
    role: Role
    branch_id: str
    permissions: List[str] = Field(default_factory=list)


class LoginResponse(CamelModel):
    token: str
    user: LoginUser
    member: Optional[LoginMember] = None


class CurrentUser(CamelModel):
    """
    The authenticated principal, rebuilt from token claims on every request.

    `permissions` and `role` are the login-time snapshot; permission checks
    re-read the database (see dependencies.require_permissions).
    """
    sub: str
    email: str
    type: str = "user"
    member_id: Optional[str] = None
    role: Optional[Role] = None
    branch_id: Optional[str] = None
    church_id: Optional[str] = None
    permissions: List[str] = Field(default_factory=list)

    @property
    def user_id(self) -> str:
        return self.sub


# ── Platform admin ────────────────────────────────────────────────────────

class AdminLoginRequest(CamelModel):
    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=1)


class AdminView(CamelModel):
    id: str
    name: str
    email: str
    admin_role: AdminRole
    last_login_at: Optional[datetime] = None


class AdminLoginResponse(CamelModel):
    token: str
    admin: AdminView
