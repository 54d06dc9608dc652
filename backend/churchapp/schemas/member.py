"""
ChurchApp Backend — Member Schemas
====================================

What:  Member create/update bodies and the member view returned by /members.
How:   MemberResponse flattens the Permission rows into a list of type
       strings and embeds the position summary; both relationships must be
       eagerly loaded by the service before validation.
"""

from datetime import date, datetime
from typing import List, Optional

from pydantic import Field, field_validator

from churchapp.models import Role
from churchapp.schemas.common import CamelModel


class PositionSummary(CamelModel):
    id: str
    name: str


class MemberCreate(CamelModel):
    name: str = Field(max_length=255)
    email: str = Field(min_length=3, max_length=255)
    password: Optional[str] = Field(
        default=None,
        min_length=6,
        description="When provided a login User is created and linked to the member",
    )
    role: Role = Role.MEMBER
    branch_id: Optional[str] = Field(default=None, description="Defaults to the caller's branch")
    position_id: Optional[str] = None
    phone: Optional[str] = Field(default=None, max_length=50)
    address: Optional[str] = None
    birth_date: Optional[date] = None
    avatar_url: Optional[str] = Field(default=None, max_length=500)
    permissions: List[str] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Nome é obrigatório")
        return v

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        v = v.strip().lower()
        if "@" not in v:
            raise ValueError("Email inválido")
        return v


class MemberUpdate(CamelModel):
    name: Optional[str] = Field(default=None, max_length=255)
    role: Optional[Role] = None
    position_id: Optional[str] = None
    phone: Optional[str] = Field(default=None, max_length=50)
    address: Optional[str] = None
    birth_date: Optional[date] = None
    avatar_url: Optional[str] = Field(default=None, max_length=500)

    @field_validator("name")
    @classmethod
    def check_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("Nome é obrigatório")
        return v


class MemberResponse(CamelModel):
    id: str
    name: str
    email: str
    role: Role
    branch_id: str
    user_id: Optional[str] = None
    position_id: Optional[str] = None
    position: Optional[PositionSummary] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    birth_date: Optional[date] = None
    avatar_url: Optional[str] = None
    created_at: datetime
    permissions: List[str] = Field(default_factory=list)

    @field_validator("permissions", mode="before")
    @classmethod
    def flatten_permissions(cls, v):
        return sorted(p if isinstance(p, str) else p.type for p in v or [])
