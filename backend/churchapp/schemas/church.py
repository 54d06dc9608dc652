"""
ChurchApp Backend — Church and Branch Schemas
===============================================

What:  Bodies for church onboarding and branch management.
How:   Branch listings embed a ChurchSummary so the clients can render the
       church name without a second round trip.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from churchapp.schemas.common import CamelModel


def _required_name(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("Nome é obrigatório")
    return v


class ChurchCreate(CamelModel):
    name: str = Field(max_length=255)
    branch_name: Optional[str] = Field(default=None, max_length=255)
    pastor_name: Optional[str] = Field(default=None, max_length=255)
    address: Optional[str] = None
    phone: Optional[str] = Field(default=None, max_length=50)
    email: Optional[str] = Field(default=None, max_length=255)
    website: Optional[str] = Field(default=None, max_length=500)
    logo_url: Optional[str] = Field(default=None, max_length=500)
    avatar_url: Optional[str] = Field(default=None, max_length=500)

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str) -> str:
        return _required_name(v)


class ChurchUpdate(CamelModel):
    name: Optional[str] = Field(default=None, max_length=255)
    address: Optional[str] = None
    phone: Optional[str] = Field(default=None, max_length=50)
    email: Optional[str] = Field(default=None, max_length=255)
    website: Optional[str] = Field(default=None, max_length=500)
    logo_url: Optional[str] = Field(default=None, max_length=500)
    avatar_url: Optional[str] = Field(default=None, max_length=500)

    @field_validator("name")
    @classmethod
    def check_name(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else _required_name(v)


class ChurchSummary(CamelModel):
    id: str
    name: str
    logo_url: Optional[str] = None
    avatar_url: Optional[str] = None


class BranchResponse(CamelModel):
    id: str
    name: str
    pastor_name: Optional[str] = None
    church_id: str
    is_main_branch: bool
    created_at: datetime


class BranchWithChurch(BranchResponse):
    church: ChurchSummary


class ChurchResponse(CamelModel):
    id: str
    name: str
    logo_url: Optional[str] = None
    avatar_url: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    is_active: bool
    created_by_user_id: Optional[str] = None
    created_at: datetime
    branches: List[BranchResponse] = Field(default_factory=list)


class ChurchCreateResponse(CamelModel):
    """Onboarding result: the new church, its main branch and the caller's member id."""

    church: ChurchResponse
    branch: BranchResponse
    member_id: str
    positions_created: int


class BranchCreate(CamelModel):
    name: str = Field(max_length=255)
    pastor_name: Optional[str] = Field(default=None, max_length=255)
    church_id: str

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str) -> str:
        return _required_name(v)
