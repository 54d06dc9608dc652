"""Listings returned by the platform admin panel."""

from datetime import datetime

from churchapp.schemas.common import CamelModel


class AdminUserListItem(CamelModel):
    id: str
    name: str
    email: str
    plan: str
    has_member: bool
    created_at: datetime


class AdminChurchListItem(CamelModel):
    id: str
    name: str
    is_active: bool
    branch_count: int
    created_at: datetime
