"""
ChurchApp Backend — ORM Models
================================

Importing this package registers every table on Base.metadata, which is what
Alembic autogenerate and the test suite's create_all rely on.
"""

from churchapp.models.admin import AdminRole, AdminUser
from churchapp.models.church import Branch, Church, ChurchPosition
from churchapp.models.finance import Transaction, TransactionType
from churchapp.models.member import PERMISSION_TYPES, Member, Permission, Role
from churchapp.models.ministry import Contribution, Devotional, DevotionalLike, Event
from churchapp.models.user import (
    SUBSCRIPTION_ACTIVE,
    SUBSCRIPTION_CANCELED,
    SUBSCRIPTION_PENDING,
    Plan,
    Subscription,
    User,
)

__all__ = [
    "AdminRole",
    "AdminUser",
    "Branch",
    "Church",
    "ChurchPosition",
    "Contribution",
    "Devotional",
    "DevotionalLike",
    "Event",
    "Member",
    "PERMISSION_TYPES",
    "Permission",
    "Plan",
    "Role",
    "SUBSCRIPTION_ACTIVE",
    "SUBSCRIPTION_CANCELED",
    "SUBSCRIPTION_PENDING",
    "Subscription",
    "Transaction",
    "TransactionType",
    "User",
]
