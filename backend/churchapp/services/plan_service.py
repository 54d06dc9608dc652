"""
ChurchApp Backend — Plan Entitlements
=======================================

What:  Resolves a user's effective plan and enforces its member/branch limits.
How:   The effective plan is the plan of the user's newest active
       subscription. Limits of NULL mean unlimited; users with no active
       subscription get the free tier.

Who:   ChurchService / BranchService / MemberService call the check_* helpers
       before inserting; AuthService uses resolve_plan_name for the login view.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from churchapp.exceptions import PlanLimitError
from churchapp.models import SUBSCRIPTION_ACTIVE, Branch, Member, Plan, Subscription

logger = logging.getLogger(__name__)

FREE_PLAN_NAME = "free"
FREE_PLAN_MAX_MEMBERS = 20
FREE_PLAN_MAX_BRANCHES = 1


@dataclass(frozen=True)
class PlanLimits:
    name: str
    max_members: Optional[int]
    max_branches: Optional[int]


FREE_LIMITS = PlanLimits(FREE_PLAN_NAME, FREE_PLAN_MAX_MEMBERS, FREE_PLAN_MAX_BRANCHES)


async def get_active_plan(db: AsyncSession, user_id: Optional[str]) -> Optional[Plan]:
    if not user_id:
        return None
    stmt = (
        select(Plan)
        .join(Subscription, Subscription.plan_id == Plan.id)
        .where(Subscription.user_id == user_id, Subscription.status == SUBSCRIPTION_ACTIVE)
        .order_by(Subscription.started_at.desc())
        .limit(1)
    )
    return (await db.execute(stmt)).scalar_one_or_none()


def resolve_plan_name(plan: Optional[Plan]) -> str:
    return plan.name if plan is not None else FREE_PLAN_NAME


async def get_limits(db: AsyncSession, user_id: Optional[str]) -> PlanLimits:
    plan = await get_active_plan(db, user_id)
    if plan is None:
        return FREE_LIMITS
    return PlanLimits(plan.name, plan.max_members, plan.max_branches)


async def check_members_limit(db: AsyncSession, user_id: Optional[str], church_id: str) -> None:
    """Raise PlanLimitError when the church already has max_members members."""
    limits = await get_limits(db, user_id)
    if limits.max_members is None:
        return
    current = (
        await db.execute(
            select(func.count(Member.id))
            .join(Branch, Branch.id == Member.branch_id)
            .where(Branch.church_id == church_id)
        )
    ).scalar_one()
    if current >= limits.max_members:
        logger.warning(
            "Member limit reached for church %s on plan %s (%d/%d)",
            church_id, limits.name, current, limits.max_members,
        )
        raise PlanLimitError(resource="membros", limit=limits.max_members, current=current)


async def check_branches_limit(db: AsyncSession, user_id: Optional[str], church_id: str) -> None:
    """Raise PlanLimitError when the church already has max_branches branches."""
    limits = await get_limits(db, user_id)
    if limits.max_branches is None:
        return
    current = (
        await db.execute(select(func.count(Branch.id)).where(Branch.church_id == church_id))
    ).scalar_one()
    if current >= limits.max_branches:
        logger.warning(
            "Branch limit reached for church %s on plan %s (%d/%d)",
            church_id, limits.name, current, limits.max_branches,
        )
        raise PlanLimitError(resource="filiais", limit=limits.max_branches, current=current)
