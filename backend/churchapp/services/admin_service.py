"""Read-only listings for the platform admin panel."""

from typing import List

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from churchapp.models import SUBSCRIPTION_ACTIVE, Branch, Church, Subscription, User
from churchapp.schemas.admin import AdminChurchListItem, AdminUserListItem
from churchapp.services.plan_service import FREE_PLAN_NAME


class AdminService:

    async def list_users(self, db: AsyncSession) -> List[AdminUserListItem]:
        result = await db.execute(
            select(User)
            .options(
                selectinload(User.subscriptions).selectinload(Subscription.plan),
                selectinload(User.member),
            )
            .order_by(User.created_at.desc())
        )
        items = []
        for user in result.scalars().all():
            active = sorted(
                (s for s in user.subscriptions if s.status == SUBSCRIPTION_ACTIVE),
                key=lambda s: s.started_at,
                reverse=True,
            )
            items.append(AdminUserListItem(
                id=user.id,
                name=user.name,
                email=user.email,
                plan=active[0].plan.name if active else FREE_PLAN_NAME,
                has_member=user.member is not None,
                created_at=user.created_at,
            ))
        return items

    async def list_churches(self, db: AsyncSession) -> List[AdminChurchListItem]:
        branch_count = (
            select(func.count(Branch.id))
            .where(Branch.church_id == Church.id)
            .correlate(Church)
            .scalar_subquery()
        )
        result = await db.execute(
            select(Church, branch_count).order_by(Church.created_at.desc())
        )
        return [
            AdminChurchListItem(
                id=church.id,
                name=church.name,
                is_active=church.is_active,
                branch_count=count,
                created_at=church.created_at,
            )
            for church, count in result.all()
        ]


admin_service = AdminService()
