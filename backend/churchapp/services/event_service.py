"""Branch events: agenda listing, next upcoming event and CRUD."""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from churchapp.exceptions import NotFoundError, ValidationError
from churchapp.models import Event
from churchapp.schemas.ministry import EventCreate, EventUpdate

logger = logging.getLogger(__name__)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class EventService:

    async def list_events(self, db: AsyncSession, branch_id: str) -> List[Event]:
        result = await db.execute(
            select(Event).where(Event.branch_id == branch_id).order_by(Event.start_date)
        )
        return list(result.scalars().all())

    async def next_event(
        self, db: AsyncSession, branch_id: str, now: Optional[datetime] = None
    ) -> Optional[Event]:
        now = now or datetime.now(timezone.utc)
        result = await db.execute(
            select(Event)
            .where(Event.branch_id == branch_id, Event.start_date >= now)
            .order_by(Event.start_date)
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def get_event(self, db: AsyncSession, event_id: str, branch_id: str) -> Event:
        event = await db.get(Event, event_id)
        if event is None or event.branch_id != branch_id:
            raise NotFoundError(message="Evento não encontrado", resource="event", resource_id=event_id)
        return event

    async def create_event(self, db: AsyncSession, branch_id: str, data: EventCreate) -> Event:
        event = Event(branch_id=branch_id, **data.model_dump())
        db.add(event)
        await db.flush()
        await db.refresh(event)
        logger.info("Event %s created in branch %s", event.id, branch_id)
        return event

    async def update_event(
        self, db: AsyncSession, event_id: str, branch_id: str, data: EventUpdate
    ) -> Event:
        event = await self.get_event(db, event_id, branch_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            if value is None and field in ("title", "start_date", "end_date", "has_donation"):
                continue
            setattr(event, field, value)

        if _as_utc(event.end_date) < _as_utc(event.start_date):
            raise ValidationError(
                message="Data final deve ser igual ou posterior à data inicial",
                field="endDate",
            )
        await db.flush()
        await db.refresh(event)
        return event

    async def delete_event(self, db: AsyncSession, event_id: str, branch_id: str) -> None:
        event = await self.get_event(db, event_id, branch_id)
        await db.delete(event)
        await db.flush()
        logger.info("Event %s deleted from branch %s", event_id, branch_id)


event_service = EventService()
