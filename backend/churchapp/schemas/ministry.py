"""
ChurchApp Backend — Event, Contribution and Devotional Schemas
================================================================

Dates:
    The web client sends ISO 8601; the mobile client sends dd/MM/yyyy.
    Both are accepted and normalized to timezone-aware UTC datetimes.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Annotated, Optional

from pydantic import BeforeValidator, Field, field_validator, model_validator

from churchapp.schemas.common import CamelModel


def parse_flexible_datetime(v):
    if v is None or v == "":
        return None
    if isinstance(v, str):
        try:
            v = datetime.strptime(v.strip(), "%d/%m/%Y")
        except ValueError:
            try:
                v = datetime.fromisoformat(v.strip().replace("Z", "+00:00"))
            except ValueError:
                raise ValueError("Data inválida")
    if isinstance(v, datetime) and v.tzinfo is None:
        v = v.replace(tzinfo=timezone.utc)
    return v


FlexibleDatetime = Annotated[datetime, BeforeValidator(parse_flexible_datetime)]


def _required_text(v: str, message: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError(message)
    return v


# ── Events ────────────────────────────────────────────────────────────────

class EventCreate(CamelModel):
    title: str = Field(max_length=255)
    start_date: FlexibleDatetime
    end_date: Optional[FlexibleDatetime] = Field(
        default=None, description="Defaults to start_date"
    )
    time: Optional[str] = Field(default=None, max_length=20)
    location: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = None
    has_donation: bool = False
    donation_reason: Optional[str] = Field(default=None, max_length=255)
    donation_link: Optional[str] = Field(default=None, max_length=500)
    image_url: Optional[str] = Field(default=None, max_length=500)

    @field_validator("title")
    @classmethod
    def check_title(cls, v: str) -> str:
        return _required_text(v, "Título é obrigatório")

    @model_validator(mode="after")
    def check_dates(self):
        if self.end_date is None:
            self.end_date = self.start_date
        elif self.end_date < self.start_date:
            raise ValueError("Data final deve ser igual ou posterior à data inicial")
        return self


class EventUpdate(CamelModel):
    title: Optional[str] = Field(default=None, max_length=255)
    start_date: Optional[FlexibleDatetime] = None
    end_date: Optional[FlexibleDatetime] = None
    time: Optional[str] = Field(default=None, max_length=20)
    location: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = None
    has_donation: Optional[bool] = None
    donation_reason: Optional[str] = Field(default=None, max_length=255)
    donation_link: Optional[str] = Field(default=None, max_length=500)
    image_url: Optional[str] = Field(default=None, max_length=500)

    @field_validator("title")
    @classmethod
    def check_title(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else _required_text(v, "Título é obrigatório")


class EventResponse(CamelModel):
    id: str
    title: str
    start_date: datetime
    end_date: datetime
    time: Optional[str] = None
    location: Optional[str] = None
    description: Optional[str] = None
    has_donation: bool
    donation_reason: Optional[str] = None
    donation_link: Optional[str] = None
    image_url: Optional[str] = None
    branch_id: str
    created_at: datetime
    updated_at: datetime


# ── Contributions ─────────────────────────────────────────────────────────

class ContributionCreate(CamelModel):
    title: str = Field(max_length=255)
    description: Optional[str] = None
    goal: Optional[Decimal] = Field(default=None, max_digits=12, decimal_places=2)
    end_date: Optional[FlexibleDatetime] = None
    is_active: bool = True

    @field_validator("title")
    @classmethod
    def check_title(cls, v: str) -> str:
        return _required_text(v, "Título é obrigatório")

    @field_validator("goal")
    @classmethod
    def check_goal(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        if v is not None and v <= 0:
            raise ValueError("Meta deve ser positiva")
        return v


class ContributionResponse(CamelModel):
    id: str
    title: str
    description: Optional[str] = None
    goal: Optional[float] = None
    end_date: Optional[datetime] = None
    is_active: bool
    branch_id: str
    created_at: datetime


# ── Devotionals ───────────────────────────────────────────────────────────

class DevotionalCreate(CamelModel):
    title: str = Field(max_length=255)
    passage: str = Field(max_length=255)
    content: Optional[str] = None
    date: Optional[FlexibleDatetime] = None

    @field_validator("title")
    @classmethod
    def check_title(cls, v: str) -> str:
        return _required_text(v, "Título é obrigatório")

    @field_validator("passage")
    @classmethod
    def check_passage(cls, v: str) -> str:
        return _required_text(v, "Passagem bíblica é obrigatória")


class DevotionalUpdate(CamelModel):
    title: Optional[str] = Field(default=None, max_length=255)
    passage: Optional[str] = Field(default=None, max_length=255)
    content: Optional[str] = None
    date: Optional[FlexibleDatetime] = None

    @field_validator("title")
    @classmethod
    def check_title(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else _required_text(v, "Título é obrigatório")

    @field_validator("passage")
    @classmethod
    def check_passage(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else _required_text(v, "Passagem bíblica é obrigatória")


class DevotionalAuthor(CamelModel):
    id: str
    name: str
    avatar_url: Optional[str] = None


class DevotionalResponse(CamelModel):
    id: str
    title: str
    passage: str
    content: Optional[str] = None
    date: datetime
    branch_id: str
    author: DevotionalAuthor
    likes: int = 0
    liked: bool = False
    created_at: datetime
