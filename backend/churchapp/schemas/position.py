"""Church position (cargo) request/response bodies."""

from datetime import datetime

from pydantic import Field, field_validator

from churchapp.schemas.common import CamelModel


class PositionWrite(CamelModel):
    name: str = Field(max_length=255)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Nome do cargo é obrigatório")
        return v


class PositionResponse(CamelModel):
    id: str
    name: str
    church_id: str
    is_default: bool
    member_count: int = 0
    created_at: datetime
    updated_at: datetime
