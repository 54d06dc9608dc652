"""Request/response bodies for the permission endpoints."""

from typing import List

from pydantic import BaseModel, Field, field_validator

from churchapp.schemas.common import CamelModel


class PermissionView(CamelModel):
    type: str


class PermissionAssignRequest(CamelModel):
    permissions: List[str] = Field(min_length=1)

    @field_validator("permissions")
    @classmethod
    def strip_types(cls, v: List[str]) -> List[str]:
        cleaned = [p.strip() for p in v]
        if any(not p for p in cleaned):
            raise ValueError("Tipo de permissão não pode ser vazio")
        return cleaned


class PermissionAssignResponse(BaseModel):
    success: bool = True
    added: int


class PermissionRevokeResponse(BaseModel):
    success: bool = True
    removed: int
