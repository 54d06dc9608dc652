"""
ChurchApp Backend — Finance Schemas
=====================================

What:  Transaction input validation and the ledger/summary response.

Validation rules (messages are shown verbatim by the clients):
    title     required, non-blank              "Título é obrigatório"
    amount    decimal, strictly positive       "Valor deve ser positivo"
    type      ENTRY | EXIT                     "Tipo deve ser ENTRY ou EXIT"
    category  optional free text
"""

from datetime import datetime
from decimal import Decimal
from typing import Annotated, List, Optional

from pydantic import AfterValidator, BaseModel, BeforeValidator, Field

from churchapp.models import TransactionType
from churchapp.schemas.common import CamelModel


def _validate_type(v):
    if isinstance(v, TransactionType):
        return v
    if not isinstance(v, str) or v not in TransactionType.__members__:
        raise ValueError("Tipo deve ser ENTRY ou EXIT")
    return TransactionType(v)


def _validate_amount(v: Decimal) -> Decimal:
    if v <= 0:
        raise ValueError("Valor deve ser positivo")
    return v


def _validate_title(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("Título é obrigatório")
    return v


Title = Annotated[str, Field(max_length=255), AfterValidator(_validate_title)]
Amount = Annotated[Decimal, Field(max_digits=12, decimal_places=2), AfterValidator(_validate_amount)]
KindOfTransaction = Annotated[TransactionType, BeforeValidator(_validate_type)]


class TransactionCreate(CamelModel):
    title: Title
    amount: Amount
    type: KindOfTransaction
    category: Optional[str] = Field(default=None, max_length=100)


class TransactionUpdate(CamelModel):
    """Partial update; omitted fields keep their stored value."""

    title: Optional[Title] = None
    amount: Optional[Amount] = None
    type: Optional[KindOfTransaction] = None
    category: Optional[str] = Field(default=None, max_length=100)


class TransactionResponse(CamelModel):
    id: str
    title: str
    amount: float
    type: TransactionType
    category: Optional[str] = None
    branch_id: str
    created_by_user_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class FinanceSummary(BaseModel):
    entries: float = 0
    exits: float = 0
    total: float = 0


class FinanceOverview(BaseModel):
    transactions: List[TransactionResponse]
    summary: FinanceSummary
