from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator


class TradeDirection(str, Enum):
    LONG = "long"
    SHORT = "short"


class TradeStatus(str, Enum):
    OPEN = "open"
    CLOSED = "closed"


class TradeRead(BaseModel):
    id: int
    user_id: int
    sub_account_id: Optional[int] = None
    ticker: str
    quantity: float
    entry_price: float
    exit_price: Optional[float] = None
    direction: str
    status: str
    entry_date: str
    exit_date: Optional[str] = None
    notes: Optional[str] = None
    commission: Optional[float] = None
    created_at: str
    updated_at: str

    model_config = ConfigDict(from_attributes=True)


# quantity, direction and status are checked by the database so that invalid
# values surface as constraint violations rather than validation errors.
class TradeCreate(BaseModel):
    user_id: int
    ticker: str
    quantity: float
    entry_price: float
    direction: str
    entry_date: str
    sub_account_id: Optional[int] = None
    exit_price: Optional[float] = None
    exit_date: Optional[str] = None
    notes: Optional[str] = None
    commission: Optional[float] = 0.0
    status: str = TradeStatus.OPEN.value

    @field_validator("direction", "status", mode="before")
    @classmethod
    def _enum_to_value(cls, value):
        if isinstance(value, Enum):
            return value.value
        return value


class TradeClose(BaseModel):
    id: int
    exit_price: float
    exit_date: str
    notes: Optional[str] = None
    commission: Optional[float] = None


class TradeDetailsUpdate(BaseModel):
    """Partial update: only fields that were explicitly set are written."""

    notes: Optional[str] = None
    commission: Optional[float] = None

    def changes(self) -> dict:
        return {field: getattr(self, field) for field in sorted(self.model_fields_set)}
