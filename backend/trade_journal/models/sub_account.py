from typing import Optional

from pydantic import BaseModel, ConfigDict


class SubAccountRead(BaseModel):
    id: int
    user_id: int
    name: str
    description: Optional[str] = None
    broker: Optional[str] = None
    created_at: str
    updated_at: str

    model_config = ConfigDict(from_attributes=True)
