from typing import Optional

from pydantic import BaseModel, ConfigDict

DEFAULT_CURRENCY = "USD"
DEFAULT_THEME = "light"


class UserRead(BaseModel):
    id: int
    username: str
    email: str
    password_hash: str
    created_at: str
    updated_at: str

    model_config = ConfigDict(from_attributes=True)


class UserSettingsRead(BaseModel):
    user_id: int
    default_currency: str
    theme: str
    created_at: str
    updated_at: str

    model_config = ConfigDict(from_attributes=True)


class SettingsDefaults(BaseModel):
    """Settings supplied at signup; omitted fields fall back to USD / light."""

    default_currency: Optional[str] = None
    theme: Optional[str] = None

    def resolved(self) -> dict:
        return {
            "default_currency": self.default_currency or DEFAULT_CURRENCY,
            "theme": self.theme or DEFAULT_THEME,
        }
