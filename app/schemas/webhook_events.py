from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, Literal, Tuple


class TelegramUser(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int = Field(..., description="Telegram user id")
    username: Optional[str] = Field(None, description="Telegram username")


class TelegramChat(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int = Field(..., description="Chat id; negative for groups")


class TelegramMessage(BaseModel):
    """Message the inline keyboard was attached to"""
    model_config = ConfigDict(extra="ignore")

    message_id: int
    chat: TelegramChat


class TelegramCallbackQuery(BaseModel):
    """Inline keyboard button press"""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str = Field(..., description="Callback query id, answered with answerCallbackQuery")
    from_user: Optional[TelegramUser] = Field(None, alias="from")
    data: Optional[str] = Field(None, description='Button payload, "attended:<id>" or "no_show:<id>"')
    message: Optional[TelegramMessage] = Field(None, description="Message carrying the button")

    def chat_id(self) -> Optional[str]:
        return str(self.message.chat.id) if self.message else None

    def attendance_action(self) -> Optional[Tuple[Literal["attended", "no_show"], str]]:
        """(action, appointment_id) for attendance buttons, None otherwise"""
        if not self.data or ":" not in self.data:
            return None
        action, appointment_id = self.data.split(":", 1)
        if action not in ("attended", "no_show") or not appointment_id:
            return None
        return action, appointment_id


class TelegramUpdate(BaseModel):
    """Telegram Bot API webhook update; only callback queries are handled"""
    model_config = ConfigDict(extra="ignore")

    update_id: int = Field(..., description="Update identifier")
    callback_query: Optional[TelegramCallbackQuery] = Field(None)

    @field_validator("update_id")
    @classmethod
    def validate_update_id(cls, v: int) -> int:
        if v < 0:
            raise ValueError("update_id must be positive")
        return v
