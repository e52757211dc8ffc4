"""Pydantic models for the refinement chat."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class ChatRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class ChatMessage(BaseModel):
    role: ChatRole
    text: str
    is_update: bool = False

    model_config = {"frozen": True}


class ChatReply(BaseModel):
    """Assistant answer plus an optional full replacement of the active document."""

    reply: str
    updated_content: str | None = None

    @property
    def has_update(self) -> bool:
        return bool(self.updated_content and self.updated_content.strip())
