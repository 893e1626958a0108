"""Schemas for the Google Tasks sync endpoint."""

from pydantic import BaseModel, field_validator
from typing import Optional, Literal

# Anciens noms d'actions (client web d'origine) → actions actuelles
ACTION_ALIASES = {"create": "link", "update": "refresh", "delete": "unlink"}


class SyncRequest(BaseModel):
    task_id: int
    action: Literal["link", "refresh", "unlink"]

    @field_validator("action", mode="before")
    @classmethod
    def resolve_alias(cls, value):
        if isinstance(value, str):
            return ACTION_ALIASES.get(value, value)
        return value


class SyncResponse(BaseModel):
    action: str
    success: bool
    remote_id: Optional[str] = None
    warning: Optional[str] = None
