"""Pydantic schemas for task request/response validation."""

from pydantic import BaseModel, ConfigDict, field_validator
from datetime import date, datetime
from typing import Optional, Literal

Priority = Literal["high", "medium", "low"]


def clean_title(value: Optional[str]) -> Optional[str]:
    """Retire les espaces autour du titre ; un titre vide est refusé."""
    if value is None:
        return value
    value = value.strip()
    if not value:
        raise ValueError("Title is required")
    return value


class TaskCreate(BaseModel):
    title: str
    priority: Priority = "medium"
    due_date: Optional[date] = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, value):
        return clean_title(value)


class TaskUpdate(BaseModel):
    """Mise à jour partielle : seuls les champs envoyés sont appliqués."""

    title: Optional[str] = None
    done: Optional[bool] = None
    priority: Optional[Priority] = None
    due_date: Optional[date] = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, value):
        if value is None:
            raise ValueError("Title is required")
        return clean_title(value)

    @field_validator("priority", "done")
    @classmethod
    def not_null(cls, value):
        # due_date peut être remis à null, pas la priorité ni done
        if value is None:
            raise ValueError("must not be null")
        return value


class TaskResponse(BaseModel):
    id: int
    user_id: int
    title: str
    done: bool
    priority: Priority
    due_date: Optional[date] = None
    remote_id: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TaskCountsResponse(BaseModel):
    counts: dict[str, int]
